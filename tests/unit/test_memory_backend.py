import pytest

from docstore_lib.backend.interfaces import ResourceKind, RootKind, name_query, parse_query, quote
from docstore_lib.backend.memory_client import MemoryBackendClient
from docstore_lib.errors import BackendError, ContentNotReadyError


def test_memory_basic_operations():
    m = MemoryBackendClient()
    root = m.get_root_resource(RootKind.APP_DATA)
    assert root.is_folder

    folder = m.create_resource(root.id, 'dogs', ResourceKind.FOLDER)
    doc = m.create_resource(folder.id, 'rex.json', ResourceKind.FILE)

    # new files hold no bytes until written
    assert m.get_content(doc.id) == b''
    m.update_content(doc.id, b'{"name":"Rex"}', 'application/json')
    assert m.get_content(doc.id) == b'{"name":"Rex"}'

    page = m.list_children(folder.id)
    assert [r.name for r in page.items] == ['rex.json']
    assert page.items[0].size == len(b'{"name":"Rex"}')
    assert page.next_page_token is None


def test_roots_are_separate():
    m = MemoryBackendClient()
    app = m.get_root_resource(RootKind.APP_DATA)
    drive = m.get_root_resource(RootKind.DRIVE)
    m.create_resource(app.id, 'x', ResourceKind.FOLDER)
    assert m.list_children(drive.id).items == ()


def test_pagination():
    m = MemoryBackendClient(page_size=2)
    root = m.get_root_resource(RootKind.APP_DATA)
    for i in range(5):
        m.create_resource(root.id, f'f{i}', ResourceKind.FILE)
    names = []
    token = None
    pages = 0
    while True:
        page = m.list_children(root.id, None, token)
        names.extend(r.name for r in page.items)
        pages += 1
        token = page.next_page_token
        if not token:
            break
    assert names == [f'f{i}' for i in range(5)]
    assert pages == 3


def test_query_filters():
    m = MemoryBackendClient()
    root = m.get_root_resource(RootKind.APP_DATA)
    m.create_resource(root.id, 'spike', ResourceKind.FILE)
    m.create_resource(root.id, 'spot', ResourceKind.FILE)
    m.create_resource(root.id, "it's", ResourceKind.FOLDER)

    def names(q):
        return sorted(r.name for r in m.list_children(root.id, q).items)

    assert names(name_query('spike')) == ['spike']
    assert names("name contains 'sp'") == ['spike', 'spot']
    assert names("name contains 'sp' and name != 'spot'") == ['spike']
    assert names("mimeType = 'application/vnd.google-apps.folder'") == ["it's"]
    assert names(name_query("it's")) == ["it's"]
    with pytest.raises(BackendError):
        m.list_children(root.id, 'modifiedTime > 3')


def test_duplicate_names_are_allowed():
    m = MemoryBackendClient()
    root = m.get_root_resource(RootKind.APP_DATA)
    m.create_resource(root.id, 'dup', ResourceKind.FOLDER)
    m.create_resource(root.id, 'dup', ResourceKind.FOLDER)
    assert len(list(m.children_named(root.id, 'dup'))) == 2


def test_delete_removes_subtree():
    m = MemoryBackendClient()
    root = m.get_root_resource(RootKind.APP_DATA)
    a = m.create_resource(root.id, 'a', ResourceKind.FOLDER)
    b = m.create_resource(a.id, 'b', ResourceKind.FILE)
    m.delete_resource(a.id)
    assert m.resource_count() == 0
    with pytest.raises(BackendError):
        m.get_content(b.id)
    with pytest.raises(BackendError):
        m.delete_resource(root.id)


def test_not_ready_content():
    m = MemoryBackendClient()
    root = m.get_root_resource(RootKind.APP_DATA)
    f = m.create_resource(root.id, 'f', ResourceKind.FILE)
    m.mark_not_ready(f.id)
    with pytest.raises(ContentNotReadyError):
        m.get_content(f.id)
    m.mark_not_ready(f.id, False)
    assert m.get_content(f.id) == b''


def test_query_helpers():
    assert quote("it's") == "'it\\'s'"
    assert quote('a\\b') == "'a\\\\b'"
    assert parse_query(name_query("it's")) == [('name', '=', "it's")]
    assert parse_query("name = 'a and b' and mimeType != 'x'") == [
        ('name', '=', 'a and b'),
        ('mimeType', '!=', 'x'),
    ]
    assert parse_query('') == []
