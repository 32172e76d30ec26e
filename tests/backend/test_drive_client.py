import pytest
import requests

from docstore_lib.backend import get_client
from docstore_lib.backend.drive_client import API_URL, UPLOAD_URL, DriveBackendClient
from docstore_lib.backend.interfaces import MIME_TYPE_FOLDER, ResourceKind, RootKind
from docstore_lib.backend.memory_client import MemoryBackendClient
from docstore_lib.config.config import ServerConfig
from docstore_lib.errors import BackendError, ContentNotReadyError
from docstore_lib.store import Text, create_store


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, content=b''):
        self.status_code = status_code
        self._json = json_data
        self.content = content

    def json(self):
        if self._json is None:
            raise ValueError('no json')
        return self._json


class FakeSession:
    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(*responses, **kwargs):
    session = FakeSession(*responses)
    return DriveBackendClient('tok', session=session, **kwargs), session


def test_requires_token():
    with pytest.raises(RuntimeError):
        DriveBackendClient('', session=FakeSession())


def test_sets_bearer_header():
    _, session = _client()
    assert session.headers['Authorization'] == 'Bearer tok'


def test_root_resource():
    client, session = _client(FakeResponse(json_data={'id': 'ROOT', 'name': 'My Drive', 'mimeType': MIME_TYPE_FOLDER}))
    root = client.get_root_resource(RootKind.DRIVE)
    assert root.id == 'ROOT'
    assert root.is_folder
    method, url, _ = session.calls[0]
    assert (method, url) == ('GET', f'{API_URL}/files/root')


def test_list_children_query_and_parsing():
    page = {
        'nextPageToken': 'next',
        'files': [
            {'id': 'f1', 'name': 'dogs', 'mimeType': MIME_TYPE_FOLDER, 'parents': ['p']},
            {'id': 'f2', 'name': 'rex.json', 'mimeType': 'application/json', 'parents': ['p'], 'size': '14'},
        ],
    }
    client, session = _client(FakeResponse(json_data=page), spaces=['appDataFolder', 'drive'])
    result = client.list_children('p', "name = 'dogs'", 'tok1')

    _, url, kwargs = session.calls[0]
    assert url == f'{API_URL}/files'
    params = kwargs['params']
    assert params['q'] == "'p' in parents and trashed = false and name = 'dogs'"
    assert params['spaces'] == 'appDataFolder,drive'
    assert params['pageSize'] == 1000
    assert params['pageToken'] == 'tok1'

    assert result.next_page_token == 'next'
    assert [r.kind for r in result.items] == [ResourceKind.FOLDER, ResourceKind.FILE]
    assert result.items[1].size == 14
    assert result.items[1].parent_id == 'p'


def test_create_folder_and_file():
    client, session = _client(
        FakeResponse(json_data={'id': 'n1', 'name': 'dogs', 'mimeType': MIME_TYPE_FOLDER}),
        FakeResponse(json_data={'id': 'n2', 'name': 'rex.json'}),
    )
    folder = client.create_resource('p', 'dogs', ResourceKind.FOLDER)
    doc = client.create_resource('n1', 'rex.json', ResourceKind.FILE)
    assert folder.is_folder and not doc.is_folder
    assert session.calls[0][2]['json'] == {'name': 'dogs', 'parents': ['p'], 'mimeType': MIME_TYPE_FOLDER}
    assert session.calls[1][2]['json'] == {'name': 'rex.json', 'parents': ['n1']}


def test_download_and_upload():
    client, session = _client(FakeResponse(content=b'{"a":1}'), FakeResponse())
    assert client.get_content('f2') == b'{"a":1}'
    client.update_content('f2', b'{"a":2}', 'application/json')

    method, url, kwargs = session.calls[0]
    assert kwargs['params'] == {'alt': 'media'}
    method, url, kwargs = session.calls[1]
    assert (method, url) == ('PATCH', f'{UPLOAD_URL}/files/f2')
    assert kwargs['params'] == {'uploadType': 'media'}
    assert kwargs['headers'] == {'Content-Type': 'application/json'}
    assert kwargs['data'] == b'{"a":2}'


def test_not_downloadable_yet():
    body = {'error': {'errors': [{'reason': 'fileNotDownloadable'}]}}
    client, _ = _client(FakeResponse(403, json_data=body))
    with pytest.raises(ContentNotReadyError):
        client.get_content('f2')


def test_http_errors_map_to_backend_error():
    client, _ = _client(
        FakeResponse(404),
        FakeResponse(403, json_data={'error': {'errors': [{'reason': 'insufficientPermissions'}]}}),
    )
    with pytest.raises(BackendError) as info:
        client.delete_resource('gone')
    assert info.value.status == 404
    with pytest.raises(BackendError) as info:
        client.get_content('f2')
    assert not isinstance(info.value, ContentNotReadyError)


def test_transport_errors_map_to_backend_error():
    client, _ = _client(requests.ConnectionError('down'))
    with pytest.raises(BackendError):
        client.get_root_resource(RootKind.APP_DATA)


def test_get_client(monkeypatch):
    assert isinstance(get_client('memory'), MemoryBackendClient)
    monkeypatch.delenv('DOCSTORE_ACCESS_TOKEN', raising=False)
    with pytest.raises(RuntimeError):
        get_client('drive')
    with pytest.raises(ValueError):
        get_client('ftp')


def _folder(id, name):
    return FakeResponse(json_data={'id': id, 'name': name, 'mimeType': MIME_TYPE_FOLDER})


def _listings(session):
    return [(kw['params']['q'], kw['params']['spaces']) for m, u, kw in session.calls if u == f'{API_URL}/files' and m == 'GET']


def test_drive_root_paths_search_the_drive_space():
    client, session = _client(
        _folder('ROOT', 'My Drive'),
        FakeResponse(json_data={'files': []}),
        _folder('S1', 'shared'),
        FakeResponse(json_data={'files': []}),
        FakeResponse(json_data={'id': 'N1', 'name': 'n.txt'}),
        FakeResponse(),
        spaces=ServerConfig().spaces,
    )
    create_store(client).save('root://shared', Text('n.txt', 'hi'))

    assert _listings(session) == [
        ("'ROOT' in parents and trashed = false and name = 'shared'", 'drive'),
        ("'S1' in parents and trashed = false and name = 'n.txt'", 'drive'),
    ]


def test_app_data_paths_search_the_app_data_space():
    client, session = _client(
        _folder('APP', 'appDataFolder'),
        FakeResponse(json_data={'files': [{'id': 'D1', 'name': 'dogs', 'mimeType': MIME_TYPE_FOLDER}]}),
        FakeResponse(json_data={'files': []}),
        spaces=['drive'],
    )
    assert not create_store(client).get('dogs/rex.json').present
    assert [spaces for _, spaces in _listings(session)] == ['appDataFolder', 'appDataFolder']


def test_unknown_parents_use_configured_spaces():
    client, session = _client(FakeResponse(json_data={'files': []}))
    client.list_children('elsewhere')
    assert _listings(session)[0][1] == 'appDataFolder,drive'
