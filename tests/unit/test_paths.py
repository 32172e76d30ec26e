import pytest

from docstore_lib.backend.interfaces import RootKind
from docstore_lib.errors import ConfigurationError
from docstore_lib.store.paths import StorePath


def test_parse_plain_path_defaults_to_app_root():
    p = StorePath.parse('just-dogs/dogs')
    assert p.segments == ('just-dogs', 'dogs')
    assert p.root is RootKind.APP_DATA
    assert p.name == 'dogs'
    assert str(p) == 'app://just-dogs/dogs'


def test_parse_schemes():
    assert StorePath.parse('app://a/b').root is RootKind.APP_DATA
    assert StorePath.parse('root://a').root is RootKind.DRIVE


@pytest.mark.parametrize('bad', ['ftp://a/b', '', 'a//b', '/a', 'a/', 'app://'])
def test_parse_rejects_malformed(bad):
    with pytest.raises(ConfigurationError):
        StorePath.parse(bad)


def test_segments_are_case_sensitive():
    assert StorePath.parse('Dogs') != StorePath.parse('dogs')
    assert StorePath.parse('a/b') == StorePath.parse('app://a/b')
    assert StorePath.parse('a/b') != StorePath.parse('root://a/b')


def test_child_parent_and_keys():
    p = StorePath.parse('journals/p')
    c = p.child('entry1.json')
    assert c.segments == ('journals', 'p', 'entry1.json')
    assert c.parent == p
    assert StorePath.parse('one').parent is None
    assert c.key(1) == 'appDataFolder:/journals'
    assert c.key() == 'appDataFolder:/journals/p/entry1.json'
    assert StorePath.parse('root://journals').key() != StorePath.parse('journals').key()


@pytest.mark.parametrize('title', ['', 'a/b'])
def test_child_rejects_bad_title(title):
    with pytest.raises(ConfigurationError):
        StorePath.parse('a').child(title)
