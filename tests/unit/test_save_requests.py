import pytest

from docstore_lib.errors import ConfigurationError
from docstore_lib.store.codec import JSONCodec, YAMLCodec
from docstore_lib.store.save_requests import (
    MEDIA_TYPE_TEXT,
    Document,
    MetadataOnly,
    RawBytes,
    Text,
    to_payload,
)


def test_payload_per_variant():
    codec = JSONCodec()
    assert to_payload(RawBytes('a.bin', 'image/png', b'\x89PNG'), codec) == (b'\x89PNG', 'image/png')
    assert to_payload(Text('a.txt', 'hëllo'), codec) == ('hëllo'.encode('utf-8'), MEDIA_TYPE_TEXT)
    assert to_payload(Document('a.json', {'n': 1}), codec) == (b'{"n":1}', 'application/json')
    assert to_payload(MetadataOnly('placeholder'), codec) is None


def test_document_codec_overrides_default():
    data, media_type = to_payload(Document('a.yml', {'n': 1}, codec=YAMLCodec()), JSONCodec())
    assert data == b'n: 1\n'
    assert media_type == 'application/yaml'


def test_unknown_request_type():
    with pytest.raises(TypeError):
        to_payload(object(), JSONCodec())


@pytest.mark.parametrize('title', ['', 'a/b', None])
def test_titles_must_be_single_segment(title):
    with pytest.raises(ConfigurationError):
        Text(title, 'x')


def test_requests_are_immutable():
    req = Text('a.txt', 'x')
    with pytest.raises(Exception):
        req.title = 'b.txt'
