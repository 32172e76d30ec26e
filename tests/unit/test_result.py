import pytest

from docstore_lib.errors import NotFoundError
from docstore_lib.store.result import Result


def test_present_and_absent():
    r = Result.of(5)
    assert r.present and bool(r)
    assert r.get() == 5
    assert r.value == 5

    a = Result.absent()
    assert not a.present and not bool(a)
    assert a.value is None
    with pytest.raises(NotFoundError):
        a.get()


def test_falsy_values_are_still_present():
    assert Result.of('').present
    assert Result.of(None).present
    assert Result.of(None) != Result.absent()


def test_or_else_and_map():
    assert Result.absent().or_else('x') == 'x'
    assert Result.of(2).map(lambda v: v * 3) == Result.of(6)
    assert Result.absent().map(lambda v: v * 3) == Result.absent()
    assert repr(Result.absent()) == 'Result.absent()'
