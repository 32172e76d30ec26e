import threading
import time
from collections import Counter
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class Dog(BaseModel):
    name: str = ""
    created: Optional[datetime] = None


class CountingClient:
    """Wrap a backend client, counting calls and in-flight concurrency.

    `delay` sleeps inside the wrapped calls so concurrent callers overlap.
    `fail_on` maps a method name to an exception raised on its next call
    (or every call when `fail_always` is set).

    Usage in tests:
        counting = CountingClient(MemoryBackendClient())
        store = create_store(counting)
        store.get('a/b')
        assert counting.calls['list_children'] == 1
    """

    def __init__(self, inner: Any, delay: float = 0.0):
        self.inner = inner
        self.delay = delay
        self.calls: Counter = Counter()
        self.fail_on: dict = {}
        self.fail_always = False
        self._lock = threading.Lock()
        self._in_flight: Counter = Counter()
        self.max_in_flight: Counter = Counter()

    def reset(self) -> None:
        with self._lock:
            self.calls.clear()
            self.max_in_flight.clear()

    def _call(self, name: str, *args, **kwargs):
        with self._lock:
            self.calls[name] += 1
            self._in_flight[name] += 1
            self.max_in_flight[name] = max(self.max_in_flight[name], self._in_flight[name])
            exc = self.fail_on.get(name)
            if exc is not None and not self.fail_always:
                del self.fail_on[name]
        try:
            if self.delay:
                time.sleep(self.delay)
            if exc is not None:
                raise exc
            return getattr(self.inner, name)(*args, **kwargs)
        finally:
            with self._lock:
                self._in_flight[name] -= 1

    def list_children(self, parent_id: str, query: Optional[str] = None, page_token: Optional[str] = None):
        return self._call('list_children', parent_id, query, page_token)

    def create_resource(self, parent_id, name, kind):
        return self._call('create_resource', parent_id, name, kind)

    def get_content(self, resource_id):
        return self._call('get_content', resource_id)

    def update_content(self, resource_id, data, media_type="application/octet-stream"):
        return self._call('update_content', resource_id, data, media_type)

    def delete_resource(self, resource_id):
        return self._call('delete_resource', resource_id)

    def get_root_resource(self, kind):
        return self._call('get_root_resource', kind)
