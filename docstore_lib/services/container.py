from typing import Any, Callable, Dict


class ServiceContainer:
    """Registry of the services composed by `create_app`.

    Services are registered by name either as ready instances or as
    factories. A factory runs on first lookup and its result is kept, so
    every request shares one document store and one backend client.
    """

    def __init__(self) -> None:
        self._singletons: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}

    def register_singleton(self, key: str, instance: Any) -> None:
        self._singletons[key] = instance

    def register_factory(self, key: str, factory: Callable[[], Any]) -> None:
        self._factories[key] = factory
        self._singletons.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._singletons or key in self._factories

    def get(self, key: str) -> Any:
        if key not in self._singletons:
            factory = self._factories.get(key)
            if factory is None:
                raise KeyError(f"No service registered for key '{key}'")
            self._singletons[key] = factory()
        return self._singletons[key]
