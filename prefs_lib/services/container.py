from typing import Any, Dict


class ServiceContainer:
    """Named services shared by the host app's routes.

    `create_app` registers the config, the platform backend and the method
    call handler once; routes look them up with `resolve_service`. A name
    can be registered only once so two components never race for it.
    """

    def __init__(self) -> None:
        self._services: Dict[str, Any] = {}

    def register_singleton(self, key: str, instance: Any) -> None:
        if key in self._services:
            raise ValueError(f"Service '{key}' is already registered")
        self._services[key] = instance

    def get(self, key: str) -> Any:
        try:
            return self._services[key]
        except KeyError:
            raise KeyError(f"No service registered for key '{key}'") from None
