from typing import Any
from fastapi import HTTPException
from starlette.requests import Request


def resolve_service(request: Request, name: str) -> Any:
    """Resolve a named service from the application's service container.

    Raises HTTP 500 when the container or the named registration is missing.
    """
    container = getattr(request.app.state, 'container', None)
    if container is None:
        raise HTTPException(status_code=500, detail={'error': 'misconfigured', 'message': 'Service container not configured'})
    try:
        return container.get(name)
    except KeyError:
        raise HTTPException(status_code=500, detail={'error': 'misconfigured', 'message': f"Service '{name}' not configured"})
