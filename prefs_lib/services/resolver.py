from typing import Any

from fastapi import HTTPException
from starlette.requests import Request


def resolve_service(request: Request, name: str) -> Any:
    """Look up `name` in the container `create_app` attached to the app.

    An app built without a container, or without that service, is a
    deployment error and answers HTTP 500.
    """
    container = getattr(request.app.state, 'container', None)
    if container is None:
        raise HTTPException(status_code=500, detail={'error': 'not_configured', 'message': 'no service container'})
    try:
        return container.get(name)
    except KeyError as e:
        raise HTTPException(status_code=500, detail={'error': 'not_configured', 'message': str(e)})
