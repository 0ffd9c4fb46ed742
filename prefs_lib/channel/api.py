from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Request

from prefs_lib.channel.codec import decode_payload, encode_payload
from prefs_lib.exceptions import BackendError, InvalidArgument, MethodNotImplemented
from prefs_lib.health import get_health
from prefs_lib.services.resolver import resolve_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post('/channel/{method}')
async def api_channel_call(method: str, request: Request, payload: Optional[dict] = Body(default=None)):
    handler = resolve_service(request, 'method_call_handler')
    try:
        result = await handler.handle(method, decode_payload(payload or {}))
    except MethodNotImplemented as e:
        raise HTTPException(status_code=404, detail={'error': 'not_implemented', 'message': str(e)})
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail={'error': 'invalid_argument', 'message': str(e)})
    except BackendError as e:
        logger.warning("Channel call %s failed: %s", method, e)
        raise HTTPException(status_code=500, detail={'error': 'backend_error', 'message': str(e)})
    except Exception as e:
        logger.exception('Unexpected failure handling channel call %s', method)
        raise HTTPException(status_code=500, detail={'error': 'internal_error', 'message': str(e)})
    # The response is rendered as strict JSON after this handler returns.
    return {'result': encode_payload(result)}


@router.get('/health')
async def api_health(request: Request):
    backend = resolve_service(request, 'preferences_backend')
    return get_health(getattr(backend, 'name', None))
