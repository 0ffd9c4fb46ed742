"""Transports carrying method calls to a `MethodCallHandler`.

`LocalMethodChannel` calls a handler in the same process;
`HttpMethodChannel` posts to the host application's
``/api/channel/{method}`` route. Both copy arguments and results across
the boundary and report every failure as `BackendError`.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from prefs_lib.exceptions import BackendError, InvalidArgument
from .codec import decode_payload, encode_payload
from .handler import MethodCallHandler

logger = logging.getLogger(__name__)


@runtime_checkable
class MethodChannel(Protocol):
    async def invoke_method(self, method: str, arguments: Optional[Dict[str, Any]] = None) -> Any: ...


def _transfer(value: Any) -> Any:
    # Values cross the boundary as strict JSON, like they would over the wire.
    return decode_payload(json.loads(json.dumps(encode_payload(value), allow_nan=False)))


class LocalMethodChannel:
    """In-process channel delivering calls straight to a handler."""

    def __init__(self, handler: MethodCallHandler) -> None:
        self.handler = handler

    async def invoke_method(self, method: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        try:
            result = await self.handler.handle(method, _transfer(arguments or {}))
        except BackendError:
            raise
        except Exception as exc:
            raise BackendError(f"Channel call {method} failed: {exc}") from exc
        return _transfer(result)


def _error_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return body["detail"]
    return body


class HttpMethodChannel:
    """Channel posting method calls to a host application over HTTP.

    Parameters
    - base_url: root URL of the host app, e.g. ``http://localhost:8000``.
    - client: optional pre-configured ``httpx.AsyncClient``. When omitted
      the channel creates (and owns) one; close it with `aclose`.
    """

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def url_for(self, method: str) -> str:
        return f"{self.base_url}/api/channel/{method}"

    async def invoke_method(self, method: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug("POST %s", self.url_for(method))
        try:
            response = await self._client.post(self.url_for(method), json=encode_payload(arguments or {}))
        except httpx.HTTPError as exc:
            raise BackendError(f"Channel call {method} failed: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise BackendError(f"Channel call {method} has arguments that cannot be sent: {exc}") from exc
        if response.is_error:
            raise BackendError(
                f"Channel call {method} failed with HTTP {response.status_code}: {_error_detail(response)}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise BackendError(f"Channel call {method} returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise BackendError(f"Channel call {method} returned an unexpected payload")
        try:
            return decode_payload(body.get("result"))
        except InvalidArgument as exc:
            raise BackendError(f"Channel call {method} returned {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpMethodChannel":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
