"""Wire encoding for values strict JSON cannot carry.

JSON has no spelling for infinity or NaN, and both FastAPI and httpx
refuse to emit them. Non-finite doubles therefore travel as a one-entry
mapping such as ``{"Double": "Infinity"}``. Mappings are never stored
values, so the tag cannot be mistaken for one.

Encoding applies per value: to each argument of a call and to each entry
of a mapping result (`getAll`).
"""
import math
from typing import Any

from prefs_lib.exceptions import InvalidArgument
from prefs_lib.values import ValueKind

_TAG = ValueKind.DOUBLE.value
_NON_FINITE = {"Infinity": math.inf, "-Infinity": -math.inf, "NaN": math.nan}


def encode_value(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return {_TAG: "NaN"}
        return {_TAG: "Infinity" if value > 0 else "-Infinity"}
    return value


def decode_value(value: Any) -> Any:
    """Undo `encode_value`; any other mapping raises `InvalidArgument`."""
    if not isinstance(value, dict):
        return value
    spelling = value.get(_TAG)
    if len(value) != 1 or not isinstance(spelling, str) or spelling not in _NON_FINITE:
        raise InvalidArgument(f"unsupported tagged value {value!r}")
    return _NON_FINITE[spelling]


def encode_payload(payload: Any) -> Any:
    """Encode call arguments or a call result for the wire."""
    if isinstance(payload, dict):
        return {k: encode_value(v) for k, v in payload.items()}
    return encode_value(payload)


def decode_payload(payload: Any) -> Any:
    if isinstance(payload, dict):
        return {k: decode_value(v) for k, v in payload.items()}
    return payload
