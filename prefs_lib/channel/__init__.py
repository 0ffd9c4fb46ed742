"""Method channel: named method calls between the library and a store host."""

from .handler import MethodCallHandler
from .method_channel import MethodChannel, LocalMethodChannel, HttpMethodChannel
from .backend import ChannelPreferencesBackend

__all__ = [
    "MethodCallHandler",
    "MethodChannel",
    "LocalMethodChannel",
    "HttpMethodChannel",
    "ChannelPreferencesBackend",
]
