"""Composition helpers: build backends and managers from configuration.

Keeps `prefs_lib.main` and the CLI focused on wiring; the choice of
backend (and, for the channel backend, its transport) happens here.
"""
from __future__ import annotations
from typing import Optional

from prefs_lib.config import PreferencesConfig
from prefs_lib.preferences import PreferencesManager
from prefs_lib.storage import PreferencesBackend, create_backend


def build_platform_backend(config: PreferencesConfig) -> PreferencesBackend:
    """Return the backend that owns the data on this host.

    A host never forwards to another channel, so the 'channel' setting
    falls back to the file backend here.
    """
    backend = "file" if config.backend == "channel" else config.backend
    return create_backend(
        backend=backend,
        serializer=config.serializer,
        data_dir=config.data_dir,
        password=config.password,
    )


def build_backend(config: PreferencesConfig, channel: Optional[object] = None) -> PreferencesBackend:
    """Return the backend a client application should use.

    For the 'channel' backend an `HttpMethodChannel` to `config.channel_url`
    is created unless `channel` is given.
    """
    if config.backend == "channel":
        if channel is None:
            from prefs_lib.channel import HttpMethodChannel
            channel = HttpMethodChannel(config.channel_url)
        return create_backend(backend="channel", channel=channel)
    return build_platform_backend(config)


def build_preferences_manager(config: PreferencesConfig, channel: Optional[object] = None) -> PreferencesManager:
    return PreferencesManager(build_backend(config, channel=channel))
