"""Application factory for the preferences host app.

This module exposes `create_app(config: PreferencesConfig) -> FastAPI`,
which composes the platform backend and the method call handler and
serves them under `/api`. Nothing is created at import time so tests can
construct isolated apps.

    from prefs_lib.main import create_app
    from prefs_lib.config import load_config
    app = create_app(load_config())
"""
import logging
from typing import Optional

from fastapi import FastAPI

from prefs_lib.bootstrap import build_platform_backend
from prefs_lib.config import PreferencesConfig
from prefs_lib.logging_config import configure_logging


def create_app(config: Optional[PreferencesConfig] = None, *, setup_logging: bool = False) -> FastAPI:
    """Create and return a configured FastAPI application."""
    config = config or PreferencesConfig()
    logger = configure_logging(config.log_level) if setup_logging else logging.getLogger(__name__)

    backend = build_platform_backend(config)

    from prefs_lib.channel import MethodCallHandler
    handler = MethodCallHandler(backend)

    from prefs_lib.services import ServiceContainer
    container = ServiceContainer()
    container.register_singleton("config", config)
    container.register_singleton("preferences_backend", backend)
    container.register_singleton("method_call_handler", handler)

    app = FastAPI(title="Preferences Host")
    # Routes resolve services from this container only.
    app.state.container = container

    from prefs_lib.channel.api import router as channel_router
    app.include_router(channel_router, prefix='/api')

    logger.info("Preferences host ready (backend=%s, data_dir=%s)", backend.name, config.data_dir)
    return app
