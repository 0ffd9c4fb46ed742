"""Configuration for the preferences library and its host application.

Configuration is read from a YAML file (default
`data/config/preferences.yml`). Every field has a default, so a missing
file simply yields the default configuration.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("data/config/preferences.yml")


class PreferencesConfig(BaseModel):
    data_dir: str = "data"
    backend: Literal["memory", "file", "keyfile", "channel"] = "file"
    serializer: Literal["yaml", "json", "pickle", "plist", "encrypted"] = "yaml"
    password: Optional[str] = None
    channel_url: str = "http://localhost:8000"
    log_level: str = "WARNING"
    default_store: Optional[str] = None

    @model_validator(mode="after")
    def _check_encryption(self) -> "PreferencesConfig":
        if self.serializer == "encrypted" and not self.password:
            raise ValueError("the 'encrypted' serializer requires a password")
        return self


def load_config(path: Optional[str | Path] = None) -> PreferencesConfig:
    """Load `PreferencesConfig` from a YAML file.

    Returns the defaults when the file does not exist. Raises
    `pydantic.ValidationError` when the file holds invalid settings.
    """
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        logger.debug("No config at %s; using defaults", cfg_path)
        return PreferencesConfig()
    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {cfg_path} must contain a mapping")
    logger.debug("Loaded config from %s", cfg_path)
    return PreferencesConfig.model_validate(raw)
