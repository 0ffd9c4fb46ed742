from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

from prefs_lib.config import DEFAULT_CONFIG_PATH

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s]: %(message)s'


def _level_from_config(cfg_path: Path) -> Optional[int]:
    if not cfg_path.exists():
        return None
    try:
        with cfg_path.open('r', encoding='utf-8') as _f:
            _cfg = yaml.safe_load(_f) or {}
    except (OSError, yaml.YAMLError):
        logging.getLogger(__name__).warning('Failed to read log level from %s', cfg_path)
        return None
    _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
    if isinstance(_lvl, str):
        _numeric = getattr(logging, _lvl.upper(), None)
        if isinstance(_numeric, int):
            return _numeric
    return None


def configure_logging(level: Optional[str | int] = None, config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for the library's entry points.

    The level is taken from `level` when given, else from the `log_level`
    key of the YAML config, else WARNING. Returns a module logger for the
    caller.
    """
    if isinstance(level, str):
        resolved = getattr(logging, level.upper(), None)
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
    elif isinstance(level, int):
        resolved = level
    else:
        resolved = _level_from_config(config_path or DEFAULT_CONFIG_PATH)
    if resolved is None:
        resolved = logging.WARNING

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logger.debug('Log level set to %s', logging.getLevelName(resolved))
    return logger
