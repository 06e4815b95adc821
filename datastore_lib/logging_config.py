from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

from datastore_lib.config import default_config_path

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s]: %(message)s'


def _level_from_config(cfg_path: Path) -> Optional[int]:
    if not cfg_path.exists():
        return None
    try:
        with cfg_path.open('r', encoding='utf-8') as _f:
            _cfg = yaml.safe_load(_f) or {}
    except (OSError, yaml.YAMLError):
        logging.getLogger(__name__).warning('Could not read log level from %s', cfg_path)
        return None
    _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
    if isinstance(_lvl, str):
        _numeric = getattr(logging, _lvl.upper(), None)
        if isinstance(_numeric, int):
            return _numeric
    return None


def configure_logging(config_path: Optional[Path] = None, level: Optional[str] = None) -> logging.Logger:
    """Configure root logging for the datastore tools.

    An explicit `level` wins; otherwise the `log_level` key of the YAML
    config file is used, falling back to WARNING. Returns a module logger
    for the caller.
    """
    # Minimal early config so other imports can emit without error
    logging.basicConfig(level=logging.NOTSET, format='%(asctime)s INFO %(message)s')
    DEFAULT_LOG_LEVEL = logging.WARNING

    if level:
        _numeric = getattr(logging, level.upper(), None)
        if not isinstance(_numeric, int):
            raise ValueError(f'unknown log level: {level}')
        DEFAULT_LOG_LEVEL = _numeric
    else:
        cfg_level = _level_from_config(Path(config_path) if config_path else default_config_path())
        if cfg_level is not None:
            DEFAULT_LOG_LEVEL = cfg_level

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=DEFAULT_LOG_LEVEL, format=LOG_FORMAT)
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logger.debug('Log level set to: %s', logging.getLevelName(DEFAULT_LOG_LEVEL))

    return logger
