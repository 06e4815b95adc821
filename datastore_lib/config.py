"""Datastore configuration models and YAML persistence.

A config file looks like::

    log_level: INFO
    path: ./data
    options:
      create_if_missing: true
      error_if_exists: false
      extension: .data

The original camelCase option names (``createIfMissing``,
``errorIfExists``) are accepted too.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".data"
TMP_SUFFIX = ".tmp"
DEFAULT_CONFIG_PATH = Path("data/config/datastore.yml")
CONFIG_ENV = "DATASTORE_CONFIG"


class DatastoreOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    create_if_missing: bool = Field(default=True, alias="createIfMissing")
    error_if_exists: bool = Field(default=False, alias="errorIfExists")
    extension: str = DEFAULT_EXTENSION

    @field_validator("extension")
    @classmethod
    def _check_extension(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError("extension must start with '.' and name a suffix, e.g. '.data'")
        if "/" in v or os.sep in v or "." in v[1:]:
            raise ValueError("extension must be a single suffix without path separators")
        if v == TMP_SUFFIX:
            raise ValueError(f"extension {TMP_SUFFIX!r} is reserved for in-flight writes")
        return v


def merge_options(base: DatastoreOptions, **overrides: Any) -> DatastoreOptions:
    """Return `base` with `overrides` applied. Accepts field names or aliases."""
    aliases = {f.alias: name for name, f in DatastoreOptions.model_fields.items() if f.alias}
    data = base.model_dump()
    for k, v in overrides.items():
        data[aliases.get(k, k)] = v
    return DatastoreOptions.model_validate(data)


class DatastoreConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str = "./data"
    log_level: Optional[str] = None
    options: DatastoreOptions = Field(default_factory=DatastoreOptions)


def default_config_path() -> Path:
    env = os.environ.get(CONFIG_ENV)
    return Path(env) if env else DEFAULT_CONFIG_PATH


def load_config(path: str | Path) -> DatastoreConfig:
    """Read a `DatastoreConfig` from a YAML file."""
    raw = Path(path).read_text(encoding="utf-8")
    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError("invalid config format: parse error") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("invalid config format: expected mapping")
    cfg = DatastoreConfig.model_validate(data)
    logger.debug("Loaded datastore config from %s: path=%s", path, cfg.path)
    return cfg


def dump_config(cfg: DatastoreConfig) -> str:
    return yaml.safe_dump(cfg.model_dump(), sort_keys=False)


def save_config(path: str | Path, cfg: DatastoreConfig) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dump_config(cfg), encoding="utf-8")
    logger.info("Wrote datastore config to %s", p)
