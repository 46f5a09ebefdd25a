"""
Engine settings.

Settings come from an optional YAML file and are then overridden by
environment variables:

- ``APPROVALFLOW_CONFIG``: path to the YAML settings file
- ``APPROVALFLOW_SIGNING_SECRET``: HMAC secret for vote signatures
- ``APPROVALFLOW_RULES``: rule catalog YAML
- ``APPROVALFLOW_DIRECTORY``: directory fixture YAML
- ``APPROVALFLOW_PERSISTENCE``: ``memory`` or ``file``
- ``APPROVALFLOW_WORK_DIR``: storage root for the file task store
- ``APPROVALFLOW_STRICT_SEQUENTIAL``: ``true`` to refuse out-of-turn votes
- ``LOGLEVEL``: log level
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml

from approvalflow.core.domain.config_schema import (
    ConfigValidationError,
    EngineSettings,
    validate_engine_settings,
)
from approvalflow.core.domain.errors import ConfigError

_ENV_OVERRIDES: dict[str, str] = {
    "APPROVALFLOW_SIGNING_SECRET": "signing_secret",
    "APPROVALFLOW_RULES": "rules_path",
    "APPROVALFLOW_DIRECTORY": "directory_path",
    "APPROVALFLOW_PERSISTENCE": "persistence",
    "APPROVALFLOW_WORK_DIR": "work_dir",
    "APPROVALFLOW_STRICT_SEQUENTIAL": "enforce_sequential_order",
    "LOGLEVEL": "log_level",
}


def load_settings(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> EngineSettings:
    """Load engine settings.

    Args:
        path: YAML settings file; falls back to ``APPROVALFLOW_CONFIG``.
        env: Environment mapping, defaults to ``os.environ``.

    Returns:
        Validated settings.

    Raises:
        ConfigError: If the file is missing or any value is invalid.
    """
    env = os.environ if env is None else env
    raw_path = path or env.get("APPROVALFLOW_CONFIG")

    data: dict[str, Any] = {}
    file_path = Path(raw_path) if raw_path else None
    if file_path is not None:
        if not file_path.exists():
            raise ConfigError(
                f"Settings file not found: {file_path}", details={"path": str(file_path)}
            )
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    for env_name, key in _ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value:
            data[key] = value

    try:
        return validate_engine_settings(data, file_path=file_path)
    except ConfigValidationError as e:
        raise ConfigError(
            str(e), details={"path": str(file_path) if file_path else None}
        ) from e


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog with the same level."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(level=log_level, format="%(message)s")
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
