"""
Transformation settings.

Read from a YAML file:

    classpath:
      - org.apache.commons.logging.Log
      - org.apache.commons.logging.LogFactory
    skip_simple_arguments: false
    log_level: INFO
    log_file: null

The file comes from the `path` argument, else from LOGGUARD_CONFIG.
LOGGUARD_LOG_LEVEL overrides log_level.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

import yaml

from logguard.typesystem import ClassPath

CONFIG_ENV_VAR = "LOGGUARD_CONFIG"
LOG_LEVEL_ENV_VAR = "LOGGUARD_LOG_LEVEL"

_KNOWN_KEYS = {"classpath", "skip_simple_arguments", "log_level", "log_file"}


@dataclass(frozen=True)
class TransformConfig:
    classpath: Tuple[str, ...] = field(default_factory=tuple)
    skip_simple_arguments: bool = False
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def class_path(self) -> ClassPath:
        return ClassPath(self.classpath)


def config_from_dict(d: Optional[Dict[str, Any]]) -> TransformConfig:
    if d is None:
        return TransformConfig()
    if not isinstance(d, dict):
        raise ValueError("configuration must be a mapping")
    unknown = set(d) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    classpath = d.get("classpath") or []
    if not isinstance(classpath, list) or not all(isinstance(n, str) for n in classpath):
        raise ValueError("'classpath' must be a list of type names")

    skip = d.get("skip_simple_arguments", False)
    if not isinstance(skip, bool):
        raise ValueError("'skip_simple_arguments' must be true or false")

    return TransformConfig(
        classpath=tuple(classpath),
        skip_simple_arguments=skip,
        log_level=str(d.get("log_level") or "WARNING"),
        log_file=d.get("log_file"),
    )


def load_config(path: Optional[str] = None) -> TransformConfig:
    """
    Load settings.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the content is malformed
    """
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or None

    config = TransformConfig()
    if path is not None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"Config file not found: {path}")
        try:
            config = config_from_dict(yaml.safe_load(content))
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}")

    level = os.getenv(LOG_LEVEL_ENV_VAR)
    if level:
        config = replace(config, log_level=level)
    return config
