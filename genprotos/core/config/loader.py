"""
Configuration loader — reads generation.yml into domain models.

The packaged ``genprotos/core/data/generation.yml`` is the default;
``--config`` points at another file with the same shape.  The YAML is
validated against the Pydantic models and returned as an immutable
``GenerationConfig``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import yaml
from pydantic import ValidationError

from genprotos.core.data import DEFAULT_GENERATION_CONFIG
from genprotos.core.errors import ConfigError
from genprotos.core.models.generation import GenerationConfig

logger = logging.getLogger(__name__)


def load_generation_config(path: Path | None = None) -> GenerationConfig:
    """Load and validate the generation tables.

    Args:
        path: Explicit config file.  If None, the packaged default.

    Returns:
        Validated GenerationConfig.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = DEFAULT_GENERATION_CONFIG

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading generation config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = GenerationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid generation config {path}: {e}") from e

    logger.info(
        "Loaded %d override(s), %d local job(s), %d remote target(s)",
        len(config.overrides),
        len(config.local),
        len(config.remote),
    )
    return config


def parse_overrides(items: Iterable[str]) -> dict[str, str]:
    """Parse ``PATH=IMPORT`` strings from the command line.

    Raises:
        ConfigError: An item has no ``=`` or an empty side.
    """
    overrides: dict[str, str] = {}
    for item in items:
        path, sep, import_path = item.partition("=")
        path, import_path = path.strip(), import_path.strip()
        if not sep or not path or not import_path:
            raise ConfigError(f"Invalid override {item!r}: expected PATH=IMPORT")
        overrides[path] = import_path
    return overrides
