"""
Settings resolution — decide once, at startup, what this process is.

``RUN_AS_PROTOC_PLUGIN`` is read exactly here.  Everything downstream
receives the resulting ``Settings`` and never consults the environment
again.

Precedence for each value:
    CLI flag  >  environment variable  >  discovery (git / go list)
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path

from genprotos.adapters.shell.command import (
    CONFIG_ENV,
    MODULE_PATH_ENV,
    PLUGIN_ENV,
    discover_module_path,
    discover_repo_root,
)
from genprotos.core.config.loader import load_generation_config, parse_overrides
from genprotos.core.errors import ConfigError
from genprotos.core.models.settings import RunMode, Settings, SyncMode

logger = logging.getLogger(__name__)

PROTO_ROOT_ENV = "PROTOBUF_ROOT"
PROGRAM_NAME = "generate-protos"


def resolve_run_mode(environ: Mapping[str, str] | None = None) -> tuple[RunMode, tuple[str, ...]]:
    """Run mode and, in plugin mode, the requested plugin names."""
    env = os.environ if environ is None else environ
    value = env.get(PLUGIN_ENV, "")
    if not value:
        return RunMode.BATCH, ()
    plugins = tuple(p.strip() for p in value.split(",") if p.strip())
    return RunMode.PLUGIN, plugins


def default_plugin_executable(argv0: str | None = None) -> str:
    """Path protoc should execute to reach this program.

    Under ``python -m genprotos`` the script path is a plain module file
    protoc cannot exec; the installed console script is used instead.

    Raises:
        ConfigError: Neither is executable.
    """
    path = os.path.abspath(argv0 or sys.argv[0])
    if os.path.isfile(path) and os.access(path, os.X_OK):
        return path
    installed = shutil.which(PROGRAM_NAME)
    if installed:
        return installed
    raise ConfigError(
        f"cannot run {path} as the protoc plugin and {PROGRAM_NAME} is not on PATH "
        "(use --plugin to name the executable)"
    )


def resolve_plugin_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Settings for a plugin child started by protoc."""
    env = os.environ if environ is None else environ
    _, plugins = resolve_run_mode(env)
    config_path = Path(env[CONFIG_ENV]) if env.get(CONFIG_ENV) else None
    repo_root = Path.cwd()
    module_path = env.get(MODULE_PATH_ENV) or discover_module_path(repo_root)
    return Settings(
        mode=RunMode.PLUGIN,
        repo_root=repo_root,
        module_path=module_path,
        plugin_backends=plugins,
        config_path=config_path,
        generation=load_generation_config(config_path),
    )


def resolve_batch_settings(
    *,
    execute: bool = False,
    proto_root: str | None = None,
    config_path: Path | None = None,
    overrides: Iterable[str] = (),
    repo_root: Path | None = None,
    module_path: str | None = None,
    plugin_executable: str | None = None,
) -> Settings:
    """Settings for a batch run.

    Raises:
        ConfigError: The proto root is unset or the config is invalid.
        ToolchainError: Repository discovery failed.
    """
    if not proto_root:
        raise ConfigError(f"protobuf source root is not set (use --protoroot or {PROTO_ROOT_ENV})")

    generation = load_generation_config(config_path)
    extra = parse_overrides(overrides)
    if extra:
        generation = generation.model_copy(
            update={"overrides": generation.overrides.merged(extra)},
        )

    root = (repo_root or discover_repo_root()).resolve()
    module = module_path or discover_module_path(root)
    logger.info("Repository %s (module %s)", root, module)

    return Settings(
        mode=RunMode.BATCH,
        sync_mode=SyncMode.APPLY if execute else SyncMode.DIFF,
        repo_root=root,
        module_path=module,
        proto_root=Path(proto_root).resolve(),
        plugin_executable=plugin_executable or default_plugin_executable(),
        config_path=config_path.resolve() if config_path else None,
        generation=generation,
    )
