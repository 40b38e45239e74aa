"""
generate-protos — CLI entrypoint and protoc plugin in one executable.

Usage:
    generate-protos --protoroot ~/src/protobuf            # print diffs
    generate-protos --protoroot ~/src/protobuf --execute  # write files

When ``RUN_AS_PROTOC_PLUGIN`` is set the program does not parse any
flags: protoc started it as ``protoc-gen-go`` and it answers one
CodeGeneratorRequest on stdin, then exits.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import BinaryIO

import click

from genprotos import __version__
from genprotos.core.config.settings import (
    PROTO_ROOT_ENV,
    resolve_batch_settings,
    resolve_plugin_settings,
    resolve_run_mode,
)
from genprotos.core.errors import GenerationError
from genprotos.core.models.settings import RunMode
from genprotos.core.observability.logging_config import setup_logging_from_env

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__, prog_name="generate-protos")
@click.option("--execute", is_flag=True, help="Write generated files to destination.")
@click.option(
    "--protoroot",
    "proto_root",
    envvar=PROTO_ROOT_ENV,
    default=None,
    help=f"The root of the protobuf source tree (default: ${PROTO_ROOT_ENV}).",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Generation tables YAML (default: packaged generation.yml).",
)
@click.option(
    "--override",
    "overrides",
    multiple=True,
    metavar="PATH=IMPORT",
    help="Extra Go import path override for a description file (repeatable).",
)
@click.option(
    "--repo-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Repository root (default: git rev-parse --show-toplevel).",
)
@click.option("--module-path", default=None, help="Go module path (default: go list -m).")
@click.option(
    "--plugin",
    "plugin_executable",
    default=None,
    help="Executable protoc runs as protoc-gen-go (default: this program).",
)
@click.option("--skip-local", is_flag=True, help="Skip description files in the repository.")
@click.option("--skip-remote", is_flag=True, help="Skip description files under the proto root.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output a JSON summary.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
def cli(
    execute: bool,
    proto_root: str | None,
    config_path: Path | None,
    overrides: tuple[str, ...],
    repo_root: Path | None,
    module_path: str | None,
    plugin_executable: str | None,
    skip_local: bool,
    skip_remote: bool,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
) -> None:
    """Regenerate Go sources from protobuf description files."""
    from genprotos.core.use_cases.generate import run_generation

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = None
    setup_logging_from_env(level)

    try:
        settings = resolve_batch_settings(
            execute=execute,
            proto_root=proto_root,
            config_path=config_path,
            overrides=overrides,
            repo_root=repo_root,
            module_path=module_path,
            plugin_executable=plugin_executable,
        )
        result = run_generation(
            settings,
            emit=None if as_json else (lambda text: click.echo(text, nl=False)),
            local=not skip_local,
            remote=not skip_remote,
        )
    except (GenerationError, OSError) as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not quiet and not execute and not result.clean:
        differing = sum(len(r.differing) for r in result.reports)
        click.secho(
            f"⚠️  {differing} file(s) differ — rerun with --execute to apply.",
            fg="yellow",
            err=True,
        )


def plugin_main(stdin: BinaryIO | None = None, stdout: BinaryIO | None = None) -> int:
    """Serve one protoc plugin call; returns the process exit status."""
    from genprotos.core.plugin.handler import run_plugin

    setup_logging_from_env()
    try:
        settings = resolve_plugin_settings()
        run_plugin(
            settings,
            stdin if stdin is not None else sys.stdin.buffer,
            stdout if stdout is not None else sys.stdout.buffer,
        )
    except GenerationError as e:
        logger.error("%s", e)
        return 1
    return 0


def main() -> None:
    """Console entry point: protoc plugin or batch CLI, decided once here."""
    mode, _ = resolve_run_mode()
    if mode is RunMode.PLUGIN:
        sys.exit(plugin_main())
    cli()


if __name__ == "__main__":
    main()
