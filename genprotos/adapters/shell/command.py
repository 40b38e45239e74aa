"""
Shell command adapter — run external tools and capture their output.

Every subprocess this program starts goes through ``run_command``:
protoc, the external protoc plugins, git, go and gofmt.  A failure
never comes back as a return value; it raises ``ToolchainError``
carrying the command line and its output so the run can abort with
something printable.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from genprotos.core.errors import ToolchainError

logger = logging.getLogger(__name__)

# Environment variable that switches a child process into plugin mode.
PLUGIN_ENV = "RUN_AS_PROTOC_PLUGIN"
MODULE_PATH_ENV = "GENPROTOS_MODULE_PATH"
CONFIG_ENV = "GENPROTOS_CONFIG"


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    input: bytes | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Run a command to completion and return its result.

    stdout and stderr are captured separately as bytes.

    Raises:
        ToolchainError: The command is missing or exited non-zero.
    """
    argv = [str(a) for a in args]
    logger.debug("Executing: %s (cwd=%s)", " ".join(argv), cwd or ".")
    try:
        result = subprocess.run(
            argv,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            input=input,
            capture_output=True,
        )
    except OSError as e:
        raise ToolchainError(argv, output=str(e)) from e

    if result.returncode != 0:
        output = (result.stdout + result.stderr).decode("utf-8", errors="replace")
        raise ToolchainError(argv, output=output, returncode=result.returncode)
    return result


def command_output(args: Sequence[str], *, cwd: Path | str | None = None) -> str:
    """Run a command and return its stripped stdout as text."""
    return run_command(args, cwd=cwd).stdout.decode("utf-8").strip()


# ── Repository discovery ────────────────────────────────────────


def discover_repo_root(cwd: Path | str | None = None) -> Path:
    """Top level of the enclosing git checkout."""
    return Path(command_output(["git", "rev-parse", "--show-toplevel"], cwd=cwd))


def discover_module_path(repo_root: Path) -> str:
    """Go module path declared by ``go.mod`` in the repository root."""
    return command_output(["go", "list", "-m", "-f", "{{.Path}}"], cwd=repo_root)


# ── protoc ──────────────────────────────────────────────────────


Runner = Callable[..., subprocess.CompletedProcess[bytes]]


class Protoc:
    """Launch protoc with this program registered as ``protoc-gen-go``.

    protoc starts the plugin executable once per invocation and feeds it
    a CodeGeneratorRequest on stdin; the child finds ``RUN_AS_PROTOC_PLUGIN``
    in its environment and answers as a plugin instead of running a batch.

    Args:
        plugin_executable: Path protoc should execute as the go plugin.
        module_path:       Go module path, forwarded so the child skips discovery.
        config_path:       Non-default generation config, forwarded to the child.
        cwd:               Working directory for protoc (the repository root).
        runner:            Replacement for ``run_command`` (tests).
    """

    def __init__(
        self,
        plugin_executable: str,
        module_path: str = "",
        config_path: Path | None = None,
        cwd: Path | None = None,
        protoc: str = "protoc",
        runner: Runner | None = None,
    ):
        self.plugin_executable = plugin_executable
        self.cwd = cwd
        self.module_path = module_path
        self.config_path = config_path
        self.protoc = protoc
        self._runner = runner or run_command

    def command(self, args: Sequence[str]) -> list[str]:
        return [self.protoc, f"--plugin=protoc-gen-go={self.plugin_executable}", *args]

    def child_env(self, backends: str) -> dict[str, str]:
        env = dict(os.environ)
        env[PLUGIN_ENV] = backends
        if self.module_path:
            env[MODULE_PATH_ENV] = self.module_path
        if self.config_path is not None:
            env[CONFIG_ENV] = str(self.config_path)
        return env

    def run(self, backends: str, *args: str) -> None:
        """Invoke protoc once; any failure aborts the run.

        Args:
            backends: Comma-separated backend names for the plugin child.
            args:     Remaining protoc arguments (-I, --go_out, files).
        """
        cmd = self.command(args)
        logger.info("protoc [%s] %s", backends, args[-1] if args else "")
        self._runner(cmd, cwd=self.cwd, env=self.child_env(backends))


# ── gofmt ───────────────────────────────────────────────────────


def format_go_source(source: str, gofmt: str | None = "gofmt") -> str:
    """Pipe Go source through gofmt.  Returns it unchanged if gofmt is None."""
    if not gofmt:
        return source
    result = run_command([gofmt], input=source.encode("utf-8"))
    return result.stdout.decode("utf-8")
