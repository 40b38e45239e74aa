"""
Error taxonomy — every failure that aborts a generation run.

Nothing here is retried.  The CLI catches ``GenerationError`` once at
the top, prints it, and exits non-zero.  Staging directories are
removed on the way out by their context managers.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for all fatal generation failures."""


class ConfigError(GenerationError):
    """Raised when configuration is invalid or missing."""


class ToolchainError(GenerationError):
    """Raised when an external command fails or cannot be started.

    Attributes:
        command:    The argv that was executed.
        output:     Combined stdout/stderr of the command.
        returncode: Exit status, or None when the command never started.
    """

    def __init__(
        self,
        command: list[str],
        output: str = "",
        returncode: int | None = None,
    ):
        self.command = list(command)
        self.output = output
        self.returncode = returncode
        if returncode is None:
            reason = "could not be started"
        else:
            reason = f"exited with code {returncode}"
        super().__init__(f"executing: {' '.join(self.command)} ({reason})\n{output}".rstrip())


class PluginError(GenerationError):
    """Raised while acting as a protoc plugin (decode or backend failure)."""
