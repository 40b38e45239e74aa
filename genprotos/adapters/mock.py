"""
Mock backend — test double for the plugin handler.

Generates one predictable file per request without touching external
tools.  Configurable to fail for specific description files.
"""

from __future__ import annotations

from google.protobuf.compiler import plugin_pb2

from genprotos.adapters.base import Backend, GenerationContext
from genprotos.core.errors import PluginError


class MockBackend(Backend):
    """Universal mock backend for testing.

    By default writes ``<file>.<suffix>`` whose content names the
    backend and the file.  Can be configured to fail per file.
    """

    def __init__(
        self,
        backend_name: str = "mock",
        available: bool = True,
        suffix: str = "mock.go",
    ):
        self._name = backend_name
        self._available = available
        self._suffix = suffix
        self._failures: dict[str, str] = {}
        self._call_log: list[GenerationContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[GenerationContext]:
        """All contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, file_name: str, error: str = "Mock failure") -> None:
        """Configure generation for ``file_name`` to fail."""
        self._failures[file_name] = error

    def generate(self, context: GenerationContext) -> plugin_pb2.CodeGeneratorResponse:
        self._call_log.append(context)
        name = context.file.name
        if name in self._failures:
            raise PluginError(f"{self._name}: {self._failures[name]}")

        response = plugin_pb2.CodeGeneratorResponse()
        out = response.file.add()
        out.name = f"{name.removesuffix('.proto')}.{self._suffix}"
        out.content = f"// {self._name} {name}\n"
        return response
