"""
Backend base — the contract between the plugin handler and generators.

A backend turns one description file of a CodeGeneratorRequest into
generated files.  The handler only talks to backends through this
interface, never to protoc-gen-go or the field-number extractor
directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from google.protobuf.compiler import plugin_pb2
from google.protobuf.descriptor_pb2 import FileDescriptorProto
from pydantic import BaseModel, ConfigDict


class GenerationContext(BaseModel):
    """Everything a backend needs to generate one file.

    Attributes:
        request:       The full request as protoc sent it.
        file:          Descriptor of the file being generated.
        deterministic: Strip output that varies between toolchain versions.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    request: plugin_pb2.CodeGeneratorRequest
    file: FileDescriptorProto
    deterministic: bool = False


class Backend(ABC):
    """Abstract base class for all code-generation backends.

    Backends raise ``PluginError`` on failure; the handler does not try
    to recover, so a failing backend aborts the whole plugin call.

    To create a new backend:
        1. Subclass Backend
        2. Implement name, is_available, generate
        3. Register it in the BackendRegistry under a plugin name
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The backend identifier (e.g., 'protoc-gen-go', 'fieldnum')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the backend can run.  Should be fast and never raise."""

    @abstractmethod
    def generate(self, context: GenerationContext) -> plugin_pb2.CodeGeneratorResponse:
        """Generate files for ``context.file``.

        Returns:
            A response holding the generated files and supported features.
            Its ``error`` field is never set; failures raise instead.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
