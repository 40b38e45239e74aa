"""
Field-number extractor — a Go constant per message field.

Low-level encoders in the generated module need wire field numbers
without importing full descriptor reflection.  For every file of the
well-known package this emits ``<module>/internal/fieldnum/<base>_gen.go``:

    // Field numbers for google.protobuf.Any.
    const (
    	Any_TypeUrl = 1 // optional string
    	Any_Value = 2 // optional bytes
    )

Messages are visited depth-first in declaration order, nested
messages (map entries included) right after their parent.
"""

from __future__ import annotations

import logging
import posixpath

from google.protobuf.compiler import plugin_pb2
from google.protobuf.descriptor_pb2 import DescriptorProto, FieldDescriptorProto, FileDescriptorProto

from genprotos.adapters.base import Backend, GenerationContext
from genprotos.adapters.shell.command import format_go_source
from genprotos.core.errors import PluginError, ToolchainError
from genprotos.core.plugin.naming import field_go_names, go_camel_case

logger = logging.getLogger(__name__)

_NAMED_TYPES = (
    FieldDescriptorProto.TYPE_ENUM,
    FieldDescriptorProto.TYPE_MESSAGE,
    FieldDescriptorProto.TYPE_GROUP,
)


def cardinality(field: FieldDescriptorProto) -> str:
    """``optional``, ``required`` or ``repeated``."""
    return FieldDescriptorProto.Label.Name(field.label).removeprefix("LABEL_").lower()


def type_name(field: FieldDescriptorProto) -> str:
    """Full name of an enum/message type, otherwise the scalar kind."""
    if field.type in _NAMED_TYPES:
        return field.type_name.lstrip(".")
    return FieldDescriptorProto.Type.Name(field.type).removeprefix("TYPE_").lower()


def render_field_numbers(file: FileDescriptorProto, package_name: str, preamble: str = "") -> str:
    """Go source declaring a field-number constant for every field in ``file``."""
    lines: list[str] = [f"package {package_name}", ""]

    def visit(messages: list[DescriptorProto], prefix: str) -> None:
        for message in messages:
            local_name = f"{prefix}{message.name}"
            full_name = f"{file.package}.{local_name}" if file.package else local_name
            go_name = go_camel_case(local_name)
            lines.append(f"// Field numbers for {full_name}.")
            lines.append("const (")
            for field, field_name in zip(message.field, field_go_names(message)):
                lines.append(
                    f"\t{go_name}_{field_name} = {field.number}"
                    f" // {cardinality(field)} {type_name(field)}"
                )
            lines.append(")")
            visit(list(message.nested_type), f"{local_name}.")

    visit(list(file.message_type), "")
    return preamble + "\n".join(lines) + "\n"


class FieldNumberBackend(Backend):
    """Emit the field-number table for files of one package.

    Args:
        module_path:  Go module the table is generated into.
        package:      Description-file package to act on; others are skipped.
        output_dir:   Module-relative directory of the generated files.
        preamble:     Generated-file header.
        gofmt:        Formatter command, or None to leave output unformatted.
    """

    def __init__(
        self,
        module_path: str,
        package: str = "google.protobuf",
        output_dir: str = "internal/fieldnum",
        preamble: str = "",
        gofmt: str | None = None,
    ):
        self.module_path = module_path
        self.package = package
        self.output_dir = output_dir
        self.preamble = preamble
        self.gofmt = gofmt

    @property
    def name(self) -> str:
        return "fieldnum"

    def is_available(self) -> bool:
        return True

    def output_name(self, file: FileDescriptorProto) -> str:
        base = posixpath.basename(file.name).removesuffix(".proto")
        return posixpath.join(self.module_path, self.output_dir, f"{base}_gen.go")

    def generate(self, context: GenerationContext) -> plugin_pb2.CodeGeneratorResponse:
        response = plugin_pb2.CodeGeneratorResponse()
        file = context.file
        if file.package != self.package:
            return response

        source = render_field_numbers(file, posixpath.basename(self.output_dir), self.preamble)
        try:
            source = format_go_source(source, self.gofmt)
        except ToolchainError as e:
            raise PluginError(f"{self.name}: formatting {file.name}: {e}") from e

        out = response.file.add()
        out.name = self.output_name(file)
        out.content = source
        logger.debug("fieldnum: %s → %s", file.name, out.name)
        return response
