"""
External plugin backend — forward a request to a protoc plugin binary.

protoc-gen-go and protoc-gen-go-grpc are opaque to us: each gets a
CodeGeneratorRequest narrowed to one file on stdin and answers with a
CodeGeneratorResponse on stdout.

In deterministic mode the toolchain version block is cut out of every
generated Go file.  Annotation offsets (``generated_code_info`` and the
``.meta`` files written for ``annotate_code``) are byte positions into
that file, so they are shifted by the same amount.
"""

from __future__ import annotations

import logging
import os
import re
import shutil

from google.protobuf import text_format
from google.protobuf.compiler import plugin_pb2
from google.protobuf.descriptor_pb2 import GeneratedCodeInfo
from google.protobuf.message import DecodeError

from genprotos.adapters.base import Backend, GenerationContext
from genprotos.adapters.shell.command import PLUGIN_ENV, Runner, run_command
from genprotos.core.errors import PluginError, ToolchainError

logger = logging.getLogger(__name__)

# protoc-gen-go header lines naming the toolchain versions:
#   // versions:
#   // 	protoc-gen-go v1.28.1
#   // 	protoc        v3.21.12
_VERSION_MARKERS_RX = re.compile(r"^// versions:\n(?:// ?\t.*\n)*", re.MULTILINE)


def strip_version_markers(content: str) -> tuple[str, int, int]:
    """Remove the toolchain version block from a generated Go file.

    Returns:
        The new content, and the UTF-8 byte offset and byte length of
        the removed block (``0, 0`` when there was none).
    """
    match = _VERSION_MARKERS_RX.search(content)
    if match is None:
        return content, 0, 0
    start = len(content[: match.start()].encode("utf-8"))
    length = len(match.group(0).encode("utf-8"))
    return content[: match.start()] + content[match.end():], start, length


def shift_annotations(info: GeneratedCodeInfo, start: int, length: int) -> None:
    """Move annotations behind a removed byte span back by its length."""
    for annotation in info.annotation:
        if annotation.begin >= start + length:
            annotation.begin -= length
        if annotation.end >= start + length:
            annotation.end -= length


def _shift_meta(meta: plugin_pb2.CodeGeneratorResponse.File, start: int, length: int) -> None:
    try:
        info = text_format.Parse(meta.content, GeneratedCodeInfo())
    except text_format.ParseError as e:
        raise PluginError(f"unparsable annotations in {meta.name}: {e}") from e
    shift_annotations(info, start, length)
    meta.content = text_format.MessageToString(info)


def drop_version_markers(response: plugin_pb2.CodeGeneratorResponse) -> None:
    """Strip version blocks from all Go files in ``response``, keeping annotations aligned."""
    metas = {f.name: f for f in response.file if f.name.endswith(".meta")}
    for f in response.file:
        if not f.name.endswith(".go"):
            continue
        content, start, length = strip_version_markers(f.content)
        if not length:
            continue
        f.content = content
        if f.HasField("generated_code_info"):
            shift_annotations(f.generated_code_info, start, length)
        meta = metas.get(f"{f.name}.meta")
        if meta is not None:
            _shift_meta(meta, start, length)


class ExternalPluginBackend(Backend):
    """Run a protoc plugin executable for one file.

    Args:
        backend_name: Identifier used in logs and errors.
        executable:   Plugin binary name or path (looked up on PATH).
        runner:       Replacement for ``run_command`` (tests).
    """

    def __init__(self, backend_name: str, executable: str, runner: Runner | None = None):
        self._name = backend_name
        self.executable = executable
        self._runner = runner or run_command

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def narrowed_request(self, context: GenerationContext) -> plugin_pb2.CodeGeneratorRequest:
        """Copy of the request that asks for ``context.file`` only."""
        request = plugin_pb2.CodeGeneratorRequest()
        request.CopyFrom(context.request)
        del request.file_to_generate[:]
        request.file_to_generate.append(context.file.name)
        return request

    def _env(self) -> dict[str, str]:
        return {k: v for k, v in os.environ.items() if k != PLUGIN_ENV}

    def generate(self, context: GenerationContext) -> plugin_pb2.CodeGeneratorResponse:
        payload = self.narrowed_request(context).SerializeToString()
        try:
            result = self._runner(
                [self.executable],
                input=payload,
                env=self._env(),
            )
        except ToolchainError as e:
            raise PluginError(f"{self.name}: {e}") from e

        response = plugin_pb2.CodeGeneratorResponse()
        try:
            response.ParseFromString(result.stdout)
        except DecodeError as e:
            raise PluginError(f"{self.name}: undecodable response for {context.file.name}: {e}") from e

        if response.HasField("error"):
            raise PluginError(f"{self.name}: {context.file.name}: {response.error}")

        if context.deterministic:
            drop_version_markers(response)

        logger.debug("%s generated %d file(s) for %s", self.name, len(response.file), context.file.name)
        return response
