"""
Plugin request handling — request in, response out.

When protoc runs this program as ``protoc-gen-go``, ``run_plugin``
decodes the CodeGeneratorRequest from stdin, hands it to
``handle_request`` and writes the combined response to stdout.
``handle_request`` is a pure function over a BackendRegistry, so the
whole dispatch is testable without a subprocess.

Flow:
    stdin → decode → for each plugin name → for each file → backends → encode → stdout
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import BinaryIO

from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from genprotos.adapters.base import GenerationContext
from genprotos.adapters.external import ExternalPluginBackend
from genprotos.adapters.registry import BackendRegistry
from genprotos.core.errors import PluginError
from genprotos.core.models.settings import Settings
from genprotos.core.plugin.field_numbers import FieldNumberBackend

logger = logging.getLogger(__name__)


def build_registry(settings: Settings) -> BackendRegistry:
    """Wire every configured plugin name to its backends.

    Each entry of the ``plugins`` table becomes an external plugin
    backend.  The ``go`` plugin additionally runs the field-number
    extractor after protoc-gen-go.
    """
    gen = settings.generation
    registry = BackendRegistry()
    for plugin, executable in gen.plugins.items():
        backend = ExternalPluginBackend(executable, executable)
        if not backend.is_available():
            logger.warning("Plugin executable for %r not found on PATH: %s", plugin, executable)
        registry.register(plugin, backend)

    registry.register(
        "go",
        FieldNumberBackend(
            module_path=settings.module_path,
            package=gen.field_number_package,
            output_dir=gen.field_number_dir,
            preamble=gen.preamble_text(),
            gofmt=gen.gofmt,
        ),
    )
    return registry


def _merge(into: plugin_pb2.CodeGeneratorResponse, part: plugin_pb2.CodeGeneratorResponse) -> None:
    into.supported_features |= part.supported_features
    if part.HasField("minimum_edition"):
        if into.HasField("minimum_edition"):
            into.minimum_edition = max(into.minimum_edition, part.minimum_edition)
        else:
            into.minimum_edition = part.minimum_edition
    if part.HasField("maximum_edition"):
        if into.HasField("maximum_edition"):
            into.maximum_edition = min(into.maximum_edition, part.maximum_edition)
        else:
            into.maximum_edition = part.maximum_edition
    into.file.extend(part.file)


def handle_request(
    request: plugin_pb2.CodeGeneratorRequest,
    plugins: Sequence[str],
    registry: BackendRegistry,
    *,
    deterministic: bool = False,
) -> plugin_pb2.CodeGeneratorResponse:
    """Run every named plugin over every file protoc asked us to generate.

    Plugins run in the order given; within a plugin, files run in
    request order and each file goes through the plugin's backends in
    registration order.

    Raises:
        PluginError: Unknown plugin, missing descriptor, or backend failure.
    """
    descriptors = {f.name: f for f in request.proto_file}
    response = plugin_pb2.CodeGeneratorResponse()

    for plugin in plugins:
        backends = registry.resolve(plugin)
        for file_name in request.file_to_generate:
            file = descriptors.get(file_name)
            if file is None:
                raise PluginError(f"file to generate is missing from the request: {file_name}")
            context = GenerationContext(request=request, file=file, deterministic=deterministic)
            for backend in backends:
                _merge(response, backend.generate(context))

    logger.info(
        "Generated %d file(s) for %s via %s",
        len(response.file),
        ", ".join(request.file_to_generate),
        ",".join(plugins),
    )
    return response


def run_plugin(
    settings: Settings,
    stdin: BinaryIO,
    stdout: BinaryIO,
    registry: BackendRegistry | None = None,
) -> None:
    """Serve one protoc plugin call.

    Nothing is written to ``stdout`` unless the whole request succeeds.
    Output instability is always suppressed here: we own the output and
    the batch run diffs it against the repository.
    """
    payload = stdin.read()
    request = plugin_pb2.CodeGeneratorRequest()
    try:
        request.ParseFromString(payload)
    except DecodeError as e:
        raise PluginError(f"cannot decode CodeGeneratorRequest: {e}") from e

    response = handle_request(
        request,
        settings.plugin_backends,
        registry or build_registry(settings),
        deterministic=True,
    )
    stdout.write(response.SerializeToString())
    stdout.flush()
