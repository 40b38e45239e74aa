"""
Backend registry — plugin names to ordered lists of backends.

``RUN_AS_PROTOC_PLUGIN=go,grpc`` names plugins, not backends: the
``go`` plugin runs protoc-gen-go and then the field-number extractor.
The registry is the single place that mapping lives.
"""

from __future__ import annotations

import logging
from genprotos.adapters.base import Backend
from genprotos.core.errors import PluginError

logger = logging.getLogger(__name__)


class BackendRegistry:
    """Central registry of backends, keyed by plugin name.

    Features:
        - Register backends under a plugin name, in run order
        - Resolve a plugin name to its backends
    """

    def __init__(self) -> None:
        self._plugins: dict[str, list[Backend]] = {}

    def register(self, plugin: str, backend: Backend) -> None:
        """Append ``backend`` to the backends run for ``plugin``."""
        self._plugins.setdefault(plugin, []).append(backend)
        logger.debug("Registered backend %s for plugin %s", backend.name, plugin)

    def unregister(self, plugin: str) -> None:
        """Remove a plugin name and all its backends."""
        self._plugins.pop(plugin, None)

    def resolve(self, plugin: str) -> list[Backend]:
        """Backends for ``plugin``, in run order.

        Raises:
            PluginError: No backend is registered under that name.
        """
        backends = self._plugins.get(plugin)
        if not backends:
            known = ", ".join(sorted(self.list_plugins())) or "none"
            raise PluginError(f"unknown plugin {plugin!r} (registered: {known})")
        return list(backends)

    def list_plugins(self) -> list[str]:
        return list(self._plugins.keys())

