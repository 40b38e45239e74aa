"""
Staging area — an ephemeral directory per generation pass.

Generated output never lands in the repository directly: each pass
writes into a staging directory and the Sync Engine reconciles it
afterwards.  The directory is removed when the pass ends, whether it
succeeded or not.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


@contextmanager
def staging_area(parent: Path) -> Iterator[Path]:
    """Create a temporary staging directory under ``parent``.

    Created inside the repository so protoc output and the destination
    share a filesystem.
    """
    with tempfile.TemporaryDirectory(prefix="tmp", dir=parent) as tmp:
        logger.debug("Staging in %s", tmp)
        yield Path(tmp)
    logger.debug("Removed staging %s", tmp)
