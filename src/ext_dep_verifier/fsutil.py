"""Small filesystem helpers shared by the adjusters and the verifier."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


logger = logging.getLogger(__name__)


@contextmanager
def preserved_mtime(path: Path) -> Iterator[None]:
    """Restore the modification time `path` had before the block.

    Up-to-date checks of incremental builds compare timestamps, so a
    post-processing rewrite must not look like a fresh output. Failing to
    reset the timestamp is logged, never raised.
    """
    before = path.stat()
    try:
        yield
    finally:
        try:
            after = path.stat()
            if after.st_mtime_ns != before.st_mtime_ns:
                os.utime(path, ns=(after.st_atime_ns, before.st_mtime_ns))
        except OSError as exc:
            logger.warning(
                "Unable to reset last-modified timestamp for %s; up-to-date checks may be affected (%s)",
                path.resolve(),
                exc,
            )


def touch(path: Path) -> None:
    """Create an empty marker output file; failures are logged as warnings."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    except OSError as exc:
        logger.warning("Unable to create output file %s (%s)", path, exc)
