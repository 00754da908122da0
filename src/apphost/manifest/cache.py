"""On-disk manifest cache.

One JSON artifact per application holds a serialised snapshot of the parsed
:class:`~apphost.core.types.Manifest`.  An artifact is trusted only when it
is at least as recent as the descriptor it was built from, so a stale read
corrects itself on the next parse.

Writes go to a unique temporary file in the cache directory which is then
``os.replace``-d over the artifact: concurrent writers each publish a
complete snapshot and the last one wins.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from apphost.core.errors import CacheReadFailure, CacheWriteFailure
from apphost.core.types import Manifest

logger = logging.getLogger(__name__)


class ManifestCache:
    """Reads and writes manifest snapshots below *directory*.

    Parameters
    ----------
    directory:
        Directory holding the ``<app>.json`` artifacts.  Created on the
        first write.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, app: str) -> Path:
        return self._directory / f"{app}.json"

    def is_fresh(self, app: str, descriptor_path: Path) -> bool:
        """Return ``True`` if the artifact of *app* is not older than *descriptor_path*."""
        try:
            cached = self.path_for(app).stat().st_mtime
            source = descriptor_path.stat().st_mtime
        except OSError:
            return False
        return cached >= source

    def load(self, app: str, descriptor_path: Path) -> Manifest | None:
        """Return the cached manifest of *app*, or ``None`` on a miss.

        Raises
        ------
        CacheReadFailure
            If a fresh artifact exists but does not hold a valid snapshot.
        """
        if not self.is_fresh(app, descriptor_path):
            return None
        path = self.path_for(app)
        try:
            return Manifest.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            raise CacheReadFailure(str(path), details={"reason": str(exc)}) from exc

    def store(self, app: str, manifest: Manifest) -> Path:
        """Write the snapshot of *app* and return the artifact path.

        Raises
        ------
        CacheWriteFailure
            If the cache directory or the artifact cannot be written.
        """
        path = self.path_for(app)
        payload = manifest.model_dump_json(indent=2)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._directory, prefix=f".{app}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                    handle.write("\n")
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CacheWriteFailure(str(path), details={"reason": str(exc)}) from exc
        logger.debug("Cached manifest of %r at %s", app, path)
        return path

    def remove(self, app: str) -> None:
        """Delete the artifact of *app* if present."""
        self.path_for(app).unlink(missing_ok=True)
