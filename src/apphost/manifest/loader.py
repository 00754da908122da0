"""Manifest loading with an in-process registry and an optional disk cache.

Lookup order for :meth:`ManifestLoader.load`:

1. **Registry** -- manifests already loaded in the current generation.
2. **Disk cache** -- a snapshot at least as recent as the descriptor.
3. **Descriptor** -- parsed, then written back to the disk cache.

Cache failures are never fatal: they are logged, reported to the
diagnostics sink at debug level, and the freshly parsed manifest is used.
The registry is shared by every request served by the process and is
guarded by a re-entrant lock.  Disk reads and parsing run under a
per-application lock instead, so a manifest is parsed at most once per
application per generation without one application's first load
waiting on another's.
"""
from __future__ import annotations

import logging
import re
import threading
from typing import TYPE_CHECKING

from apphost.core.errors import CacheError, ManifestNotFound
from apphost.core.types import Manifest, Severity
from apphost.manifest.cache import ManifestCache
from apphost.manifest.parser import parse

if TYPE_CHECKING:
    from apphost.core.config import HostConfig
    from apphost.core.interfaces import DiagnosticsSink

logger = logging.getLogger(__name__)

_APP_NAME: re.Pattern[str] = re.compile(r"^[A-Za-z0-9_\-]+$")


class ManifestLoader:
    """Loads and caches application manifests.

    Parameters
    ----------
    config:
        Host configuration (application and cache directories).
    diagnostics:
        Optional sink receiving non-fatal cache notes.
    """

    def __init__(
        self,
        config: HostConfig,
        diagnostics: DiagnosticsSink | None = None,
    ) -> None:
        self._config = config
        self._diagnostics = diagnostics
        self._cache: ManifestCache | None = None
        if config.cache_directory is not None:
            self._cache = ManifestCache(config.cache_directory)
        self._registry: dict[str, Manifest] = {}
        self._generation = 0
        self._lock = threading.RLock()
        self._app_locks: dict[str, threading.Lock] = {}

    # -- public properties --------------------------------------------------

    @property
    def config(self) -> HostConfig:
        return self._config

    @property
    def cache(self) -> ManifestCache | None:
        """The disk cache, or ``None`` when caching is disabled."""
        return self._cache

    @property
    def generation(self) -> int:
        """Incremented by every full :meth:`invalidate`."""
        return self._generation

    # -- loading ------------------------------------------------------------

    def load(self, app: str) -> Manifest | None:
        """Return the manifest of *app*, or ``None`` if it has no descriptor."""
        if not _APP_NAME.match(app):
            return None

        with self._lock:
            manifest = self._registry.get(app)
            if manifest is not None:
                return manifest
            app_lock = self._app_locks.setdefault(app, threading.Lock())

        with app_lock:
            with self._lock:
                manifest = self._registry.get(app)
                if manifest is not None:
                    return manifest
                generation = self._generation

            descriptor = self._config.descriptor_path(app)
            if not descriptor.is_file():
                return None

            manifest = self._load_cached(app)
            if manifest is None:
                try:
                    manifest = parse(
                        descriptor,
                        admin_alias_prefix=self._config.admin_alias_prefix,
                    )
                except ManifestNotFound:
                    return None
                logger.debug("Parsed manifest of %r from %s", app, descriptor)
                self._store_cached(app, manifest)

            with self._lock:
                # A full invalidate during the read leaves this result unregistered.
                if generation == self._generation:
                    self._registry[app] = manifest
            return manifest

    def require(self, app: str) -> Manifest:
        """Like :meth:`load`, but raise when the manifest is absent.

        Raises
        ------
        ManifestNotFound
            If *app* has no descriptor.
        """
        manifest = self.load(app)
        if manifest is None:
            raise ManifestNotFound(app)
        return manifest

    def discover(self) -> list[str]:
        """Return the sorted names of applications that ship a descriptor."""
        apps_dir = self._config.apps_dir
        if not apps_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in apps_dir.iterdir()
            if entry.is_dir()
            and _APP_NAME.match(entry.name)
            and (entry / self._config.descriptor_name).is_file()
        )

    def invalidate(self, app: str | None = None) -> None:
        """Forget loaded manifests.

        With *app*, drop only that application; otherwise start a new
        generation with an empty registry.
        """
        with self._lock:
            if app is not None:
                self._registry.pop(app, None)
                return
            self._registry.clear()
            self._generation += 1

    # -- disk cache ---------------------------------------------------------

    def _load_cached(self, app: str) -> Manifest | None:
        if self._cache is None:
            return None
        try:
            manifest = self._cache.load(app, self._config.descriptor_path(app))
        except CacheError as exc:
            self._report(exc)
            return None
        if manifest is not None:
            logger.debug("Manifest cache hit for %r", app)
        return manifest

    def _store_cached(self, app: str, manifest: Manifest) -> None:
        if self._cache is None:
            return
        try:
            self._cache.store(app, manifest)
        except CacheError as exc:
            self._report(exc)

    def _report(self, exc: CacheError) -> None:
        logger.warning("%s: %s", exc.message, exc.args[0] if exc.args else "")
        if self._diagnostics is not None:
            self._diagnostics.error(exc.code, f"{exc.message}: {exc.args[0]}", Severity.DEBUG)
