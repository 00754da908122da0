"""Application manifests.

* **parse / parse_string** -- descriptor parsing into an immutable
  :class:`~apphost.core.types.Manifest`.
* **ManifestCache** -- JSON snapshots on disk, validated against the
  descriptor timestamp.
* **ManifestLoader** -- registry, cache and parser composed behind
  :meth:`~ManifestLoader.load`.
"""
from __future__ import annotations

from apphost.manifest.cache import ManifestCache
from apphost.manifest.loader import ManifestLoader
from apphost.manifest.parser import parse, parse_string, split_list

__all__ = [
    "ManifestCache",
    "ManifestLoader",
    "parse",
    "parse_string",
    "split_list",
]
