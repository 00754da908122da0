"""Request variables.

* **RequestStore** -- per-request channels with filtered, memoized reads.
* **TagAllowListFilter** -- the default allow-list markup filter.
* **InputFilter** -- protocol implemented by input filters.
"""
from __future__ import annotations

from apphost.request.filters import InputFilter, TagAllowListFilter
from apphost.request.store import BatchValues, RequestStore

__all__ = [
    "BatchValues",
    "InputFilter",
    "RequestStore",
    "TagAllowListFilter",
]
