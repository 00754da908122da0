"""Input filtering.

:class:`TagAllowListFilter` is a cheap, pattern-based defence against
markup injection in request values.  It is **not** an HTML parser: it
only looks at tag-shaped substrings.

* Tags in the allow-list pass through unchanged.
* Stripped tags (``script`` and ``link`` by default) are deleted together
  with the content of their elements.
* Every other tag is rewritten to its escaped literal text.

The filter is applied until the value stops changing, so filtering an
already filtered value is a no-op.  Callers depend on the
:class:`InputFilter` protocol only and can swap in a structural
sanitizer.
"""
from __future__ import annotations

import html
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from apphost.core.config import DEFAULT_ALLOWED_TAGS, DEFAULT_STRIPPED_TAGS

if TYPE_CHECKING:
    from apphost.core.config import HostConfig

_TAG: re.Pattern[str] = re.compile(r"</?([A-Za-z][A-Za-z0-9]*)(?:\s[^>]*)?/?>")


@runtime_checkable
class InputFilter(Protocol):
    """Cleans a request value before it is handed to application code."""

    def filter(self, value: Any) -> Any:
        """Return the cleaned *value*; containers are cleaned element-wise."""
        ...


class TagAllowListFilter:
    """Allow-list filter over tag-shaped substrings.

    Parameters
    ----------
    allowed_tags:
        Tag names kept verbatim (compared case-insensitively).
    stripped_tags:
        Tag names deleted with the content of their elements.
    """

    def __init__(
        self,
        allowed_tags: Iterable[str] = DEFAULT_ALLOWED_TAGS,
        stripped_tags: Iterable[str] = DEFAULT_STRIPPED_TAGS,
    ) -> None:
        self._allowed = frozenset(t.lower() for t in allowed_tags)
        self._stripped = frozenset(t.lower() for t in stripped_tags)
        self._elements: re.Pattern[str] | None = None
        if self._stripped:
            names = "|".join(sorted(re.escape(t) for t in self._stripped))
            self._elements = re.compile(
                rf"<({names})\b[^>]*>.*?</\1\s*>",
                re.DOTALL | re.IGNORECASE,
            )

    @classmethod
    def from_config(cls, config: HostConfig) -> TagAllowListFilter:
        """Build the filter from the tag lists of *config*."""
        return cls(config.allowed_tags, config.stripped_tags)

    @property
    def allowed_tags(self) -> frozenset[str]:
        return self._allowed

    @property
    def stripped_tags(self) -> frozenset[str]:
        return self._stripped

    def filter(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: self.filter(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self.filter(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.filter(item) for item in value)
        if isinstance(value, str):
            return self._clean(value)
        return value

    def _clean(self, text: str) -> str:
        # Every changing pass removes at least one "<", so this terminates.
        while True:
            cleaned = text
            if self._elements is not None:
                cleaned = self._elements.sub("", cleaned)
            cleaned = _TAG.sub(self._replace_tag, cleaned)
            if cleaned == text:
                return cleaned
            text = cleaned

    def _replace_tag(self, match: re.Match[str]) -> str:
        name = match.group(1).lower()
        if name in self._allowed:
            return match.group(0)
        if name in self._stripped:
            return ""
        return html.escape(match.group(0))
