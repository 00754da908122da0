"""Request variables: filtered, memoized reads and trusted writes.

A :class:`RequestStore` wraps the input channels of one request (query,
body, files, cookies) plus a *unified* view merging query, body and
cookie values, later channels overriding earlier ones.

Reads
-----
The first read of a ``(channel, name)`` key runs the value -- or the
default when the channel holds none -- through the input filter, stores
the result back into the channel and marks the key as checked.  Later
reads return the stored value verbatim and ignore their default
(first check wins).

Writes
------
:meth:`RequestStore.set` stores trusted values without filtering and
marks them as checked.

Lock
----
While locked, reads return their default untouched and writes do
nothing.  Locking never forgets checked keys.

The store is request-scoped: create one per request and never share it
between requests.  Its state is guarded by a re-entrant lock so a request
may be served by several threads.
"""
from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from typing import Any, SupportsIndex, overload

from apphost.core.types import Channel
from apphost.request.filters import InputFilter, TagAllowListFilter

ChannelName = Channel | str | None

_MERGED_CHANNELS: tuple[Channel, ...] = (Channel.QUERY, Channel.BODY, Channel.COOKIE)


class BatchValues(list[Any]):
    """Values of a batch :meth:`RequestStore.get`, in request order.

    Values are also reachable by name: ``values["title"]`` or
    ``values.named``.
    """

    def __init__(self, names: Iterable[str], values: Iterable[Any]) -> None:
        names = list(names)
        values = list(values)
        super().__init__(values)
        self.named: dict[str, Any] = dict(zip(names, values))

    @overload
    def __getitem__(self, key: str) -> Any: ...

    @overload
    def __getitem__(self, key: SupportsIndex) -> Any: ...

    @overload
    def __getitem__(self, key: slice) -> list[Any]: ...

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, str):
            return self.named[key]
        return super().__getitem__(key)


class RequestStore:
    """Input channels of one request.

    Parameters
    ----------
    query, body, files, cookies:
        Raw channel data.  The mappings are copied.
    method:
        The HTTP method of the request.
    input_filter:
        Filter applied on first read.  Defaults to a
        :class:`~apphost.request.filters.TagAllowListFilter`.
    """

    def __init__(
        self,
        query: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
        cookies: Mapping[str, Any] | None = None,
        *,
        method: str = "GET",
        input_filter: InputFilter | None = None,
    ) -> None:
        self._channels: dict[Channel, dict[str, Any]] = {
            Channel.QUERY: dict(query or {}),
            Channel.BODY: dict(body or {}),
            Channel.FILES: dict(files or {}),
            Channel.COOKIE: dict(cookies or {}),
        }
        unified: dict[str, Any] = {}
        for channel in _MERGED_CHANNELS:
            unified.update(self._channels[channel])
        self._channels[Channel.UNIFIED] = unified

        self._method = (method or "GET").upper()
        self._filter: InputFilter = input_filter or TagAllowListFilter()
        self._checked: set[tuple[Channel, str]] = set()
        self._locked = False
        self._lock = threading.RLock()

    # -- properties ---------------------------------------------------------

    @property
    def method(self) -> str:
        """HTTP method of the request, upper-cased."""
        return self._method

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def input_filter(self) -> InputFilter:
        return self._filter

    def channel(self, channel: ChannelName = Channel.UNIFIED) -> dict[str, Any]:
        """Return a copy of the current data of *channel*."""
        with self._lock:
            return dict(self._channels[Channel.coerce(channel)])

    def is_checked(self, name: str, channel: ChannelName = Channel.UNIFIED) -> bool:
        with self._lock:
            return (Channel.coerce(channel), name) in self._checked

    # -- reads --------------------------------------------------------------

    def get(
        self,
        names: str | Iterable[str],
        default: Any = None,
        channel: ChannelName = Channel.UNIFIED,
    ) -> Any:
        """Read one variable, or several at once.

        With a single name, *default* is that variable's default.  With a
        sequence of names, *default* is an optional mapping of name to
        default and the result is a :class:`BatchValues`::

            title, body = store.get(["title", "body"], {"body": ""})
        """
        if isinstance(names, str):
            return self.get_value(channel, names, default)
        names = list(names)
        values = self._read_many(names, default, channel)
        return BatchValues(names, values)

    def get_assoc(
        self,
        names: Iterable[str],
        default: Mapping[str, Any] | None = None,
        channel: ChannelName = Channel.UNIFIED,
    ) -> dict[str, Any]:
        """Read several variables into a mapping of name to value."""
        names = list(names)
        return dict(zip(names, self._read_many(names, default, channel)))

    def get_value(
        self,
        channel: ChannelName,
        name: str,
        default: Any = None,
    ) -> Any:
        """Return the filtered value of *name* in *channel*.

        See the module documentation for the memoization and lock rules.
        Returns ``None`` when neither a value nor a default exists.
        """
        key = (Channel.coerce(channel), name)
        with self._lock:
            if self._locked:
                return default

            data = self._channels[key[0]]
            if key in self._checked:
                return data.get(name)

            value = data.get(name)
            if value is not None:
                data[name] = self._filter.filter(value)
            elif default is not None:
                data[name] = self._filter.filter(default)

            if data.get(name) is None:
                return None
            self._checked.add(key)
            return data[name]

    def _read_many(
        self,
        names: list[str],
        default: Any,
        channel: ChannelName,
    ) -> list[Any]:
        defaults = default if isinstance(default, Mapping) else {}
        return [self.get_value(channel, name, defaults.get(name)) for name in names]

    # -- writes -------------------------------------------------------------

    def set(
        self,
        name: str,
        value: Any,
        channel: ChannelName = Channel.UNIFIED,
        overwrite: bool = True,
    ) -> Any:
        """Store a trusted *value* and return the previous unified value.

        Query, body and cookie writes also update the unified view; files
        writes touch the files channel only; unified writes touch the
        unified view only.  With ``overwrite=False`` an existing unified
        value is kept and returned.  Does nothing and returns ``None``
        while locked.
        """
        target = Channel.coerce(channel)
        with self._lock:
            if self._locked:
                return None

            unified = self._channels[Channel.UNIFIED]
            if not overwrite and name in unified:
                return unified[name]

            previous = unified.get(name)
            if target is Channel.FILES:
                self._channels[Channel.FILES][name] = value
            else:
                if target is not Channel.UNIFIED:
                    self._channels[target][name] = value
                unified[name] = value
            self._checked.add((target, name))
            return previous

    # -- state --------------------------------------------------------------

    def filter(self, value: Any) -> Any:
        """Run *value* through the store's input filter."""
        return self._filter.filter(value)

    def has_data(self) -> bool:
        """``True`` if the unified view holds values, none of them ``None``, and the store is unlocked."""
        with self._lock:
            unified = self._channels[Channel.UNIFIED]
            return (
                bool(unified)
                and all(v is not None for v in unified.values())
                and not self._locked
            )

    def lock(self) -> None:
        """Freeze every read and write."""
        with self._lock:
            self._locked = True

    def unlock(self) -> None:
        with self._lock:
            self._locked = False
