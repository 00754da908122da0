"""apphost collaborator interfaces and in-memory implementations.

The host core consumes five external collaborators: route parsing, the
session store, the diagnostics sink, localisation and the rendering layer.
This module defines their *structural* interfaces (``typing.Protocol``)
plus lightweight in-memory implementations suitable for testing and local
development.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from apphost.core.types import (
    ExecutionContext,
    Note,
    Principal,
    Route,
    Severity,
)

logger = logging.getLogger(__name__)

# ===================================================================
# Protocol (interface) definitions
# ===================================================================

@runtime_checkable
class RouteParser(Protocol):
    """Turns a request path into a :class:`Route`."""

    def parse(self, path: str) -> Route:
        """Parse *path*; an unusable path yields a route with an empty app."""
        ...


@runtime_checkable
class SessionStore(Protocol):
    """Read access to the requester's session."""

    def principal(self) -> Principal:
        """Return the current requester."""
        ...


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Records notes for display or debugging."""

    def error(self, code: str, message: str, level: Severity = Severity.ERROR) -> Note:
        """Record a note and return it so callers can hand it back."""
        ...


@runtime_checkable
class Localizer(Protocol):
    """Message-key to display-string lookup."""

    def get(self, key: str, *args: Any) -> str:
        """Return the text for *key* with *args* interpolated."""
        ...

    def declare_directory(self, path: Path) -> None:
        """Register a directory holding an application's catalogues."""
        ...


@runtime_checkable
class Renderer(Protocol):
    """The rendering layer, seen from the dispatcher."""

    def assign(self, name: str, value: Any) -> None:
        """Publish a template variable."""
        ...

    def set_context(self, context: ExecutionContext) -> None:
        """Bind the execution context of the controller being rendered."""
        ...


# ===================================================================
# In-memory implementations (testing / development)
# ===================================================================

class PathRouteParser:
    """Parses ``[admin/]app[/action[/param...]]`` paths.

    Segments are split on ``/``; empty segments are ignored.  The app and
    action segments are lower-cased.
    """

    def __init__(self, admin_segment: str = "admin") -> None:
        self._admin_segment = admin_segment

    def parse(self, path: str) -> Route:
        segments = [s for s in path.strip().split("/") if s]
        admin = False
        if segments and segments[0].lower() == self._admin_segment:
            admin = True
            segments = segments[1:]
        if not segments:
            return Route(app="", admin=admin)
        app = segments[0].lower()
        action = segments[1].lower() if len(segments) > 1 else ""
        return Route(app=app, action=action, admin=admin, params=tuple(segments[2:]))


class InMemorySession:
    """Session store holding a fixed principal (test helper)."""

    def __init__(self, principal: Principal | None = None) -> None:
        self._principal = principal or Principal()

    def principal(self) -> Principal:
        return self._principal

    def set_principal(self, principal: Principal) -> None:
        """Replace the current requester (test helper)."""
        self._principal = principal


_LOG_LEVELS: dict[Severity, int] = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}


class InMemoryDiagnostics:
    """Diagnostics sink keeping every note in a list.

    Each note is also mirrored to :mod:`logging`.
    """

    def __init__(self) -> None:
        self.notes: list[Note] = []

    def error(self, code: str, message: str, level: Severity = Severity.ERROR) -> Note:
        note = Note(level=level, code=code, message=message)
        self.notes.append(note)
        logger.log(_LOG_LEVELS[level], "%s: %s", code, message)
        return note

    def codes(self) -> list[str]:
        """Return the codes of all recorded notes, in order."""
        return [n.code for n in self.notes]

    def clear(self) -> None:
        self.notes.clear()


DEFAULT_MESSAGES: dict[str, str] = {
    "error_app_no_manifest": "The application '{0}' has no manifest.",
    "error_app_no_access": "You do not have access to the action '{0}' of the application '{1}'.",
    "error_app_logout_required": "You must log out to access the action '{0}' of the application '{1}'.",
    "error_not_an_admin": "You must be an administrator to access this area.",
    "error_app_no_suitable_action": "No suitable action was found for the application '{0}'.",
    "error_app_no_method": "The handler '{0}' does not exist in the application '{1}'.",
    "error_cache_manifest_failed": "The manifest could not be written to the cache file '{0}'.",
    "error_cache_manifest_invalid": "The cached manifest '{0}' is unreadable.",
}


class DictLocalizer:
    """Localizer backed by a dictionary of ``str.format`` templates.

    Unknown keys are returned verbatim, so a missing catalogue entry never
    hides a message.
    """

    def __init__(self, messages: dict[str, str] | None = None) -> None:
        self._messages: dict[str, str] = dict(DEFAULT_MESSAGES)
        if messages:
            self._messages.update(messages)
        self.directories: list[Path] = []

    def get(self, key: str, *args: Any) -> str:
        template = self._messages.get(key)
        if template is None:
            return key
        try:
            return template.format(*args)
        except (IndexError, KeyError):
            return template

    def declare_directory(self, path: Path) -> None:
        if path not in self.directories:
            self.directories.append(path)


class InMemoryRenderer:
    """Rendering layer that records assigned variables."""

    def __init__(self) -> None:
        self.variables: dict[str, Any] = {}
        self.context: ExecutionContext | None = None

    def assign(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def set_context(self, context: ExecutionContext) -> None:
        self.context = context
