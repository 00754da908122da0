"""apphost shared domain types.

This module defines every value type, enum, and Pydantic model that is shared
across the host core.  All public symbols are re-exported from
``apphost.core``.

Key design decisions:
* ``Manifest`` and its action specs are *frozen* Pydantic models: a parsed
  manifest is shared between requests and never mutated after parsing.
* The requester's access level is a tagged variant (``Anonymous``,
  ``SuperAdmin``, ``Scoped``) instead of an overloaded session value.
* ``ExecutionContext`` is a plain class: every field is read-only except the
  last executed action, which the dispatcher records.
* Enums use *string* values so they serialise cleanly to JSON.
"""
from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Requirement tokens
# ---------------------------------------------------------------------------

CONNECTED = "connected"
"""The requester must be logged in."""

NOT_CONNECTED = "not-connected"
"""The requester must *not* be logged in."""

ADMIN = "admin"
"""The requester must hold the ``admin`` permission on the application."""

ADMIN_ALIAS_PREFIX = "admin-"
"""Namespace prefix separating admin aliases from normal ones."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Severity(enum.StrEnum):
    """Severity of a diagnostics :class:`Note`."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"
    DEBUG = "debug"


class Verdict(enum.StrEnum):
    """Outcome of an access evaluation."""

    ALLOW = "allow"
    DENY = "deny"
    DENY_LOGOUT_REQUIRED = "deny_logout_required"
    DENY_NOT_ADMIN = "deny_not_admin"


class Channel(enum.StrEnum):
    """Input channel a request variable is read from.

    ``UNIFIED`` is the merged view of query, body and cookie values.
    """

    QUERY = "query"
    BODY = "body"
    FILES = "files"
    COOKIE = "cookie"
    UNIFIED = "unified"

    @classmethod
    def coerce(cls, value: Channel | str | None) -> Channel:
        """Return the channel named by *value*.

        Accepts enum members, their values in any case, and the
        conventional HTTP names ``GET``/``POST``/``REQUEST``.  Anything
        unrecognised selects :attr:`UNIFIED`.
        """
        if isinstance(value, Channel):
            return value
        if not value:
            return cls.UNIFIED
        name = value.strip().lower()
        return _CHANNEL_NAMES.get(name, cls.UNIFIED)


_CHANNEL_NAMES: dict[str, Channel] = {
    "query": Channel.QUERY,
    "get": Channel.QUERY,
    "body": Channel.BODY,
    "post": Channel.BODY,
    "files": Channel.FILES,
    "cookie": Channel.COOKIE,
    "unified": Channel.UNIFIED,
    "request": Channel.UNIFIED,
}


# ---------------------------------------------------------------------------
# Manifest models
# ---------------------------------------------------------------------------

class ActionSpec(BaseModel):
    """A normal action declared in a manifest."""

    model_config = ConfigDict(frozen=True)

    description: str
    requires: tuple[str, ...] = ()


class AdminActionSpec(ActionSpec):
    """An administration action; ``menu`` controls its submenu entry."""

    menu: bool = True


class Manifest(BaseModel):
    """Parsed, immutable descriptor of one application.

    ``alias`` holds both namespaces: normal aliases verbatim and admin
    aliases prefixed with :data:`ADMIN_ALIAS_PREFIX`.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    version: str = ""
    date: str = ""
    icon: str = ""
    actions: dict[str, ActionSpec] = Field(default_factory=dict)
    default: str | None = None
    admin: dict[str, AdminActionSpec] = Field(default_factory=dict)
    default_admin: str | None = None
    admin_has_submenu: bool = False
    alias: dict[str, str] = Field(default_factory=dict)
    permissions: tuple[str, ...] = ()

    @classmethod
    def empty(cls, name: str = "") -> Manifest:
        """Return a manifest declaring nothing but its name."""
        return cls(name=name)

    def actions_for(self, admin: bool) -> Mapping[str, ActionSpec]:
        """Return the action map of the given mode."""
        return self.admin if admin else self.actions

    def default_for(self, admin: bool) -> str | None:
        """Return the default action key of the given mode."""
        return self.default_admin if admin else self.default

    def alias_target(
        self,
        name: str,
        admin: bool,
        prefix: str = ADMIN_ALIAS_PREFIX,
    ) -> str | None:
        """Return the canonical key *name* is an alias of, if any."""
        key = f"{prefix}{name}" if admin else name
        return self.alias.get(key)


# ---------------------------------------------------------------------------
# Principal -- the requester's authorization state
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Anonymous:
    """No permission at all."""


@dataclass(frozen=True, slots=True)
class SuperAdmin:
    """Matches every permission check of every application."""


@dataclass(frozen=True, slots=True)
class Scoped:
    """Per-application permission sets.

    Attributes
    ----------
    grants:
        Mapping of application name to the set of tokens held on it.
    """

    grants: Mapping[str, frozenset[str]] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        normalised = {
            str(app): frozenset(str(token) for token in tokens)
            for app, tokens in self.grants.items()
        }
        object.__setattr__(self, "grants", normalised)

    def tokens(self, app: str) -> frozenset[str]:
        """Return the tokens held on *app* (empty when none)."""
        return self.grants.get(app, frozenset())

    def holds(self, app: str, token: str) -> bool:
        """Return ``True`` if *token* is held on *app*."""
        return token in self.tokens(app)


Access = Anonymous | SuperAdmin | Scoped


@dataclass(frozen=True, slots=True)
class Principal:
    """The requester: an access level plus the logged-in flag."""

    access: Access = field(default_factory=Anonymous)
    connected: bool = False

    @classmethod
    def from_session(cls, access: Any, connected: bool = False) -> Principal:
        """Build a principal from a raw session ``access`` value.

        * empty / ``None`` -> :class:`Anonymous`
        * ``"all"`` -> :class:`SuperAdmin`
        * mapping of app -> iterable of tokens -> :class:`Scoped`
        """
        if not access:
            return cls(Anonymous(), connected)
        if access == "all":
            return cls(SuperAdmin(), connected)
        if isinstance(access, Mapping):
            grants = {
                app: frozenset(tokens)
                for app, tokens in access.items()
                if isinstance(tokens, (list, tuple, set, frozenset))
            }
            return cls(Scoped(grants), connected)
        raise TypeError(f"Unsupported session access value: {type(access).__name__}")

    @property
    def is_anonymous(self) -> bool:
        return isinstance(self.access, Anonymous)

    @property
    def is_super_admin(self) -> bool:
        return isinstance(self.access, SuperAdmin)

    def tokens(self, app: str) -> frozenset[str]:
        """Return the tokens held on *app*; only scoped principals hold any."""
        if isinstance(self.access, Scoped):
            return self.access.tokens(app)
        return frozenset()


# ---------------------------------------------------------------------------
# Routing and execution context
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Route:
    """A parsed request target.

    Attributes
    ----------
    app:
        Application name (empty when the path named none).
    action:
        Requested action, possibly empty.
    admin:
        ``True`` for the administration area.
    params:
        Remaining path segments.
    """

    app: str
    action: str = ""
    admin: bool = False
    params: tuple[str, ...] = ()


class ExecutionContext:
    """Per-controller execution context.

    All fields are fixed at controller initialisation except
    :attr:`executed_action`, which the dispatcher records before running
    an action.  The context is forwarded to nested controllers (see
    :meth:`child`) and to the rendering layer.
    """

    __slots__ = ("_app", "_directory", "_admin", "_parent", "executed_action")

    def __init__(
        self,
        app: str,
        directory: Path,
        *,
        admin: bool = False,
        parent: bool = False,
    ) -> None:
        self._app = app
        self._directory = Path(directory)
        self._admin = admin
        self._parent = parent
        self.executed_action = ""

    @property
    def app(self) -> str:
        return self._app

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def admin(self) -> bool:
        return self._admin

    @property
    def has_parent(self) -> bool:
        return self._parent

    def child(self, app: str, directory: Path) -> ExecutionContext:
        """Return the context of a controller nested inside this one."""
        return ExecutionContext(app, directory, admin=self._admin, parent=True)

    def as_dict(self) -> dict[str, Any]:
        return {
            "app": self._app,
            "directory": str(self._directory),
            "admin": self._admin,
            "parent": self._parent,
            "executed_action": self.executed_action,
        }

    def __repr__(self) -> str:
        return (
            f"ExecutionContext(app={self._app!r}, admin={self._admin!r}, "
            f"parent={self._parent!r}, executed_action={self.executed_action!r})"
        )


# ---------------------------------------------------------------------------
# Structured results
# ---------------------------------------------------------------------------

class Note(BaseModel):
    """A diagnostics note: severity, stable code and display text."""

    model_config = ConfigDict(strict=True, frozen=True)

    level: Severity
    code: str
    message: str


class DispatchResponse(BaseModel):
    """Result of dispatching an action.

    ``data`` carries the handler's result on success (``{}`` when the
    controller had no handler); ``note`` is set on denials, errors and
    the no-handler diagnostic.
    """

    model_config = ConfigDict(strict=True)

    status: Literal["success", "denied", "error"]
    action: str = ""
    data: Any = None
    note: Note | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"
