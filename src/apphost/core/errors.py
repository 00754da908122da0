"""apphost error hierarchy.

Every failure the host core can report is a concrete exception class whose
``code`` doubles as the localisation message key (``error_<code>``).

Hierarchy
---------
::

    AppHostError
    +-- ConfigError           (missing manifest)
    +-- AuthorizationError    (access denials)
    +-- DispatchError         (no action / no handler)
    +-- CacheError            (on-disk manifest cache, non-fatal)

Usage
-----
Errors are raised inside a component and converted at its boundary into
structured values (:class:`~apphost.core.types.Note`,
:class:`~apphost.core.types.DispatchResponse`)::

    try:
        ...
    except AuthorizationError as exc:
        return self._error_response("denied", exc)
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class AppHostError(Exception):
    """Base exception for all apphost errors.

    Attributes
    ----------
    code : str
        Stable error code, also used as the localisation key suffix.
    message : str
        Default English description.  Callers replace it with the
        localised text when a :class:`~apphost.core.interfaces.Localizer`
        is available.
    args : tuple
        Positional values interpolated into the localised message.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    """

    code: str = "app_error"
    message: str = "Unknown application host error"

    def __init__(
        self,
        *args: Any,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        super().__init__(*args)

    @property
    def message_key(self) -> str:
        """Key looked up in the localisation catalogue."""
        return f"error_{self.code}"

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to a plain mapping."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        return {"error": payload}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, args={self.args!r})"


# ===================================================================
# Category base classes
# ===================================================================

class ConfigError(AppHostError):
    """Application configuration errors (missing or unreadable manifest)."""

    code = "app_config"


class AuthorizationError(AppHostError):
    """The requester may not run the requested action."""

    code = "app_no_access"


class DispatchError(AppHostError):
    """The requested action cannot be dispatched to a handler."""

    code = "app_dispatch"


class CacheError(AppHostError):
    """On-disk manifest cache failures.  Always non-fatal."""

    code = "cache_manifest"


# ===================================================================
# Configuration
# ===================================================================

class ManifestNotFound(ConfigError):
    """The application ships no manifest descriptor.

    ``args``: ``(app,)``
    """

    code = "app_no_manifest"
    message = "The application has no manifest"


# ===================================================================
# Authorization
# ===================================================================

class AccessDenied(AuthorizationError):
    """Generic denial.

    ``args``: ``(action, app)``
    """

    code = "app_no_access"
    message = "You do not have access to this action"


class LogoutRequired(AuthorizationError):
    """The action is reserved to visitors that are not logged in.

    ``args``: ``(action, app)``
    """

    code = "app_logout_required"
    message = "You must log out to access this action"


class NotAnAdmin(AuthorizationError):
    """An anonymous requester asked for the administration area."""

    code = "not_an_admin"
    message = "You must be an administrator to access this area"


# ===================================================================
# Dispatch
# ===================================================================

class NoSuitableAction(DispatchError):
    """Neither the request nor the manifest provided an action.

    ``args``: ``(app,)``
    """

    code = "app_no_suitable_action"
    message = "No suitable action was found"


class NoHandler(DispatchError):
    """The controller declares no handler for the action.

    ``args``: ``(handler_name, app)``
    """

    code = "app_no_method"
    message = "The application has no handler for this action"


# ===================================================================
# Cache
# ===================================================================

class CacheWriteFailure(CacheError):
    """The parsed manifest could not be written to the cache.

    ``args``: ``(cache_path,)``
    """

    code = "cache_manifest_failed"
    message = "The manifest could not be written to the cache"


class CacheReadFailure(CacheError):
    """A cache artifact exists but does not hold a valid snapshot.

    ``args``: ``(cache_path,)``
    """

    code = "cache_manifest_invalid"
    message = "The cached manifest is unreadable"
