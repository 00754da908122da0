"""apphost core -- shared types, errors, configuration and interfaces."""
from __future__ import annotations

from apphost.core.config import HostConfig
from apphost.core.errors import (
    AccessDenied,
    AppHostError,
    AuthorizationError,
    CacheError,
    CacheReadFailure,
    CacheWriteFailure,
    ConfigError,
    DispatchError,
    LogoutRequired,
    ManifestNotFound,
    NoHandler,
    NoSuitableAction,
    NotAnAdmin,
)
from apphost.core.types import (
    ADMIN,
    CONNECTED,
    NOT_CONNECTED,
    ActionSpec,
    AdminActionSpec,
    Anonymous,
    Channel,
    DispatchResponse,
    ExecutionContext,
    Manifest,
    Note,
    Principal,
    Route,
    Scoped,
    Severity,
    SuperAdmin,
    Verdict,
)

__all__ = [
    "ADMIN",
    "CONNECTED",
    "NOT_CONNECTED",
    "AccessDenied",
    "ActionSpec",
    "AdminActionSpec",
    "Anonymous",
    "AppHostError",
    "AuthorizationError",
    "CacheError",
    "CacheReadFailure",
    "CacheWriteFailure",
    "Channel",
    "ConfigError",
    "DispatchError",
    "DispatchResponse",
    "ExecutionContext",
    "HostConfig",
    "LogoutRequired",
    "Manifest",
    "ManifestNotFound",
    "NoHandler",
    "NoSuitableAction",
    "Note",
    "NotAnAdmin",
    "Principal",
    "Route",
    "Scoped",
    "Severity",
    "SuperAdmin",
    "Verdict",
]
