"""apphost -- request dispatch and permission core of a pluggable app host.

Applications live in their own directories and describe themselves with a
manifest descriptor.  The host resolves the requested action, checks the
requester's permissions and invokes the matching controller handler.

Components
----------
1. Manifests (:mod:`apphost.manifest`)
2. Action resolution and access evaluation (:mod:`apphost.access`)
3. Dispatch (:mod:`apphost.dispatch`)
4. Request variables (:mod:`apphost.request`)
"""
from __future__ import annotations

__version__ = "0.5.0"

from apphost.access import (
    AccessDecision,
    AccessEvaluator,
    evaluate,
    resolve_action,
)
from apphost.core.config import HostConfig
from apphost.core.errors import (
    AccessDenied,
    AppHostError,
    AuthorizationError,
    CacheError,
    ConfigError,
    DispatchError,
    LogoutRequired,
    ManifestNotFound,
    NoHandler,
    NoSuitableAction,
    NotAnAdmin,
)
from apphost.core.interfaces import (
    DictLocalizer,
    InMemoryDiagnostics,
    InMemoryRenderer,
    InMemorySession,
    PathRouteParser,
)
from apphost.core.types import (
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
from apphost.dispatch import Controller, Dispatcher
from apphost.manifest import ManifestCache, ManifestLoader
from apphost.request import RequestStore, TagAllowListFilter

__all__ = [
    "__version__",
    # Core
    "HostConfig",
    "Anonymous",
    "Channel",
    "DispatchResponse",
    "ExecutionContext",
    "Manifest",
    "Note",
    "Principal",
    "Route",
    "Scoped",
    "Severity",
    "SuperAdmin",
    "Verdict",
    # Errors
    "AccessDenied",
    "AppHostError",
    "AuthorizationError",
    "CacheError",
    "ConfigError",
    "DispatchError",
    "LogoutRequired",
    "ManifestNotFound",
    "NoHandler",
    "NoSuitableAction",
    "NotAnAdmin",
    # Collaborators
    "DictLocalizer",
    "InMemoryDiagnostics",
    "InMemoryRenderer",
    "InMemorySession",
    "PathRouteParser",
    # Components
    "AccessDecision",
    "AccessEvaluator",
    "Controller",
    "Dispatcher",
    "ManifestCache",
    "ManifestLoader",
    "RequestStore",
    "TagAllowListFilter",
    "evaluate",
    "resolve_action",
]
