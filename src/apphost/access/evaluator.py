"""Access evaluation.

:func:`evaluate` is a pure function of a manifest, a route and a principal.
It distinguishes three kinds of denial so callers can present them
differently (generic denial, "log out first", "administrators only").

Admin mode
----------
1. Anonymous requesters are refused as non-administrators.
2. Super-administrators are allowed.
3. The requester must hold ``admin`` on the application.
4. Without an action, application-level access is enough.
5. The action must be declared in the admin map and every requirement
   token other than ``connected``/``admin`` must be held.

Normal mode
-----------
1. The action defaults to the manifest default; no action at all is denied.
2. Super-administrators are allowed unless the action requires
   ``not-connected``: they are always logged in.
3. The action must be declared and every requirement token must hold:
   ``not-connected`` (not logged in), ``connected`` (logged in), anything
   else (logged in and holding the token on the application).

Requirement tokens are checked in declared order and evaluation stops at
the first failure.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from apphost.core.errors import (
    AccessDenied,
    AuthorizationError,
    LogoutRequired,
    NotAnAdmin,
)
from apphost.core.interfaces import PathRouteParser
from apphost.core.types import (
    ADMIN,
    CONNECTED,
    NOT_CONNECTED,
    Route,
    Verdict,
)

if TYPE_CHECKING:
    from apphost.core.interfaces import RouteParser
    from apphost.core.types import Manifest, Principal
    from apphost.manifest.loader import ManifestLoader


# ---------------------------------------------------------------------------
# Pure evaluation
# ---------------------------------------------------------------------------

def evaluate(manifest: Manifest, route: Route, principal: Principal) -> Verdict:
    """Decide whether *principal* may run *route* of the app described by *manifest*."""
    if route.admin:
        return _evaluate_admin(manifest, route, principal)
    return _evaluate_normal(manifest, route, principal)


def _evaluate_admin(manifest: Manifest, route: Route, principal: Principal) -> Verdict:
    if principal.is_anonymous:
        return Verdict.DENY_NOT_ADMIN
    if principal.is_super_admin:
        return Verdict.ALLOW

    held = principal.tokens(route.app)
    if ADMIN not in held:
        return Verdict.DENY
    if not route.action:
        return Verdict.ALLOW

    spec = manifest.admin.get(route.action)
    if spec is None:
        return Verdict.DENY
    for token in spec.requires:
        if token in (CONNECTED, ADMIN):
            continue
        if token not in held:
            return Verdict.DENY
    return Verdict.ALLOW


def _evaluate_normal(manifest: Manifest, route: Route, principal: Principal) -> Verdict:
    action = route.action or manifest.default or ""
    if not action:
        return Verdict.DENY

    spec = manifest.actions.get(action)

    if principal.is_super_admin:
        if spec is not None and NOT_CONNECTED in spec.requires:
            return Verdict.DENY_LOGOUT_REQUIRED
        return Verdict.ALLOW

    if spec is None:
        return Verdict.DENY
    for token in spec.requires:
        if token == NOT_CONNECTED:
            if principal.connected:
                return Verdict.DENY_LOGOUT_REQUIRED
        elif token == CONNECTED:
            if not principal.connected:
                return Verdict.DENY
        elif not principal.connected or token not in principal.tokens(route.app):
            return Verdict.DENY
    return Verdict.ALLOW


# ---------------------------------------------------------------------------
# Access decision
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AccessDecision:
    """The result of an access check.

    Attributes
    ----------
    verdict:
        The evaluation outcome.
    route:
        The route that was checked.
    action:
        The action the verdict applies to (the manifest default when the
        route named none in normal mode).
    """

    verdict: Verdict
    route: Route
    action: str = ""

    @property
    def allowed(self) -> bool:
        return self.verdict is Verdict.ALLOW

    def error(self) -> AuthorizationError | None:
        """Return the error matching a denial, ``None`` when allowed."""
        return verdict_error(self.verdict, self.action or self.route.action, self.route.app)


def verdict_error(verdict: Verdict, action: str, app: str) -> AuthorizationError | None:
    """Map a denial verdict to its :class:`AuthorizationError`."""
    if verdict is Verdict.ALLOW:
        return None
    if verdict is Verdict.DENY_NOT_ADMIN:
        return NotAnAdmin()
    if verdict is Verdict.DENY_LOGOUT_REQUIRED:
        return LogoutRequired(action, app)
    return AccessDenied(action, app)


# ---------------------------------------------------------------------------
# Evaluator bound to a manifest loader
# ---------------------------------------------------------------------------

class AccessEvaluator:
    """Checks access to paths and routes, loading manifests on demand.

    Parameters
    ----------
    loader:
        Source of application manifests.
    route_parser:
        Turns ``[admin/]app[/action]`` paths into routes.  Defaults to
        :class:`~apphost.core.interfaces.PathRouteParser`.
    """

    def __init__(
        self,
        loader: ManifestLoader,
        route_parser: RouteParser | None = None,
    ) -> None:
        self._loader = loader
        self._parser: RouteParser = route_parser or PathRouteParser()

    @property
    def loader(self) -> ManifestLoader:
        return self._loader

    def check(self, route: Route, principal: Principal) -> AccessDecision:
        """Evaluate *route* for *principal*.

        A route without an application, or naming an application without a
        manifest, is denied.
        """
        if not route.app:
            return AccessDecision(Verdict.DENY, route)
        manifest = self._loader.load(route.app)
        if manifest is None:
            return AccessDecision(Verdict.DENY, route)

        action = route.action
        if not route.admin and not action:
            action = manifest.default or ""
        return AccessDecision(evaluate(manifest, route, principal), route, action)

    def has_access(self, path: str, principal: Principal) -> AccessDecision:
        """Evaluate a path such as ``news``, ``news/detail`` or ``admin/news/edit``."""
        return self.check(self._parser.parse(path), principal)

    def accessible_apps(self, principal: Principal, admin: bool = False) -> dict[str, Manifest]:
        """Return the manifests of every application *principal* may open."""
        apps: dict[str, Manifest] = {}
        prefix = "admin/" if admin else ""
        for app in self._loader.discover():
            if self.has_access(f"{prefix}{app}", principal).allowed:
                manifest = self._loader.load(app)
                if manifest is not None:
                    apps[app] = manifest
        return apps
