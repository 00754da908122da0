"""Action dispatcher -- resolve, check access, invoke.

Pipeline
--------

1. **Guard** -- an empty action fails with ``app_no_suitable_action``.
2. **Record** -- the action becomes the context's executed action and, for
   top-level controllers, is published to the rendering layer.
3. **Access** -- ``[admin/]app/action`` is evaluated for the session's
   principal; any denial stops the pipeline.
4. **Admin chrome** -- top-level admin controllers publish the admin menu
   and a page title.
5. **Invoke** -- the action is reduced to ``[a-z_]`` and looked up in the
   controller's handler table.  A missing handler is a debug diagnostic,
   not a failure: the response carries empty data.

The handler key must be the exact action that was access-checked.  An
action that the route parser would split or lower-case, or that loses
characters when reduced to ``[a-z_]``, is denied in step 3.

Denials and dispatch errors are raised internally and converted into a
:class:`~apphost.core.types.DispatchResponse`; :meth:`Dispatcher.dispatch`
never raises them.

Usage
-----
::

    dispatcher = Dispatcher(
        access=AccessEvaluator(loader),
        session=InMemorySession(principal),
        renderer=InMemoryRenderer(),
        diagnostics=InMemoryDiagnostics(),
        localizer=DictLocalizer(),
    )
    controller = NewsController()
    controller.init(ExecutionContext("news", apps_dir / "news"), loader)
    response = dispatcher.run(controller, "add", {"title": "..."})
"""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from apphost.core.errors import (
    AccessDenied,
    AppHostError,
    AuthorizationError,
    DispatchError,
    NoHandler,
    NoSuitableAction,
    NotAnAdmin,
)
from apphost.core.interfaces import DictLocalizer, InMemoryDiagnostics
from apphost.core.types import DispatchResponse, Note, Severity

if TYPE_CHECKING:
    from apphost.access.evaluator import AccessEvaluator
    from apphost.core.interfaces import (
        DiagnosticsSink,
        Localizer,
        Renderer,
        SessionStore,
    )
    from apphost.core.types import Manifest
    from apphost.dispatch.controller import Controller

logger = logging.getLogger(__name__)

_NOT_HANDLER_CHARS: re.Pattern[str] = re.compile(r"[^a-z_]")

# Rendering-layer variables
ACTION_VAR = "host_action"
ADMIN_SUBMENU_VAR = "host_admin_has_submenu"
ADMIN_ACTIONS_VAR = "host_admin_actions"
PAGE_TITLE_VAR = "host_page_title"

_TITLE_SEPARATOR = " » "


def handler_name(action: str) -> str:
    """Reduce *action* to the characters allowed in a handler key."""
    return _NOT_HANDLER_CHARS.sub("", action)


def _capitalize_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


class Dispatcher:
    """Runs actions on controllers.

    Parameters
    ----------
    access:
        Evaluator used for the access check of every dispatched action.
    session:
        Source of the current requester.
    renderer:
        The page-level rendering layer receiving top-level variables.
    diagnostics:
        Sink for the non-fatal no-handler note.  Defaults to an
        :class:`~apphost.core.interfaces.InMemoryDiagnostics`.
    localizer:
        Message catalogue for denial texts and admin descriptions.
        Defaults to a :class:`~apphost.core.interfaces.DictLocalizer`.
    """

    def __init__(
        self,
        access: AccessEvaluator,
        session: SessionStore,
        renderer: Renderer,
        diagnostics: DiagnosticsSink | None = None,
        localizer: Localizer | None = None,
    ) -> None:
        self._access = access
        self._session = session
        self._renderer = renderer
        self._diagnostics: DiagnosticsSink = diagnostics or InMemoryDiagnostics()
        self._localizer: Localizer = localizer or DictLocalizer()

    @property
    def diagnostics(self) -> DiagnosticsSink:
        return self._diagnostics

    @property
    def localizer(self) -> Localizer:
        return self._localizer

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(
        self,
        controller: Controller,
        requested: str | None,
        params: dict[str, Any] | None = None,
    ) -> DispatchResponse:
        """Resolve *requested* through the manifest, then launch it."""
        action = controller.executable_action(requested)
        return controller.launch(self, action, params)

    def dispatch(
        self,
        controller: Controller,
        action: str,
        params: dict[str, Any] | None = None,
    ) -> DispatchResponse:
        """Check access to *action* and invoke its handler.

        Returns
        -------
        DispatchResponse
            ``success`` with the handler's result (``{}`` without handler),
            ``denied`` with the denial note, or ``error`` when no action
            was given.
        """
        try:
            return self._forward(controller, action, params or {})
        except AuthorizationError as exc:
            return self._error_response("denied", exc, action)
        except DispatchError as exc:
            return self._error_response("error", exc, action)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _forward(
        self,
        controller: Controller,
        action: str,
        params: dict[str, Any],
    ) -> DispatchResponse:
        context = controller.context

        # -- Step 1: Guard ------------------------------------------------------
        if not action:
            raise NoSuitableAction(context.app)

        # -- Step 2: Record -----------------------------------------------------
        context.executed_action = action
        if not context.has_parent:
            self._renderer.assign(ACTION_VAR, action)

        # -- Step 3: Access -----------------------------------------------------
        principal = self._session.principal()
        path = f"{'admin/' if context.admin else ''}{context.app}/{action}"
        decision = self._access.has_access(path, principal)
        if not decision.allowed:
            if context.admin and principal.is_anonymous:
                raise NotAnAdmin()
            error = decision.error()
            if error is not None:
                raise error
        name = handler_name(decision.route.action)
        if decision.route.action != action or name != action:
            logger.info("Refusing %r on %s: checked as %r", action, context.app, name)
            raise AccessDenied(action, context.app)

        # -- Step 4: Admin chrome -----------------------------------------------
        if context.admin and not context.has_parent:
            manifest = controller.manifest or self._access.loader.load(context.app)
            if manifest is not None:
                self._publish_admin(manifest, action)

        self._localizer.declare_directory(context.directory / "lang")

        # -- Step 5: Invoke -----------------------------------------------------
        handler = controller.handler_for(name)
        if handler is None:
            exc = NoHandler(name, context.app)
            note = self._diagnostics.error(exc.code, self._message(exc), Severity.DEBUG)
            return DispatchResponse(status="success", action=action, data={}, note=note)

        logger.debug("Dispatching %s/%s to handler %r", context.app, action, name)
        return DispatchResponse(status="success", action=action, data=handler(params))

    def _publish_admin(self, manifest: Manifest, action: str) -> None:
        self._renderer.assign(ADMIN_SUBMENU_VAR, manifest.admin_has_submenu)
        self._renderer.assign(ADMIN_ACTIONS_VAR, manifest.admin)

        title = f"Admin{_TITLE_SEPARATOR}{_capitalize_words(manifest.name)}"
        spec = manifest.admin.get(action)
        if spec is not None:
            title += _TITLE_SEPARATOR + self._localizer.get(spec.description)
        self._renderer.assign(PAGE_TITLE_VAR, title)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _message(self, exc: AppHostError) -> str:
        return self._localizer.get(exc.message_key, *exc.args)

    def _error_response(
        self,
        status: str,
        exc: AppHostError,
        action: str,
    ) -> DispatchResponse:
        """Build a :class:`DispatchResponse` from an apphost error."""
        return DispatchResponse(
            status=status,  # type: ignore[arg-type]
            action=action or "",
            note=Note(level=Severity.ERROR, code=exc.code, message=self._message(exc)),
        )
