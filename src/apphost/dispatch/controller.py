"""Application controller base class.

Every application ships a :class:`Controller` subclass.  Its actions are
declared in a class-level dispatch table mapping canonical action keys to
handler functions::

    class NewsController(Controller):

        def listing(self, params):
            return {"items": [...]}

        def detail(self, params):
            ...

        HANDLERS = {
            "listing": listing,
            "detail": detail,
        }

Tables are merged along the class hierarchy when the subclass is created,
so a subclass only lists what it adds or overrides.  Handler keys must be
made of lower-case letters and underscores: the dispatcher refuses any
requested action that is not already a valid key.
"""
from __future__ import annotations

import functools
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar

from apphost.access.resolver import resolve_action
from apphost.core.errors import ManifestNotFound
from apphost.core.interfaces import InMemoryRenderer
from apphost.core.types import ADMIN_ALIAS_PREFIX, ExecutionContext

if TYPE_CHECKING:
    from pathlib import Path

    from apphost.core.interfaces import DiagnosticsSink, Localizer, Renderer
    from apphost.core.types import DispatchResponse, Manifest, Note
    from apphost.dispatch.dispatcher import Dispatcher
    from apphost.manifest.loader import ManifestLoader

HANDLER_KEY: re.Pattern[str] = re.compile(r"^[a-z_]+$")

HandlerMethod = Callable[..., Any]


class Controller:
    """Base class inherited by every application controller.

    Parameters
    ----------
    view:
        The rendering layer bound to this controller.  Defaults to an
        :class:`~apphost.core.interfaces.InMemoryRenderer`.
    """

    HANDLERS: ClassVar[dict[str, HandlerMethod]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        merged: dict[str, HandlerMethod] = {}
        for base in reversed(cls.__mro__[1:]):
            merged.update(getattr(base, "HANDLERS", {}))
        own = cls.__dict__.get("HANDLERS", {})
        for key in own:
            if not HANDLER_KEY.match(key):
                raise ValueError(
                    f"{cls.__name__}: handler key {key!r} must match [a-z_]+"
                )
        merged.update(own)
        cls.HANDLERS = merged

    def __init__(self, view: Renderer | None = None) -> None:
        self.view: Renderer = view or InMemoryRenderer()
        self.init_note: Note | None = None
        self._context: ExecutionContext | None = None
        self._manifest: Manifest | None = None
        self._alias_prefix = ADMIN_ALIAS_PREFIX
        self._headers: dict[str, str] = {}

    # -- lifecycle ------------------------------------------------------------

    def init(
        self,
        context: ExecutionContext,
        loader: ManifestLoader,
        diagnostics: DiagnosticsSink | None = None,
        localizer: Localizer | None = None,
    ) -> None:
        """Bind *context*, forward it to the view and load the manifest.

        A missing manifest is reported to *diagnostics* and kept in
        :attr:`init_note`; the controller stays usable but every access
        check on it is denied.
        """
        self._context = context
        self._alias_prefix = loader.config.admin_alias_prefix
        self.view.set_context(context)
        try:
            self._manifest = loader.require(context.app)
        except ManifestNotFound as exc:
            self._manifest = None
            if diagnostics is not None:
                message = localizer.get(exc.message_key, *exc.args) if localizer else exc.message
                self.init_note = diagnostics.error(exc.code, message)

    def launch(
        self,
        dispatcher: Dispatcher,
        action: str,
        params: dict[str, Any] | None = None,
    ) -> DispatchResponse:
        """Entry point called by the host; override to pre-process an action."""
        return dispatcher.dispatch(self, action, params)

    # -- context --------------------------------------------------------------

    @property
    def context(self) -> ExecutionContext:
        if self._context is None:
            raise RuntimeError(f"{type(self).__name__} used before init()")
        return self._context

    @property
    def app(self) -> str:
        return self.context.app

    @property
    def admin(self) -> bool:
        return self.context.admin

    @property
    def has_parent(self) -> bool:
        return self.context.has_parent

    @property
    def manifest(self) -> Manifest | None:
        return self._manifest

    @property
    def executed_action(self) -> str:
        """The action last dispatched on this controller."""
        return self.context.executed_action

    def child_context(self, app: str, directory: Path) -> ExecutionContext:
        """Return the context for a controller nested in this one."""
        return self.context.child(app, directory)

    # -- actions --------------------------------------------------------------

    def executable_action(self, action: str | None) -> str:
        """Resolve *action* against this controller's manifest and mode."""
        if self._manifest is None:
            return ""
        return resolve_action(
            self._manifest, action, self.admin, alias_prefix=self._alias_prefix,
        )

    def handler_for(self, name: str) -> Callable[[dict[str, Any]], Any] | None:
        """Return the handler bound to this instance, or ``None``."""
        handler = type(self).HANDLERS.get(name)
        if handler is None:
            return None
        return functools.partial(handler, self)

    # -- response headers -----------------------------------------------------

    def set_header(self, name: str, value: str) -> None:
        self._headers[name.lower()] = value

    def pop_headers(self) -> dict[str, str]:
        """Return the headers set so far and forget them."""
        headers, self._headers = self._headers, {}
        return headers
