"""Dispatch conformance tests.

Verifies the end-to-end pipeline: resolution through the manifest,
structured denials, the empty-action error and the non-fatal missing
handler.
"""
from __future__ import annotations

from typing import Any

from apphost.core.interfaces import InMemoryDiagnostics, InMemorySession
from apphost.core.types import Principal, Scoped, Severity
from apphost.dispatch.dispatcher import Dispatcher


class TestEndToEnd:
    """Resolution followed by dispatch."""

    def test_MUST_dispatch_default_for_empty_request(
        self, dispatcher: Dispatcher, blog_controller: Any
    ) -> None:
        """An empty request MUST run the default action."""
        response = dispatcher.run(blog_controller, "")
        assert response.action == "list"
        assert response.data == {"posts": []}

    def test_MUST_dispatch_alias_target(
        self, dispatcher: Dispatcher, blog_controller: Any, session: InMemorySession
    ) -> None:
        """A request for an alias MUST run the canonical action."""
        session.set_principal(Principal(connected=True))
        response = dispatcher.run(blog_controller, "add", {"title": "Hello"})
        assert response.action == "create"
        assert response.data == {"created": "Hello"}

    def test_MUST_dispatch_default_for_unknown_action(
        self, dispatcher: Dispatcher, blog_controller: Any
    ) -> None:
        """An unknown request MUST run the default action."""
        assert dispatcher.run(blog_controller, "unknown").action == "list"


class TestStructuredResults:
    """Failures are returned, never raised."""

    def test_MUST_return_denials(self, dispatcher: Dispatcher, blog_controller: Any) -> None:
        """A denied action MUST yield a ``denied`` response with its note."""
        response = dispatcher.dispatch(blog_controller, "create")
        assert response.status == "denied"
        assert response.note is not None
        assert response.note.code == "app_no_access"

    def test_MUST_return_not_admin_for_anonymous_admin(
        self, dispatcher: Dispatcher, blog_admin_controller: Any
    ) -> None:
        """Anonymous admin requests MUST yield the not-an-admin denial."""
        response = dispatcher.dispatch(blog_admin_controller, "edit")
        assert response.note is not None
        assert response.note.code == "not_an_admin"

    def test_MUST_fail_empty_action(self, dispatcher: Dispatcher, blog_controller: Any) -> None:
        """An empty action MUST yield the no-suitable-action error immediately."""
        response = dispatcher.dispatch(blog_controller, "")
        assert response.status == "error"
        assert response.note is not None
        assert response.note.code == "app_no_suitable_action"
        assert blog_controller.executed_action == ""

    def test_MUST_tolerate_missing_handler(
        self,
        dispatcher: Dispatcher,
        blog_admin_controller: Any,
        session: InMemorySession,
        diagnostics: InMemoryDiagnostics,
    ) -> None:
        """A missing handler MUST log a debug diagnostic and return an empty result."""
        session.set_principal(Principal(Scoped({"blog": {"admin", "publisher"}}), connected=True))
        response = dispatcher.dispatch(blog_admin_controller, "publish")
        assert response.ok
        assert response.data == {}
        assert diagnostics.codes() == ["app_no_method"]
        assert diagnostics.notes[0].level is Severity.DEBUG

    def test_MUST_record_executed_action(
        self, dispatcher: Dispatcher, blog_controller: Any
    ) -> None:
        """The dispatched action MUST be recorded on the execution context."""
        dispatcher.dispatch(blog_controller, "list")
        assert blog_controller.executed_action == "list"
