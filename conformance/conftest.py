"""Shared fixtures for apphost conformance tests.

Provides a ``blog`` application whose manifest declares a default action
``list`` and an action ``create`` aliased to ``new`` and ``add``, plus
the collaborators needed to dispatch against it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from apphost.access.evaluator import AccessEvaluator
from apphost.core.config import HostConfig
from apphost.core.interfaces import (
    DictLocalizer,
    InMemoryDiagnostics,
    InMemoryRenderer,
    InMemorySession,
)
from apphost.core.types import ExecutionContext, Manifest
from apphost.dispatch.controller import Controller
from apphost.dispatch.dispatcher import Dispatcher
from apphost.manifest.loader import ManifestLoader
from apphost.manifest.parser import parse_string
from apphost.request.store import RequestStore

BLOG_DESCRIPTOR = """\
<manifest>
    <name>blog</name>
    <action default="default">list</action>
    <action alias="new,add" requires="connected">create</action>
    <action requires="not-connected">register</action>
    <admin>
        <action default="default">list</action>
        <action requires="editor">edit</action>
        <action requires="publisher">publish</action>
    </admin>
    <permission name="editor" />
    <permission name="publisher" />
</manifest>
"""


class BlogController(Controller):

    def list_posts(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"posts": []}

    def create(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"created": params.get("title")}

    def edit(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"edited": params.get("id")}

    HANDLERS = {
        "list": list_posts,
        "create": create,
        "edit": edit,
    }


# ---------------------------------------------------------------------------
# Manifest fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def blog_manifest() -> Manifest:
    return parse_string(BLOG_DESCRIPTOR, default_name="blog")


@pytest.fixture()
def apps_dir(tmp_path: Path) -> Path:
    root = tmp_path / "apps"
    (root / "blog").mkdir(parents=True)
    (root / "blog" / "manifest.xml").write_text(BLOG_DESCRIPTOR, encoding="utf-8")
    return root


@pytest.fixture()
def loader(apps_dir: Path, tmp_path: Path) -> ManifestLoader:
    return ManifestLoader(HostConfig(apps_dir=apps_dir, cache_dir=tmp_path / "cache"))


@pytest.fixture()
def evaluator(loader: ManifestLoader) -> AccessEvaluator:
    return AccessEvaluator(loader)


# ---------------------------------------------------------------------------
# Dispatch fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def session() -> InMemorySession:
    return InMemorySession()


@pytest.fixture()
def diagnostics() -> InMemoryDiagnostics:
    return InMemoryDiagnostics()


@pytest.fixture()
def renderer() -> InMemoryRenderer:
    return InMemoryRenderer()


@pytest.fixture()
def dispatcher(
    evaluator: AccessEvaluator,
    session: InMemorySession,
    renderer: InMemoryRenderer,
    diagnostics: InMemoryDiagnostics,
) -> Dispatcher:
    return Dispatcher(evaluator, session, renderer, diagnostics, DictLocalizer())


@pytest.fixture()
def blog_controller(loader: ManifestLoader, apps_dir: Path) -> BlogController:
    controller = BlogController()
    controller.init(ExecutionContext("blog", apps_dir / "blog"), loader)
    return controller


@pytest.fixture()
def blog_admin_controller(loader: ManifestLoader, apps_dir: Path) -> BlogController:
    controller = BlogController()
    controller.init(ExecutionContext("blog", apps_dir / "blog", admin=True), loader)
    return controller


# ---------------------------------------------------------------------------
# Request fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def request_store() -> RequestStore:
    return RequestStore(
        query={"id": "42", "q": "<b>python</b>"},
        body={"title": "<marquee>Hello</marquee>"},
    )
