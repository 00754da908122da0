"""Shared fixtures for the apphost unit tests.

Provides an applications directory holding a ``news`` application, the
host configuration pointing at it, and a factory for extra applications.
"""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from apphost.core.config import HostConfig
from apphost.core.interfaces import InMemoryDiagnostics
from apphost.manifest.loader import ManifestLoader

NEWS_DESCRIPTOR = """\
<?php defined('IN_APP') or die('Access denied'); ?>
<manifest>
    <name>news</name>
    <version>1.2</version>
    <date>2016-02-11</date>
    <icon>news.png</icon>

    <action default="default" alias="index,home">listing</action>
    <action description="news_detail">detail</action>
    <action requires="connected,writer" description="news_create" alias="new,add">create</action>
    <action requires="not-connected">signup</action>
    <action requires="connected">profile</action>

    <admin>
        <action default="default" description="news_admin_listing">listing</action>
        <action requires="editor" alias="modify">edit</action>
        <action menu="false" requires="publisher">delete</action>
    </admin>

    <permission name="writer" />
    <permission name="editor" />
    <permission name="publisher" />
</manifest>
"""

MEMBERS_DESCRIPTOR = """\
<manifest>
    <name>members</name>
    <action default="default" requires="connected">home</action>
</manifest>
"""


@pytest.fixture()
def news_descriptor() -> str:
    return NEWS_DESCRIPTOR


@pytest.fixture()
def apps_dir(tmp_path: Path) -> Path:
    """An applications directory holding the ``news`` application."""
    root = tmp_path / "apps"
    (root / "news").mkdir(parents=True)
    (root / "news" / "manifest.xml").write_text(NEWS_DESCRIPTOR, encoding="utf-8")
    return root


@pytest.fixture()
def write_app(apps_dir: Path) -> Callable[[str, str], Path]:
    """Factory writing ``<apps_dir>/<name>/manifest.xml``; returns the descriptor path."""

    def _write(name: str, descriptor: str = MEMBERS_DESCRIPTOR) -> Path:
        directory = apps_dir / name
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "manifest.xml"
        path.write_text(descriptor, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def config(apps_dir: Path, tmp_path: Path) -> HostConfig:
    return HostConfig(apps_dir=apps_dir, cache_dir=tmp_path / "cache")


@pytest.fixture()
def diagnostics() -> InMemoryDiagnostics:
    return InMemoryDiagnostics()


@pytest.fixture()
def loader(config: HostConfig, diagnostics: InMemoryDiagnostics) -> ManifestLoader:
    return ManifestLoader(config, diagnostics)
