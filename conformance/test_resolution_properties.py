"""Action resolution conformance tests.

Verifies that declared keys, aliases and defaults resolve as required,
including the fallback of unknown explicit actions to the default.
"""
from __future__ import annotations

import pytest

from apphost.access.resolver import resolve_action
from apphost.core.types import Manifest


class TestCanonicalKeys:
    """Declared action keys."""

    def test_MUST_resolve_declared_keys_unchanged(self, blog_manifest: Manifest) -> None:
        """Every declared canonical key MUST resolve to itself."""
        for key in blog_manifest.actions:
            assert resolve_action(blog_manifest, key) == key
        for key in blog_manifest.admin:
            assert resolve_action(blog_manifest, key, admin=True) == key


class TestAliases:
    """Declared aliases."""

    def test_MUST_resolve_every_alias_to_its_key(self, blog_manifest: Manifest) -> None:
        """Every alias A -> K MUST resolve to K."""
        for alias, key in blog_manifest.alias.items():
            assert resolve_action(blog_manifest, alias) == key

    @pytest.mark.parametrize("alias", ["new", "add"])
    def test_MUST_resolve_aliases_of_create(self, blog_manifest: Manifest, alias: str) -> None:
        """``new`` and ``add`` MUST resolve to ``create``."""
        assert resolve_action(blog_manifest, alias) == "create"


class TestDefaults:
    """Fallback onto the default action."""

    def test_MUST_resolve_empty_request_to_default(self, blog_manifest: Manifest) -> None:
        """An empty request MUST resolve to the manifest default."""
        assert resolve_action(blog_manifest, "") == "list"

    def test_MUST_resolve_unknown_action_to_default(self, blog_manifest: Manifest) -> None:
        """An unknown explicit action MUST fall back to the default, not to empty."""
        assert resolve_action(blog_manifest, "unknown") == "list"

    def test_MUST_resolve_admin_requests_to_admin_default(self, blog_manifest: Manifest) -> None:
        """Admin-mode fallbacks MUST use the admin default."""
        assert resolve_action(blog_manifest, "unknown", admin=True) == "list"
