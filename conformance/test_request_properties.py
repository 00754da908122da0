"""Request variable conformance tests.

Verifies first-check-wins memoization, the markup filter's fixed points
and the lock semantics.
"""
from __future__ import annotations

from apphost.request.filters import TagAllowListFilter
from apphost.request.store import RequestStore

# ===================================================================
# Memoization
# ===================================================================

class TestFirstCheckWins:
    """Memoized reads."""

    def test_MUST_return_first_value_despite_new_default(self, request_store: RequestStore) -> None:
        """A later read with another default MUST return the memoized value."""
        assert request_store.get("sort", "date") == "date"
        assert request_store.get("sort", "title") == "date"

    def test_MUST_memoize_submitted_values(self, request_store: RequestStore) -> None:
        """A submitted value MUST win over any later default."""
        assert request_store.get("id") == "42"
        assert request_store.get("id", "0") == "42"


# ===================================================================
# Filter
# ===================================================================

class TestFilterFixedPoints:
    """Markup filter idempotence."""

    def test_MUST_keep_allowed_markup(self) -> None:
        """``<b>hi</b>`` MUST be a fixed point."""
        tag_filter = TagAllowListFilter()
        assert tag_filter.filter("<b>hi</b>") == "<b>hi</b>"

    def test_MUST_remove_script_elements(self) -> None:
        """``<script>x</script>`` MUST become empty and stay empty."""
        tag_filter = TagAllowListFilter()
        once = tag_filter.filter("<script>x</script>")
        assert once == ""
        assert tag_filter.filter(once) == ""

    def test_MUST_escape_other_tags_once(self) -> None:
        """``<marquee>x</marquee>`` MUST become literal text unchanged by a second pass."""
        tag_filter = TagAllowListFilter()
        once = tag_filter.filter("<marquee>x</marquee>")
        assert "<" not in once
        assert once == "&lt;marquee&gt;x&lt;/marquee&gt;"
        assert tag_filter.filter(once) == once

    def test_MUST_filter_submitted_values(self, request_store: RequestStore) -> None:
        """Values MUST be filtered before they reach application code."""
        assert request_store.get("q") == "<b>python</b>"
        assert request_store.get("title") == "&lt;marquee&gt;Hello&lt;/marquee&gt;"


# ===================================================================
# Lock
# ===================================================================

class TestLock:
    """Frozen request variables."""

    def test_MUST_return_default_while_locked(self, request_store: RequestStore) -> None:
        """A locked read MUST return exactly the default, even when data exists."""
        request_store.lock()
        assert request_store.get("id", "fallback") == "fallback"

    def test_MUST_ignore_writes_while_locked(self, request_store: RequestStore) -> None:
        """A locked write MUST return None without changing state."""
        request_store.lock()
        assert request_store.set("id", "7") is None
        request_store.unlock()
        assert request_store.channel()["id"] == "42"

    def test_MUST_keep_memoized_values_across_lock(self, request_store: RequestStore) -> None:
        """After unlock, keys memoized before the lock MUST keep their values."""
        assert request_store.get("sort", "date") == "date"
        request_store.lock()
        assert request_store.get("sort", "title") == "title"
        request_store.unlock()
        assert request_store.get("sort", "other") == "date"

    def test_MUST_report_no_data_while_locked(self, request_store: RequestStore) -> None:
        """A locked store MUST report no data."""
        assert request_store.has_data()
        request_store.lock()
        assert not request_store.has_data()
