"""apphost configuration.

Defines the validated configuration model consumed by the manifest loader,
the access evaluator and the input filter.
"""
from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from apphost.core.types import ADMIN_ALIAS_PREFIX

DEFAULT_ALLOWED_TAGS: frozenset[str] = frozenset({
    "b", "strong", "small", "i", "em", "u", "s", "sub", "sup", "a", "img", "br",
    "font", "span", "blockquote", "q", "abbr", "address", "code",
    "audio", "video", "source", "iframe",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "dl", "dt", "dd",
    "div", "p", "var",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "colgroup", "col",
    "section", "article", "aside",
})
"""Tags that pass through the input filter untouched."""

DEFAULT_STRIPPED_TAGS: frozenset[str] = frozenset({"script", "link"})
"""Tags deleted from input together with their content."""


class HostConfig(BaseModel):
    """Configuration for an application host.

    Only ``apps_dir`` is required.  Leaving ``cache_dir`` unset disables
    the on-disk manifest cache; manifests are then parsed once per
    process and kept in memory.
    """

    model_config = ConfigDict(strict=True)

    apps_dir: Path = Field(
        description="Directory holding one sub-directory per application.",
    )
    descriptor_name: str = Field(
        default="manifest.xml",
        min_length=1,
        description="File name of the manifest descriptor inside an application directory.",
    )
    cache_dir: Path | None = Field(
        default=None,
        description="Cache root.  ``None`` disables the on-disk manifest cache.",
    )
    cache_subdir: str = Field(
        default="manifests",
        min_length=1,
        description="Directory below ``cache_dir`` holding one artifact per application.",
    )
    admin_alias_prefix: str = Field(
        default=ADMIN_ALIAS_PREFIX,
        min_length=1,
        description="Prefix separating admin aliases from normal aliases.",
    )
    allowed_tags: frozenset[str] = Field(
        default=DEFAULT_ALLOWED_TAGS,
        description="Tags the input filter lets through unchanged.",
    )
    stripped_tags: frozenset[str] = Field(
        default=DEFAULT_STRIPPED_TAGS,
        description="Tags the input filter deletes together with their content.",
    )

    @property
    def cache_enabled(self) -> bool:
        return self.cache_dir is not None

    @property
    def cache_directory(self) -> Path | None:
        """Directory holding the manifest artifacts, or ``None`` when disabled."""
        if self.cache_dir is None:
            return None
        return self.cache_dir / self.cache_subdir

    def app_directory(self, app: str) -> Path:
        """Return the directory of application *app*."""
        return self.apps_dir / app

    def descriptor_path(self, app: str) -> Path:
        """Return the manifest descriptor path of application *app*."""
        return self.app_directory(app) / self.descriptor_name
