"""Manifest descriptor parsing.

A descriptor is an XML document describing one application::

    <?php defined('IN_APP') or die('Access denied'); ?>
    <manifest>
        <name>news</name>
        <version>1.2</version>
        <date>2016-02-11</date>
        <icon>news.png</icon>

        <action default="default" alias="index,home">listing</action>
        <action requires="connected,writer" description="news_create">create</action>

        <admin>
            <action default="default">listing</action>
            <action menu="false" requires="moderator">delete</action>
        </admin>

        <permission name="writer" />
        <permission name="moderator" />
    </manifest>

Embedded code blocks (``<?php ... ?>``) guarding the file are stripped
before parsing.  Parsing never raises on malformed content: an unreadable
document degrades to an empty manifest carrying only the application name,
and nodes without a key are skipped.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any
from xml.etree import ElementTree

from apphost.core.errors import ManifestNotFound
from apphost.core.types import (
    ADMIN,
    ADMIN_ALIAS_PREFIX,
    ActionSpec,
    AdminActionSpec,
    Manifest,
)

logger = logging.getLogger(__name__)

# Single-line, non-greedy: one guard per line.
_EMBEDDED_CODE: re.Pattern[str] = re.compile(r"<\?php.+?\?>")

_LIST_SEPARATOR = ","


def split_list(value: str | None) -> tuple[str, ...]:
    """Split a comma-delimited attribute into trimmed, non-empty items."""
    if not value:
        return ()
    items = (item.strip() for item in value.split(_LIST_SEPARATOR))
    return tuple(item for item in items if item)


def parse(descriptor_path: Path, *, admin_alias_prefix: str = ADMIN_ALIAS_PREFIX) -> Manifest:
    """Parse the descriptor at *descriptor_path*.

    The application name defaults to the descriptor's parent directory.

    Raises
    ------
    ManifestNotFound
        If the descriptor does not exist or cannot be read.
    """
    app = descriptor_path.parent.name
    try:
        text = descriptor_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestNotFound(app, details={"path": str(descriptor_path)}) from exc
    return parse_string(text, default_name=app, admin_alias_prefix=admin_alias_prefix)


def parse_string(
    text: str,
    *,
    default_name: str = "",
    admin_alias_prefix: str = ADMIN_ALIAS_PREFIX,
) -> Manifest:
    """Parse descriptor *text* into a :class:`Manifest`."""
    cleaned = _EMBEDDED_CODE.sub("", text).strip()
    try:
        root = ElementTree.fromstring(cleaned)
    except ElementTree.ParseError as exc:
        logger.warning("Malformed manifest descriptor for %r: %s", default_name, exc)
        return Manifest.empty(default_name)

    aliases: dict[str, str] = {}

    actions, default, _ = _collect_actions(
        root.findall("action"), admin=False, prefix="", aliases=aliases,
    )

    admin_node = root.find("admin")
    admin_nodes = admin_node.findall("action") if admin_node is not None else []
    admin, default_admin, has_submenu = _collect_actions(
        admin_nodes, admin=True, prefix=admin_alias_prefix, aliases=aliases,
    )

    permissions: list[str] = [ADMIN] if admin else []
    for node in root.findall("permission"):
        name = node.get("name", "")
        if name:
            permissions.append(name)

    return Manifest(
        name=_text(root, "name") or default_name,
        version=_text(root, "version"),
        date=_text(root, "date"),
        icon=_text(root, "icon") or _text(root, "icone"),
        actions=actions,
        default=default,
        admin=admin,
        default_admin=default_admin,
        admin_has_submenu=has_submenu,
        alias=aliases,
        permissions=tuple(permissions),
    )


def _text(root: ElementTree.Element, tag: str) -> str:
    return (root.findtext(tag) or "").strip()


def _collect_actions(
    nodes: Iterable[ElementTree.Element],
    *,
    admin: bool,
    prefix: str,
    aliases: dict[str, str],
) -> tuple[dict[str, Any], str | None, bool]:
    """Read ``action`` nodes of one mode.

    Returns the action map, the default key and whether any admin action
    shows in the submenu.  Aliases are registered into *aliases*, keyed
    with *prefix*.  The first occurrence of an action key or alias wins.
    """
    specs: dict[str, Any] = {}
    default: str | None = None
    has_submenu = False

    for node in nodes:
        key = (node.text or "").strip().lower()
        if not key:
            continue

        if key not in specs:
            description = node.get("description", key)
            requires = split_list(node.get("requires"))
            if admin:
                menu = node.get("menu", "true") == "true"
                has_submenu = has_submenu or menu
                specs[key] = AdminActionSpec(description=description, requires=requires, menu=menu)
            else:
                specs[key] = ActionSpec(description=description, requires=requires)

        if "default" in node.attrib and default is None:
            default = key

        for alias in split_list(node.get("alias")):
            aliases.setdefault(prefix + alias.lower(), key)

    return specs, default, has_submenu
