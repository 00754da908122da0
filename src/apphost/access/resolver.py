"""Action resolution.

Maps a requested action name to a canonical key declared by the manifest:

1. A declared key of the mode's action map is returned unchanged.
2. An alias of the mode's namespace is replaced by its canonical key.
3. Anything else -- including an empty request -- falls back to the mode's
   default action, or to ``""`` when the manifest declares none.

An unknown explicit action is treated exactly like no action at all.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from apphost.core.types import ADMIN_ALIAS_PREFIX

if TYPE_CHECKING:
    from apphost.core.types import Manifest


def resolve_action(
    manifest: Manifest,
    action: str | None,
    admin: bool = False,
    *,
    alias_prefix: str = ADMIN_ALIAS_PREFIX,
) -> str:
    """Return the canonical action key for *action*, or ``""``.

    Parameters
    ----------
    manifest:
        The application's manifest.
    action:
        The requested action, possibly empty or unknown.
    admin:
        Resolve against the admin map, admin aliases and admin default.
    alias_prefix:
        Namespace prefix of admin aliases.
    """
    if action:
        if action in manifest.actions_for(admin):
            return action
        target = manifest.alias_target(action, admin, alias_prefix)
        if target is not None:
            return target
    return manifest.default_for(admin) or ""
