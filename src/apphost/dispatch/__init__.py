"""Action dispatch.

* **Controller** -- base class of application controllers, holding the
  per-class handler table.
* **Dispatcher** -- access check, admin chrome and handler invocation.
"""
from __future__ import annotations

from apphost.dispatch.controller import Controller
from apphost.dispatch.dispatcher import Dispatcher, handler_name

__all__ = [
    "Controller",
    "Dispatcher",
    "handler_name",
]
