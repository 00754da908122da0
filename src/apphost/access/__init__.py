"""apphost access layer.

* **resolve_action** -- alias/default fallback onto canonical action keys.
* **evaluate** -- pure role-based access evaluation of a route.
* **AccessEvaluator** -- evaluation of paths with on-demand manifest loading.
* **AccessDecision** -- dataclass holding the result of an access check.
"""
from __future__ import annotations

from apphost.access.evaluator import (
    AccessDecision,
    AccessEvaluator,
    evaluate,
    verdict_error,
)
from apphost.access.resolver import resolve_action

__all__ = [
    "AccessDecision",
    "AccessEvaluator",
    "evaluate",
    "resolve_action",
    "verdict_error",
]
