"""
Progression rules and service for lift-rotation.

Rules convert an exercise's session history into a weight / reps / sets
recommendation; the service selects which rule applies.
"""

from .base import ProgressionRule, target_reps
from .linear import LinearProgressionRule
from .memory import MemoryRule
from .registry import RULE_REGISTRY, build_rule
from .service import ProgressionService, build_default_plans, build_exercise_history

__all__ = [
    "ProgressionRule",
    "target_reps",
    "LinearProgressionRule",
    "MemoryRule",
    "RULE_REGISTRY",
    "build_rule",
    "ProgressionService",
    "build_default_plans",
    "build_exercise_history",
]
