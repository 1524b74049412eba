"""
Progression rule registry.

Rules are dispatched by id: a plan stores RuleSpec(rule_id, params) and
build_rule() instantiates the registered class with those parameters.
"""

from typing import Any, Callable, Mapping

from ..models import RuleSpec
from .base import ProgressionRule
from .linear import LinearProgressionRule
from .memory import MemoryRule

RULE_REGISTRY: dict[str, Callable[..., ProgressionRule]] = {
    MemoryRule.rule_id: MemoryRule,
    LinearProgressionRule.rule_id: LinearProgressionRule,
}


def build_rule(spec: RuleSpec, **extra: Any) -> ProgressionRule:
    """
    Instantiate the rule referenced by ``spec``.

    ``extra`` keyword arguments are passed through only to rules whose
    constructor is known to accept them (currently ``starting_weights``
    for the linear rule).

    Raises:
        ValueError: If spec.rule_id is not registered
    """
    if spec.rule_id not in RULE_REGISTRY:
        valid = ", ".join(RULE_REGISTRY)
        raise ValueError(f"Unknown progression rule '{spec.rule_id}'. Valid IDs: {valid}")

    kwargs: dict[str, Any] = spec.kwargs()
    if spec.rule_id == LinearProgressionRule.rule_id and "starting_weights" in extra:
        kwargs["starting_weights"] = extra["starting_weights"]
    return RULE_REGISTRY[spec.rule_id](**kwargs)


def describe_rule(spec: RuleSpec) -> Mapping[str, str]:
    """Name and description of the rule class behind ``spec``."""
    cls = RULE_REGISTRY[spec.rule_id]
    return {"name": cls.name, "description": cls.description}
