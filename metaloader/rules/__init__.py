"""Validation and transformation rules."""

from metaloader.rules.rule_engine import (
    RuleEngine,
    RuleRegistry,
    transformation_rules,
    validation_rules,
)

__all__ = [
    "RuleEngine",
    "RuleRegistry",
    "validation_rules",
    "transformation_rules",
]
