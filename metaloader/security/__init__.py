"""Security utilities for metaloader."""

from metaloader.security.validators import (
    MAX_RULE_PATTERN_LENGTH,
    SecurityError,
    compile_rule_pattern,
    validate_regex_complexity,
)

__all__ = [
    "SecurityError",
    "validate_regex_complexity",
    "compile_rule_pattern",
    "MAX_RULE_PATTERN_LENGTH",
]
