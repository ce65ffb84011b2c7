"""Security validation utilities for metaloader.

Validation rules that are not one of the named rules are user-supplied
regular expressions evaluated against every source value, so they are
screened once when the configuration is loaded.
"""
import logging
import re

logger = logging.getLogger(__name__)

MAX_RULE_PATTERN_LENGTH = 500
MAX_ALTERNATIONS = 20


class SecurityError(Exception):
    """Raised when a security validation fails."""

    pass


def validate_regex_complexity(pattern: str, max_length: int = MAX_RULE_PATTERN_LENGTH) -> None:
    """Validate a regex validation rule to prevent ReDoS attacks.

    Args:
        pattern: Regex pattern to validate
        max_length: Maximum allowed pattern length

    Raises:
        SecurityError: If pattern is suspicious

    Example:
        >>> validate_regex_complexity(r"[A-Z]{2}\\d{4}")
    """
    if len(pattern) > max_length:
        raise SecurityError(f"Regex pattern too long: {len(pattern)} > {max_length}")

    # Nested quantifiers, e.g. (a+)+, (a*)+, (a+)*
    nested_quantifiers = re.findall(r"\([^)]*[+*]\)[+*{]", pattern)
    if nested_quantifiers:
        raise SecurityError(
            f"Nested quantifiers detected (ReDoS risk): {nested_quantifiers}"
        )

    alternation_groups = pattern.count("|")
    if alternation_groups > MAX_ALTERNATIONS:
        raise SecurityError(
            f"Too many alternation groups: {alternation_groups} (ReDoS risk)"
        )

    logger.debug(f"Regex rule accepted: {pattern}")


def compile_rule_pattern(pattern: str) -> re.Pattern:
    """Screen and compile a regex validation rule.

    Raises:
        SecurityError: If the pattern is unsafe
        re.error: If the pattern does not compile
    """
    validate_regex_complexity(pattern)
    return re.compile(pattern)
