"""Named validation and transformation rules.

Rules are pure functions registered under an upper-case name. Column
configurations refer to them by name, case-insensitively:

    validation_rule = "not_null"        -> NOT_NULL
    transformation_rule = "Trim_Upper"  -> TRIM_UPPER

A validation rule name that is not registered is treated as a regular
expression the whole value must match. A transformation rule name that is
not registered leaves the value unchanged. New rules are added by
registering them, e.g.::

    @validation_rules.register("ALPHA")
    def _alpha(value: str) -> bool:
        return value.isalpha()
"""

import re
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from metaloader.logging_config import get_logger
from metaloader.objects.data_types import parse_decimal

logger = get_logger(__name__)

R = TypeVar("R", bound=Callable[..., Any])

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")


class RuleRegistry(Generic[R]):
    """Registry mapping an upper-case rule name to a rule function."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._rules: Dict[str, R] = {}

    @staticmethod
    def normalize(name: str) -> str:
        return name.strip().upper()

    def register(self, name: str) -> Callable[[R], R]:
        """Decorator registering ``func`` under ``name``."""

        def decorator(func: R) -> R:
            key = self.normalize(name)
            if key in self._rules:
                raise ValueError(f"{self.kind} rule already registered: {key}")
            self._rules[key] = func
            return func

        return decorator

    def get(self, name: str) -> Optional[R]:
        return self._rules.get(self.normalize(name))

    def is_registered(self, name: str) -> bool:
        return self.normalize(name) in self._rules

    def names(self) -> List[str]:
        return sorted(self._rules)


validation_rules: RuleRegistry[Callable[[str], bool]] = RuleRegistry("validation")
transformation_rules: RuleRegistry[Callable[[str], str]] = RuleRegistry("transformation")


@validation_rules.register("NOT_NULL")
def not_null(value: str) -> bool:
    return value != ""


@validation_rules.register("NUMERIC")
def numeric(value: str) -> bool:
    return parse_decimal(value) is not None


@validation_rules.register("EMAIL")
def email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


@validation_rules.register("POSITIVE_NUMBER")
def positive_number(value: str) -> bool:
    number = parse_decimal(value)
    return number is not None and number > 0


@transformation_rules.register("UPPER")
def upper(value: str) -> str:
    return value.upper()


@transformation_rules.register("LOWER")
def lower(value: str) -> str:
    return value.lower()


@transformation_rules.register("TRIM")
def trim(value: str) -> str:
    return value.strip()


@transformation_rules.register("CAPITALIZE")
def capitalize(value: Optional[str]) -> Optional[str]:
    """Upper-case the first character and lower-case the rest of the whole string."""
    if not value:
        return value
    return value[:1].upper() + value[1:].lower()


@transformation_rules.register("TRIM_UPPER")
def trim_upper(value: str) -> str:
    return value.strip().upper()


class RuleEngine:
    """Evaluates configured rules against column values.

    Compiled regex rules are cached per engine instance.
    """

    def __init__(
        self,
        validations: Optional[RuleRegistry] = None,
        transformations: Optional[RuleRegistry] = None,
    ) -> None:
        self.validations = validations or validation_rules
        self.transformations = transformations or transformation_rules
        self._patterns: Dict[str, re.Pattern] = {}

    def validate(self, rule: Optional[str], value: Any) -> bool:
        """Return True if ``value`` passes ``rule``.

        The value is evaluated in its trimmed string form, None counting as
        the empty string. A missing or empty rule always passes.
        """
        if not rule:
            return True

        string_value = str(value).strip() if value is not None else ""

        func = self.validations.get(rule)
        if func is not None:
            return func(string_value)

        return self._pattern(rule).fullmatch(string_value) is not None

    def transform(self, rule: Optional[str], value: Any, default: Any = None) -> Any:
        """Apply ``rule`` to ``value``.

        A None value bypasses the rule and yields ``default``. A missing or
        unknown rule returns the value unchanged.
        """
        if value is None:
            return default

        if not rule:
            return value

        func = self.transformations.get(rule)
        if func is None:
            logger.debug(f"Unknown transformation rule {rule!r}, value left unchanged")
            return value

        return func(str(value))

    def _pattern(self, rule: str) -> re.Pattern:
        pattern = self._patterns.get(rule)
        if pattern is None:
            pattern = re.compile(rule)
            self._patterns[rule] = pattern
        return pattern
