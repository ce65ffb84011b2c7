"""Semantic data type tags and value coercion.

Column configurations name a semantic type tag. Tags are grouped into
families; the family decides the storage type at provisioning time and the
Python type of the value handed to the writer.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional


class TypeFamily(str, Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"
    BOOLEAN = "BOOLEAN"


DATA_TYPE_FAMILIES: Dict[str, TypeFamily] = {
    "STRING": TypeFamily.STRING,
    "VARCHAR": TypeFamily.STRING,
    "VARCHAR2": TypeFamily.STRING,
    "CHAR": TypeFamily.STRING,
    "TEXT": TypeFamily.STRING,
    "NUMBER": TypeFamily.NUMBER,
    "NUMERIC": TypeFamily.NUMBER,
    "DECIMAL": TypeFamily.NUMBER,
    "INTEGER": TypeFamily.INTEGER,
    "INT": TypeFamily.INTEGER,
    "BIGINT": TypeFamily.INTEGER,
    "DATE": TypeFamily.DATE,
    "TIMESTAMP": TypeFamily.TIMESTAMP,
    "DATETIME": TypeFamily.TIMESTAMP,
    "BOOLEAN": TypeFamily.BOOLEAN,
    "BOOL": TypeFamily.BOOLEAN,
}

TRUE_VALUES = {"true", "t", "yes", "y", "1"}
FALSE_VALUES = {"false", "f", "no", "n", "0"}


def type_family(data_type: str) -> Optional[TypeFamily]:
    """Family of a semantic tag, None if the tag is unknown."""
    return DATA_TYPE_FAMILIES.get(data_type.strip().upper())


def parse_decimal(value: str) -> Optional[Decimal]:
    """Finite decimal value of ``value``, None if it is not a plain number."""
    # Decimal accepts digit separators, plain decimal literals do not
    if "_" in value:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        return None
    # NaN and Infinity parse but are not numbers for loading purposes
    return number if number.is_finite() else None


def _to_decimal(value: str) -> Decimal:
    number = parse_decimal(value)
    if number is None:
        raise ValueError(f"not a number: {value!r}")
    return number


def _to_int(value: str) -> int:
    number = _to_decimal(value)
    if number != number.to_integral_value():
        raise ValueError(f"not an integer: {value!r}")
    return int(number)


def _to_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


_COERCERS: Dict[TypeFamily, Callable[[str], Any]] = {
    TypeFamily.NUMBER: _to_decimal,
    TypeFamily.INTEGER: _to_int,
    TypeFamily.DATE: date.fromisoformat,
    TypeFamily.TIMESTAMP: datetime.fromisoformat,
    TypeFamily.BOOLEAN: _to_bool,
}


def coerce_value(family: Optional[TypeFamily], value: Any) -> Any:
    """Convert a string value to the Python type of ``family``.

    Strings, None and already-typed values pass through. Non-string
    families are converted from the trimmed string form.

    Raises:
        ValueError: If the string cannot be converted
    """
    if value is None or family is None or family == TypeFamily.STRING:
        return value
    if not isinstance(value, str):
        return value
    return _COERCERS[family](value.strip())
