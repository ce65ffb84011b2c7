"""Load configuration models.

A FileConfig describes one load job: where the delimited source file lives,
how it is split, which table it lands in, and an ordered list of
ColumnConfig entries. The column order is both the physical field order in
the source file and the column order of the target table.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from metaloader.rules.rule_engine import validation_rules
from metaloader.security import SecurityError, compile_rule_pattern


class ColumnConfig(BaseModel):
    """Configuration for one column of a load job.

    Attributes:
        source_column_name: Field name used for the positional source token
        target_column_name: Column name in the destination table
        data_type: Semantic type tag (STRING, NUMBER, DATE, TIMESTAMP, ...)
        max_length: Maximum length for string columns
        is_nullable: Whether the destination column accepts nulls
        default_value: Value substituted when the source value is absent
        column_order: Position of the field in the source line
        transformation_rule: Named transformation (UPPER, TRIM, ...)
        validation_rule: Named validation (NOT_NULL, EMAIL, ...) or a regex
        is_primary_key: Whether the column is part of the primary key

    Example:
        >>> column = ColumnConfig(
        ...     source_column_name="email",
        ...     target_column_name="EMAIL",
        ...     data_type="VARCHAR2",
        ...     max_length=255,
        ...     column_order=3,
        ...     validation_rule="EMAIL",
        ...     transformation_rule="LOWER",
        ... )
    """

    source_column_name: str = Field(..., min_length=1)
    target_column_name: str = Field(..., min_length=1)
    data_type: str = Field(..., min_length=1)
    max_length: Optional[int] = Field(default=None, ge=1)
    is_nullable: bool = True
    default_value: Optional[str] = None
    column_order: int
    transformation_rule: Optional[str] = None
    validation_rule: Optional[str] = None
    is_primary_key: bool = False

    @field_validator("data_type")
    @classmethod
    def normalize_data_type(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("validation_rule")
    @classmethod
    def validate_rule_pattern(cls, v: Optional[str]) -> Optional[str]:
        """Screen regex validation rules before any record is evaluated."""
        if not v or validation_rules.is_registered(v):
            return v

        try:
            compile_rule_pattern(v)
        except SecurityError as e:
            raise ValueError(f"Unsafe regex validation rule: {e}")
        except re.error as e:
            raise ValueError(f"Invalid regex validation rule: {e}")

        return v


class FileConfig(BaseModel):
    """Configuration for loading one delimited file into one table.

    Attributes:
        config_name: Unique, stable identifier of the load job
        source_file_path: Path of the delimited source file
        target_table_name: Destination table
        delimiter: Literal field separator (no quoting or escaping)
        has_header: Skip the first line of the file
        chunk_size: Number of accepted records committed per transaction
        is_active: Inactive configs are invisible to lookups
        created_date: Creation timestamp
        updated_date: Last modification timestamp
        column_configs: Columns of the job, in any order
    """

    config_name: str = Field(..., min_length=1)
    source_file_path: str = Field(..., min_length=1)
    target_table_name: str = Field(..., min_length=1)
    delimiter: str = ","
    has_header: bool = True
    chunk_size: int = Field(default=100, ge=1)
    is_active: bool = True
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    column_configs: List[ColumnConfig] = Field(..., min_length=1)

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        if v == "":
            raise ValueError("delimiter must not be empty")
        return v

    @model_validator(mode="after")
    def validate_columns(self) -> "FileConfig":
        """Column order and names must be unique within a config."""
        orders = [column.column_order for column in self.column_configs]
        if len(set(orders)) != len(orders):
            raise ValueError(f"Duplicate column_order values: {sorted(orders)}")

        for attribute in ("source_column_name", "target_column_name"):
            names = [getattr(column, attribute) for column in self.column_configs]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(f"Duplicate {attribute} values: {duplicates}")

        return self

    def ordered_columns(self) -> List[ColumnConfig]:
        """Columns sorted by ascending column_order."""
        return sorted(self.column_configs, key=lambda column: column.column_order)

    @property
    def source_column_names(self) -> List[str]:
        return [column.source_column_name for column in self.ordered_columns()]

    @property
    def target_column_names(self) -> List[str]:
        return [column.target_column_name for column in self.ordered_columns()]
