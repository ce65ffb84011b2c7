"""Per-row record passed through the load pipeline.

A record is created by the reader from one source line, mutated column by
column by the processor, and handed to the writer. Only one pipeline stage
holds a record at a time.
"""

from typing import Any, Dict, Iterable, List, Optional

from metaloader.objects.file_config import FileConfig


class GenericDataRecord:
    """Target table name plus an ordered mapping of column name to value."""

    def __init__(self, table_name: str, line_number: Optional[int] = None) -> None:
        self.table_name = table_name
        self.line_number = line_number
        self._values: Dict[str, Any] = {}

    def set_value(self, column_name: str, value: Any) -> None:
        self._values[column_name] = value

    def get_value(self, column_name: str) -> Any:
        return self._values.get(column_name)

    def has_column(self, column_name: str) -> bool:
        return column_name in self._values

    @property
    def values(self) -> Dict[str, Any]:
        """Copy of the column values in insertion order."""
        return dict(self._values)

    def missing_columns(self, column_names: Iterable[str]) -> List[str]:
        return [name for name in column_names if name not in self._values]

    def to_row(self, file_config: FileConfig) -> Dict[str, Any]:
        """Map source column values to target column names in configured order."""
        return {
            column.target_column_name: self._values.get(column.source_column_name)
            for column in file_config.ordered_columns()
        }

    def __repr__(self) -> str:
        return (
            f"GenericDataRecord(table_name={self.table_name!r}, "
            f"line_number={self.line_number}, values={self._values!r})"
        )
