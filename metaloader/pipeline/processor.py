"""Per-record validation and transformation."""

from typing import Any, Optional

from metaloader.exceptions import ProcessorNotConfiguredError, ValidationRejection
from metaloader.logging_config import get_logger
from metaloader.objects.data_record import GenericDataRecord
from metaloader.objects.data_types import TypeFamily, coerce_value, type_family
from metaloader.objects.file_config import ColumnConfig, FileConfig
from metaloader.rules.rule_engine import RuleEngine

logger = get_logger(__name__)


class RecordProcessor:
    """Applies each column's rules to a record and accepts or drops it.

    Columns are processed in configured order. For each column the current
    value is validated, then transformed and converted to the column's type,
    and stored back into the record. A single failing column drops the whole
    record; a dropped record is a skip, not an error.

    Attributes:
        file_config: Bound configuration, None until configure() is called
        accepted_count: Records returned by process()
        rejected_count: Records dropped by validation
    """

    def __init__(
        self,
        file_config: Optional[FileConfig] = None,
        rule_engine: Optional[RuleEngine] = None,
    ) -> None:
        self.file_config = file_config
        self.rule_engine = rule_engine or RuleEngine()
        self.accepted_count = 0
        self.rejected_count = 0

    def configure(self, file_config: FileConfig) -> None:
        self.file_config = file_config

    def process(self, record: GenericDataRecord) -> Optional[GenericDataRecord]:
        """Validate and transform ``record`` in place.

        Returns:
            The record if every column passed, None if it was rejected

        Raises:
            ProcessorNotConfiguredError: If no FileConfig is bound
        """
        if self.file_config is None:
            logger.error("FileConfig not set for processor")
            raise ProcessorNotConfiguredError("FileConfig not set for processor")

        try:
            for column in self.file_config.ordered_columns():
                value = self._process_column(record, column)
                record.set_value(column.source_column_name, value)
        except ValidationRejection as rejection:
            self.rejected_count += 1
            logger.warning(
                f"Skipping line {record.line_number}: validation failed for column "
                f"{rejection.column} with value: {rejection.value!r}"
            )
            return None

        self.accepted_count += 1
        logger.debug(f"Processed record for table: {record.table_name}")
        return record

    def _process_column(self, record: GenericDataRecord, column: ColumnConfig) -> Any:
        name = column.source_column_name
        raw_value = record.get_value(name)

        if not self.rule_engine.validate(column.validation_rule, raw_value):
            raise ValidationRejection(name, raw_value, column.validation_rule)

        value = self.rule_engine.transform(
            column.transformation_rule, raw_value, column.default_value
        )

        family = type_family(column.data_type)
        if family not in (None, TypeFamily.STRING) and isinstance(value, str):
            if value.strip() == "":
                value = column.default_value or None
            try:
                value = coerce_value(family, value)
            except ValueError as e:
                raise ValidationRejection(name, raw_value, str(e))

        # primary key columns are provisioned NOT NULL
        if value is None and (not column.is_nullable or column.is_primary_key):
            raise ValidationRejection(name, raw_value, "column is not nullable")

        if (
            column.max_length is not None
            and isinstance(value, str)
            and len(value) > column.max_length
        ):
            raise ValidationRejection(
                name, raw_value, f"longer than {column.max_length} characters"
            )

        return value
