"""Tests for record validation and transformation."""

from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Optional

import pytest

from metaloader.exceptions import ProcessorNotConfiguredError
from metaloader.objects.data_record import GenericDataRecord
from metaloader.objects.file_config import ColumnConfig, FileConfig
from metaloader.pipeline.processor import RecordProcessor


def _record(values: Dict[str, Optional[str]], line_number: int = 2) -> GenericDataRecord:
    record = GenericDataRecord("PEOPLE", line_number)
    for name, value in values.items():
        record.set_value(name, value)
    return record


@pytest.fixture
def processor(make_file_config: Callable[..., FileConfig]) -> RecordProcessor:
    return RecordProcessor(make_file_config())


@pytest.mark.unit
class TestRecordProcessor:
    """Test RecordProcessor."""

    def test_valid_record_is_transformed_and_typed(
        self, processor: RecordProcessor
    ) -> None:
        record = _record({"id": "1", "name": "alice", "email": "alice@x.com"})

        result = processor.process(record)

        assert result is record
        assert result.values == {
            "id": Decimal("1"),
            "name": "ALICE",
            "email": "alice@x.com",
        }
        assert processor.accepted_count == 1
        assert processor.rejected_count == 0

    def test_empty_not_null_column_rejects_record(
        self, processor: RecordProcessor
    ) -> None:
        assert processor.process(_record({"id": "2", "name": "", "email": "b@x.com"})) is None
        assert processor.rejected_count == 1

    def test_one_failing_column_drops_whole_record(
        self, processor: RecordProcessor
    ) -> None:
        """A bad last column rejects the record even though earlier columns passed."""
        record = _record({"id": "3", "name": "carol", "email": "bad-email"})

        assert processor.process(record) is None
        assert processor.accepted_count == 0

    def test_rejection_is_logged(
        self, processor: RecordProcessor, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("WARNING", logger="metaloader"):
            processor.process(_record({"id": "x", "name": "a", "email": "a@b.c"}, 7))

        assert "Skipping line 7" in caplog.text
        assert "column id" in caplog.text

    def test_not_configured(self) -> None:
        with pytest.raises(ProcessorNotConfiguredError):
            RecordProcessor().process(_record({"id": "1"}))

    def test_configure_binds_config(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = RecordProcessor()
        processor.configure(make_file_config())

        assert processor.process(_record({"id": "1", "name": "a", "email": "a@b.c"}))

    def test_validation_sees_raw_value_before_transformation(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        columns = [
            ColumnConfig(
                source_column_name="code",
                target_column_name="CODE",
                data_type="STRING",
                column_order=1,
                validation_rule=r"[a-z]+",
                transformation_rule="UPPER",
            )
        ]
        processor = RecordProcessor(make_file_config(column_configs=columns))

        accepted = processor.process(_record({"code": "abc"}))
        rejected = processor.process(_record({"code": "ABC"}))

        assert accepted is not None and accepted.get_value("code") == "ABC"
        assert rejected is None


@pytest.mark.unit
class TestColumnTyping:
    """Defaults, coercion and column constraints."""

    def _processor(
        self, make_file_config: Callable[..., FileConfig], **column: object
    ) -> RecordProcessor:
        values: dict = {
            "source_column_name": "value",
            "target_column_name": "VALUE",
            "data_type": "STRING",
            "column_order": 1,
        }
        values.update(column)
        return RecordProcessor(
            make_file_config(column_configs=[ColumnConfig(**values)])
        )

    def test_null_value_takes_default(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(make_file_config, default_value="N/A")

        result = processor.process(_record({"value": None}))

        assert result is not None and result.get_value("value") == "N/A"

    def test_blank_number_becomes_default(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(
            make_file_config, data_type="INTEGER", default_value="0"
        )

        result = processor.process(_record({"value": "  "}))

        assert result is not None and result.get_value("value") == 0

    def test_blank_nullable_number_becomes_null(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(make_file_config, data_type="NUMBER")

        result = processor.process(_record({"value": ""}))

        assert result is not None and result.get_value("value") is None

    def test_blank_non_nullable_number_rejected(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(
            make_file_config, data_type="NUMBER", is_nullable=False
        )

        assert processor.process(_record({"value": ""})) is None

    def test_date_coerced(self, make_file_config: Callable[..., FileConfig]) -> None:
        processor = self._processor(make_file_config, data_type="DATE")

        result = processor.process(_record({"value": " 2024-01-31 "}))

        assert result is not None and result.get_value("value") == date(2024, 1, 31)

    def test_uncoercible_value_rejected(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(make_file_config, data_type="DATE")

        assert processor.process(_record({"value": "31/01/2024"})) is None
        assert processor.rejected_count == 1

    def test_string_longer_than_max_length_rejected(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(make_file_config, data_type="VARCHAR2", max_length=3)

        assert processor.process(_record({"value": "abc"})) is not None
        assert processor.process(_record({"value": "abcd"})) is None

    def test_max_length_checked_after_transformation(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(
            make_file_config, max_length=3, transformation_rule="TRIM"
        )

        result = processor.process(_record({"value": "  abc  "}))

        assert result is not None and result.get_value("value") == "abc"

    def test_string_values_keep_whitespace_without_rule(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(make_file_config)

        result = processor.process(_record({"value": " padded "}))

        assert result is not None and result.get_value("value") == " padded "

    def test_blank_primary_key_rejected_even_when_nullable(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(
            make_file_config, data_type="NUMBER", is_primary_key=True
        )

        assert processor.process(_record({"value": ""})) is None
        assert processor.rejected_count == 1

    def test_number_with_digit_separators_rejected(
        self, make_file_config: Callable[..., FileConfig]
    ) -> None:
        processor = self._processor(make_file_config, data_type="NUMBER")

        assert processor.process(_record({"value": "1_000"})) is None
        assert processor.process(_record({"value": "1000"})) is not None
