"""Tests for the delimited record reader."""

from pathlib import Path
from typing import Callable, List

import pytest

from metaloader.exceptions import RecordParseError, SourceOpenError
from metaloader.objects.file_config import FileConfig
from metaloader.pipeline.reader import DelimitedRecordReader


def _read_all(reader: DelimitedRecordReader) -> List[dict]:
    with reader:
        return [record.values for record in reader]


@pytest.mark.unit
class TestDelimitedRecordReader:
    """Test DelimitedRecordReader."""

    def test_reads_records_after_header(
        self,
        sample_csv_file: Path,
        make_file_config: Callable[..., FileConfig],
    ) -> None:
        reader = DelimitedRecordReader(make_file_config())

        records = _read_all(reader)

        assert records == [
            {"id": "1", "name": "alice", "email": "alice@x.com"},
            {"id": "2", "name": "", "email": "bad-email"},
            {"id": "3", "name": "bob", "email": "bob@y.com"},
        ]
        assert reader.lines_read == 3

    def test_line_numbers_count_physical_lines(
        self,
        sample_csv_file: Path,
        make_file_config: Callable[..., FileConfig],
    ) -> None:
        with DelimitedRecordReader(make_file_config()) as reader:
            records = list(reader)

        assert [r.line_number for r in records] == [2, 3, 4]
        assert all(r.table_name == "PEOPLE" for r in records)

    @pytest.mark.parametrize("delimiter", [",", "|", "\t", ";;"])
    def test_positional_mapping_for_any_delimiter(
        self,
        temp_dir: Path,
        make_file_config: Callable[..., FileConfig],
        delimiter: str,
    ) -> None:
        path = temp_dir / "people.csv"
        path.write_text(delimiter.join(["7", "carol", "c@z.io"]) + "\n")
        file_config = make_file_config(delimiter=delimiter, has_header=False)

        records = _read_all(DelimitedRecordReader(file_config))

        assert records == [{"id": "7", "name": "carol", "email": "c@z.io"}]

    def test_mapping_follows_column_order_not_list_order(
        self,
        temp_dir: Path,
        make_file_config: Callable[..., FileConfig],
        sample_columns,
    ) -> None:
        path = temp_dir / "people.csv"
        path.write_text("1,alice,alice@x.com\n")
        file_config = make_file_config(
            column_configs=list(reversed(sample_columns)), has_header=False
        )

        records = _read_all(DelimitedRecordReader(file_config))

        assert records == [{"id": "1", "name": "alice", "email": "alice@x.com"}]

    def test_header_not_skipped_without_has_header(
        self,
        sample_csv_file: Path,
        make_file_config: Callable[..., FileConfig],
    ) -> None:
        records = _read_all(DelimitedRecordReader(make_file_config(has_header=False)))

        assert records[0] == {"id": "id", "name": "name", "email": "email"}
        assert len(records) == 4

    def test_tokens_are_not_trimmed(
        self, temp_dir: Path, make_file_config: Callable[..., FileConfig]
    ) -> None:
        path = temp_dir / "people.csv"
        path.write_text(" 1 , alice ,a@b.c\r\n")

        records = _read_all(DelimitedRecordReader(make_file_config(has_header=False)))

        assert records == [{"id": " 1 ", "name": " alice ", "email": "a@b.c"}]

    def test_header_only_file_yields_nothing(
        self, temp_dir: Path, make_file_config: Callable[..., FileConfig]
    ) -> None:
        (temp_dir / "people.csv").write_text("id,name,email\n")
        reader = DelimitedRecordReader(make_file_config())

        assert _read_all(reader) == []
        assert reader.lines_read == 0

    @pytest.mark.parametrize(
        "line, actual", [("1,alice\n", 2), ("1,alice,a@b.c,extra\n", 4)]
    )
    def test_wrong_field_count_raises(
        self,
        temp_dir: Path,
        make_file_config: Callable[..., FileConfig],
        line: str,
        actual: int,
    ) -> None:
        (temp_dir / "people.csv").write_text("id,name,email\n1,ok,a@b.c\n" + line)
        reader = DelimitedRecordReader(make_file_config())

        with reader:
            iterator = iter(reader)
            assert next(iterator).get_value("name") == "ok"
            with pytest.raises(RecordParseError) as exc_info:
                next(iterator)

        assert exc_info.value.line_number == 3
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == actual

    def test_missing_file_raises_open_error(
        self, make_file_config: Callable[..., FileConfig], temp_dir: Path
    ) -> None:
        reader = DelimitedRecordReader(
            make_file_config(source_file_path=str(temp_dir / "missing.csv"))
        )

        with pytest.raises(SourceOpenError, match="Source file not found"):
            reader.open()

    def test_directory_is_not_a_source_file(
        self, make_file_config: Callable[..., FileConfig], temp_dir: Path
    ) -> None:
        reader = DelimitedRecordReader(make_file_config(source_file_path=str(temp_dir)))

        with pytest.raises(SourceOpenError):
            list(reader)

    def test_iterates_only_once(
        self,
        sample_csv_file: Path,
        make_file_config: Callable[..., FileConfig],
    ) -> None:
        reader = DelimitedRecordReader(make_file_config())

        with reader:
            list(reader)
            with pytest.raises(RuntimeError, match="iterated once"):
                iter(reader)

    def test_iteration_opens_file_lazily(
        self,
        sample_csv_file: Path,
        make_file_config: Callable[..., FileConfig],
    ) -> None:
        reader = DelimitedRecordReader(make_file_config())

        try:
            assert len(list(reader)) == 3
        finally:
            reader.close()

    def test_parse_line(self, make_file_config: Callable[..., FileConfig]) -> None:
        reader = DelimitedRecordReader(make_file_config())

        record = reader.parse_line("5,eve,eve@x.org\n", 9)

        assert record.line_number == 9
        assert record.values == {"id": "5", "name": "eve", "email": "eve@x.org"}
