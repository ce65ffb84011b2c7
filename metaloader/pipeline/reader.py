"""Delimited source file reader.

Lines are split on the literal delimiter string. Quoted fields and escaped
delimiters are not supported: a field that contains the delimiter splits
into extra tokens and the line fails to parse.
"""

from pathlib import Path
from typing import IO, Iterator, List, Optional

from metaloader.exceptions import RecordParseError, SourceOpenError
from metaloader.logging_config import get_logger
from metaloader.objects.data_record import GenericDataRecord
from metaloader.objects.file_config import FileConfig

logger = get_logger(__name__)


class DelimitedRecordReader:
    """Lazily turns a delimited file into GenericDataRecord objects.

    The reader yields one record per physical line, skipping the first line
    when the config declares a header. It can be iterated once.

    Attributes:
        file_config: Configuration the reader was built from
        lines_read: Data lines consumed so far (header excluded)
    """

    def __init__(self, file_config: FileConfig, encoding: str = "utf-8") -> None:
        self.file_config = file_config
        self.encoding = encoding
        self.column_names: List[str] = file_config.source_column_names
        self.lines_read = 0
        self._file: Optional[IO[str]] = None
        self._consumed = False

        logger.info(
            f"Configured reader for file: {file_config.source_file_path} "
            f"with {len(self.column_names)} columns"
        )

    def open(self) -> None:
        """Open the source file.

        Raises:
            SourceOpenError: If the file is missing or unreadable
        """
        path = Path(self.file_config.source_file_path)
        if not path.is_file():
            raise SourceOpenError(f"Source file not found: {path}")

        try:
            self._file = open(path, mode="rt", encoding=self.encoding, newline="")
        except OSError as e:
            raise SourceOpenError(f"Unable to open source file {path}: {e}") from e

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "DelimitedRecordReader":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[GenericDataRecord]:
        if self._consumed:
            raise RuntimeError("DelimitedRecordReader can only be iterated once")
        self._consumed = True

        if self._file is None:
            self.open()

        return self._records()

    def _records(self) -> Iterator[GenericDataRecord]:
        assert self._file is not None
        skip_header = self.file_config.has_header

        for line_number, line in enumerate(self._file, start=1):
            if skip_header and line_number == 1:
                continue

            self.lines_read += 1
            yield self.parse_line(line, line_number)

    def parse_line(self, line: str, line_number: int) -> GenericDataRecord:
        """Split one line and map its tokens to the configured columns.

        Raises:
            RecordParseError: If the token count differs from the column count
        """
        tokens = line.rstrip("\r\n").split(self.file_config.delimiter)

        if len(tokens) != len(self.column_names):
            raise RecordParseError(line_number, len(self.column_names), len(tokens))

        record = GenericDataRecord(self.file_config.target_table_name, line_number)
        for column_name, token in zip(self.column_names, tokens):
            record.set_value(column_name, token)

        return record
