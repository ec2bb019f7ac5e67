"""Delimited text record source."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from pipeload.core.parser import DelimitedTextParser, ParsedRecord
from pipeload.core.source import RecordSource
from pipeload.exceptions import RecordParseError, ResourceError
from pipeload.models.delimiters import DelimiterSet
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class DelimitedTextSource(RecordSource):
    """Reads delimited text produced by an upstream export.

    Each record is re-parsed with the input delimiters, so escaped or
    enclosed delimiters in values survive and can be re-encoded with the
    output delimiters. Records are lists of strings (None for the null
    token), or dicts when ``columns`` names the fields.

    Examples:
        >>> source = DelimitedTextSource(Path("sales.txt"), DelimiterSet(field_delimiter="|"))
        >>> next(iter(source))
        ['1', 'meep|beep']
    """

    def __init__(
        self,
        path: Path,
        delimiters: Optional[DelimiterSet] = None,
        columns: Optional[Sequence[str]] = None,
        null_token: Optional[str] = "null",
    ):
        super().__init__(path, columns)
        self.delimiters = delimiters or DelimiterSet()
        self.null_token = null_token

    def records(self) -> Iterator[Any]:
        parser = DelimitedTextParser(self.delimiters, self.null_token)
        self.records_read = 0
        try:
            # newline="" keeps carriage returns and custom record delimiters intact
            f = open(self.path, "r", encoding="utf-8", newline="")
        except OSError as e:
            raise ResourceError(f"Cannot open input {self.path}: {e}") from e

        with f:
            while True:
                chunk = f.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                for fields in parser.feed(chunk):
                    yield self._record(fields)
            try:
                tail = parser.finish()
            except RecordParseError as e:
                raise RecordParseError(f"{self.path}, record {self.records_read + 1}: {e}") from e
            if tail is not None:
                yield self._record(tail)

        logger.debug("source.finished", path=str(self.path), records=self.records_read)

    def _record(self, fields: ParsedRecord) -> Any:
        self.records_read += 1
        if self.columns is None:
            return fields
        if len(fields) != len(self.columns):
            raise RecordParseError(
                f"{self.path}, record {self.records_read}: expected {len(self.columns)} fields, "
                f"found {len(fields)}"
            )
        return dict(zip(self.columns, fields))
