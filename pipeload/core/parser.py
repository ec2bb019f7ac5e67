"""Delimited text parsing.

Reverses RecordEncoder's transformation: splits text into records and
fields, honouring escape and enclosing characters, and maps the null
token back to None. Used to read delimited input files and to check
encoded output.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from pipeload.exceptions import RecordParseError
from pipeload.models.delimiters import DelimiterSet

ParsedRecord = list[Optional[str]]


class DelimitedTextParser:
    """Incremental parser for delimited text.

    Text can be fed in arbitrary chunks; a record ends at an unescaped,
    unenclosed record delimiter, so escaped newlines inside values are
    kept intact across physical lines.

    Examples:
        >>> parser = DelimitedTextParser(DelimiterSet())
        >>> parser.parse("1,meep\\\\,beep\\n")
        ['1', 'meep,beep']
        >>> parser.parse("2,null")
        ['2', None]
    """

    def __init__(self, delimiters: DelimiterSet, null_token: Optional[str] = "null"):
        self.delimiters = delimiters
        self.null_token = null_token
        self._reset_record()

    def _reset_field(self) -> None:
        self._buf: list[str] = []
        self._enclosed = False
        self._was_enclosed = False

    def _reset_record(self) -> None:
        self._fields: ParsedRecord = []
        self._escaped = False
        self._pending = False
        self._reset_field()

    def _end_field(self) -> None:
        text = "".join(self._buf)
        if not self._was_enclosed and self.null_token is not None and text == self.null_token:
            self._fields.append(None)
        else:
            self._fields.append(text)
        self._reset_field()

    def feed(self, text: str) -> list[ParsedRecord]:
        """Consume a chunk of text.

        Args:
            text: Next chunk of input

        Returns:
            Records completed by this chunk
        """
        field_delim = self.delimiters.field_delimiter
        record_delim = self.delimiters.record_delimiter
        escape = self.delimiters.escaped_by
        enclose = self.delimiters.enclosed_by

        records = []
        for ch in text:
            self._pending = True
            if self._escaped:
                self._buf.append(ch)
                self._escaped = False
                continue
            if ch == escape:
                self._escaped = True
                continue
            if ch == enclose:
                if self._enclosed:
                    self._enclosed = False
                    continue
                if not self._buf and not self._was_enclosed:
                    self._enclosed = True
                    self._was_enclosed = True
                    continue
            if not self._enclosed:
                if ch == field_delim:
                    self._end_field()
                    continue
                if ch == record_delim:
                    self._end_field()
                    records.append(self._fields)
                    self._reset_record()
                    continue
            self._buf.append(ch)
        return records

    def finish(self) -> Optional[ParsedRecord]:
        """Flush a final record that has no trailing record delimiter.

        Returns:
            The last record, or None if no text is pending

        Raises:
            RecordParseError: If input ends inside an escape or an enclosed field
        """
        if self._escaped:
            self._reset_record()
            raise RecordParseError("Input ends with a dangling escape character")
        if self._enclosed:
            self._reset_record()
            raise RecordParseError("Input ends inside an enclosed field")
        if not self._pending:
            return None
        self._end_field()
        record = self._fields
        self._reset_record()
        return record

    def parse(self, line: str) -> ParsedRecord:
        """Parse exactly one record.

        Args:
            line: One record, with or without its record delimiter

        Raises:
            RecordParseError: If the text does not hold exactly one record
        """
        records = self.feed(line)
        tail = self.finish()
        if tail is not None:
            records.append(tail)
        if len(records) != 1:
            raise RecordParseError(f"Expected one record, found {len(records)}")
        return records[0]

    def parse_stream(self, chunks: Iterable[str]) -> Iterator[ParsedRecord]:
        """Parse records from an iterable of text chunks."""
        for chunk in chunks:
            yield from self.feed(chunk)
        tail = self.finish()
        if tail is not None:
            yield tail


def decode(data: bytes, delimiters: DelimiterSet, null_token: Optional[str] = "null") -> ParsedRecord:
    """Decode one encoded record back into field values."""
    return DelimitedTextParser(delimiters, null_token).parse(data.decode("utf-8"))
