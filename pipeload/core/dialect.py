"""Base Dialect abstract class.

This module defines the Dialect interface describing how a warehouse's
bulk loader expects delimited text: which delimiter settings it honours,
how values are rendered, and which statement loads a named pipe.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, NamedTuple, Optional, Sequence

from pipeload.exceptions import RecordEncodingError
from pipeload.models.delimiters import DelimiterSet


class DelimiterNotice(NamedTuple):
    """A delimiter setting the dialect had to override."""

    code: str
    message: str


class Dialect(ABC):
    """Base class for bulk-loader dialects.

    A Dialect is stateless; per-invocation state (such as which warnings
    were already emitted) lives on the RecordEncoder that uses it.

    Examples:
        >>> dialect = NetezzaDialect()
        >>> effective, notices = dialect.normalize_delimiters(DelimiterSet(enclosed_by='"'))
        >>> effective.enclosed_by is None
        True
        >>> dialect.build_load_statement("sales", "/work/a1/export.fifo", effective)
    """

    name: str = "generic"

    @property
    @abstractmethod
    def null_token(self) -> str:
        """Text written in place of a null field."""
        pass

    @abstractmethod
    def normalize_delimiters(
        self, delimiters: DelimiterSet
    ) -> tuple[DelimiterSet, list[DelimiterNotice]]:
        """Map requested delimiters onto what the bulk loader supports.

        Args:
            delimiters: Delimiters requested by configuration

        Returns:
            Tuple of (effective delimiters, notices for overridden settings)
        """
        pass

    @abstractmethod
    def build_load_statement(
        self,
        table: str,
        pipe_path: str,
        delimiters: DelimiterSet,
        columns: Optional[Sequence[str]] = None,
    ) -> str:
        """Build the bulk-load statement that reads from the pipe.

        Args:
            table: Target table
            pipe_path: Absolute path of the named pipe
            delimiters: Effective delimiters (already normalized)
            columns: Optional target column list

        Returns:
            SQL statement string
        """
        pass

    def escaped_characters(self, delimiters: DelimiterSet) -> str:
        """Characters that must be escaped inside a field value."""
        chars = [delimiters.field_delimiter, delimiters.record_delimiter]
        if delimiters.escaped_by is not None:
            chars.append(delimiters.escaped_by)
        if delimiters.enclosed_by is not None:
            chars.append(delimiters.enclosed_by)
        return "".join(chars)

    def render_bool(self, value: bool) -> str:
        return "true" if value else "false"

    def render_value(self, value: Any) -> Optional[str]:
        """Render one field value as text, or None for a null field.

        Numeric values keep the precision of the source value.

        Raises:
            RecordEncodingError: If the value cannot be rendered as text
        """
        if value is None:
            return None

        if isinstance(value, str):
            return value

        # bool before int: bool is a subclass of int
        if isinstance(value, bool):
            return self.render_bool(value)

        if isinstance(value, int):
            return str(value)

        if isinstance(value, float):
            return repr(value)

        if isinstance(value, Decimal):
            # 'f' keeps every digit and never switches to exponent notation
            return format(value, "f")

        if isinstance(value, datetime):
            # TIMESTAMP text carries no offset: aware values are written in UTC
            if value.utcoffset() is not None:
                value = value.astimezone(timezone.utc).replace(tzinfo=None)
            return value.isoformat(sep=" ")

        if isinstance(value, time) and value.utcoffset() is not None:
            raise RecordEncodingError(f"Cannot render time with a UTC offset: {value!r}")

        if isinstance(value, (date, time)):
            return value.isoformat()

        if isinstance(value, (bytes, bytearray, memoryview)):
            try:
                return bytes(value).decode("utf-8")
            except UnicodeDecodeError as e:
                raise RecordEncodingError(f"Binary value is not valid UTF-8: {e}") from e

        return str(value)
