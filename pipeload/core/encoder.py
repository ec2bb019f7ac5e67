"""Record encoding for the bulk loader's delimited text format.

The encoder turns one structured record into the exact bytes the
warehouse's bulk loader reads from the pipe. It performs no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional

from pipeload.core.dialect import Dialect
from pipeload.exceptions import RecordEncodingError
from pipeload.models.delimiters import DelimiterSet
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)

ENCODING = "utf-8"


class _EncodingPlan:
    """Effective delimiters plus the escape table derived from them."""

    __slots__ = ("delimiters", "table", "specials", "null_token")

    def __init__(self, delimiters: DelimiterSet, escaped: str, null_token: str):
        self.delimiters = delimiters
        self.specials = escaped
        self.null_token = null_token
        escape = delimiters.escaped_by
        if escape is None:
            self.table = {}
        else:
            self.table = {ord(ch): escape + ch for ch in escaped}


class RecordEncoder:
    """Encodes records into delimited, escaped UTF-8 bytes.

    One encoder is created per export invocation. Delimiter settings the
    dialect cannot honour are reported with a single warning the first
    time they are seen, then ignored for every record.

    Records may be mappings (ordered by ``columns`` when given, else by the
    mapping's own order) or sequences of field values.

    Examples:
        >>> encoder = RecordEncoder(NetezzaDialect())
        >>> encoder.encode({"id": 1, "name": "meep,beep"}, DelimiterSet())
        b'1,meep\\\\,beep\\n'
    """

    def __init__(self, dialect: Dialect, columns: Optional[Sequence[str]] = None):
        self.dialect = dialect
        self.columns = list(columns) if columns else None
        self._plans: dict[DelimiterSet, _EncodingPlan] = {}
        self._warned: set[str] = set()

    def effective_delimiters(self, delimiters: DelimiterSet) -> DelimiterSet:
        """Delimiters actually used for output, after dialect normalization."""
        return self._plan(delimiters).delimiters

    def encode(self, record: Any, delimiters: DelimiterSet) -> bytes:
        """Encode one record.

        Args:
            record: Mapping or sequence of field values
            delimiters: Requested delimiters for this invocation

        Returns:
            Encoded record, terminated by the record delimiter

        Raises:
            RecordEncodingError: If the record or one of its values cannot be encoded
        """
        plan = self._plan(delimiters)
        fields = [self._encode_field(value, plan) for value in self._values(record)]
        text = plan.delimiters.field_delimiter.join(fields) + plan.delimiters.record_delimiter
        return text.encode(ENCODING)

    def _plan(self, delimiters: DelimiterSet) -> _EncodingPlan:
        plan = self._plans.get(delimiters)
        if plan is None:
            effective, notices = self.dialect.normalize_delimiters(delimiters)
            for notice in notices:
                if notice.code not in self._warned:
                    self._warned.add(notice.code)
                    logger.warning(
                        "encoder.delimiter_ignored",
                        dialect=self.dialect.name,
                        setting=notice.code,
                        detail=notice.message,
                    )
            plan = _EncodingPlan(
                effective,
                self.dialect.escaped_characters(effective),
                self.dialect.null_token,
            )
            self._plans[delimiters] = plan
        return plan

    def _values(self, record: Any) -> list[Any]:
        if isinstance(record, Mapping):
            if self.columns is None:
                return list(record.values())
            try:
                return [record[column] for column in self.columns]
            except KeyError as e:
                raise RecordEncodingError(f"Record is missing column {e.args[0]!r}") from e

        if isinstance(record, (str, bytes, bytearray)) or not isinstance(record, Sequence):
            raise RecordEncodingError(
                f"Record must be a mapping or a sequence of values, got {type(record).__name__}"
            )
        return list(record)

    def _encode_field(self, value: Any, plan: _EncodingPlan) -> str:
        text = self.dialect.render_value(value)
        if text is None:
            return plan.null_token

        delimiters = plan.delimiters
        escaped = text.translate(plan.table) if plan.table else text

        enclose = delimiters.enclosed_by
        needs_framing = any(ch in text for ch in plan.specials)
        if enclose is not None and (delimiters.enclose_required or needs_framing):
            return f"{enclose}{escaped}{enclose}"
        if needs_framing and not plan.table:
            raise RecordEncodingError(
                f"Value {text!r} contains a delimiter and no escape or enclosing character is set"
            )
        return escaped


def encode_record(
    record: Any,
    delimiters: DelimiterSet,
    dialect: Dialect,
    columns: Optional[Sequence[str]] = None,
) -> bytes:
    """Encode a single record with a throwaway encoder."""
    return RecordEncoder(dialect, columns).encode(record, delimiters)
