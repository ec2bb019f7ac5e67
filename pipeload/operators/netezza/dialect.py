"""Netezza external-table dialect.

Netezza bulk-loads from a file (or named pipe) through a remote-source
external table:

    INSERT INTO <table> SELECT * FROM EXTERNAL '<path>' USING (...)

The driver on the client side reads the pipe and streams its bytes to the
server, so the statement blocks until the pipe reaches end-of-stream.
"""

from __future__ import annotations

from typing import Optional, Sequence

from pydantic import BaseModel, Field as PydanticField, field_validator

from pipeload.core.dialect import DelimiterNotice, Dialect
from pipeload.exceptions import ConfigurationError
from pipeload.models.delimiters import DelimiterSet

# Netezza only understands backslash as an escape character
NETEZZA_ESCAPE_CHAR = "\\"

BOOL_STYLES = {
    "TRUE_FALSE": ("true", "false"),
    "T_F": ("t", "f"),
    "1_0": ("1", "0"),
    "Y_N": ("y", "n"),
    "YES_NO": ("yes", "no"),
}


class NetezzaLoadOptions(BaseModel):
    """Options of the external-table USING clause.

    Format is always 'text' and the escape character is always backslash;
    the remaining options can be tuned per job.
    """

    remote_source: str = PydanticField(
        "python",
        description="REMOTESOURCE value naming the client driver that reads the pipe",
    )

    encoding: str = PydanticField(
        "internal",
        description="ENCODING value: 'internal', 'utf8' or 'latin9'",
    )

    null_value: str = PydanticField(
        "null",
        description="NULLVALUE token written for null fields",
    )

    bool_style: str = PydanticField(
        "TRUE_FALSE",
        description="BOOLSTYLE value: TRUE_FALSE, T_F, 1_0, Y_N or YES_NO",
    )

    log_dir: Optional[str] = PydanticField(
        None,
        description="LOGDIR for the external table's nzlog/nzbad files",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate encoding."""
        valid = {"internal", "utf8", "latin9"}
        if v.lower() not in valid:
            raise ValueError(f"Invalid encoding: {v}. Must be one of: {valid}")
        return v.lower()

    @field_validator("bool_style")
    @classmethod
    def validate_bool_style(cls, v: str) -> str:
        """Validate boolean style."""
        if v.upper() not in BOOL_STYLES:
            raise ValueError(f"Invalid bool_style: {v}. Must be one of: {set(BOOL_STYLES)}")
        return v.upper()

    @field_validator("null_value")
    @classmethod
    def validate_null_value(cls, v: str) -> str:
        """NULLVALUE is at most four characters."""
        if not v or len(v) > 4:
            raise ValueError(f"null_value must be 1 to 4 characters, got {v!r}")
        return v


def _literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _char_option(char: str) -> str:
    # Non-printable delimiters are given by their decimal code
    if char.isprintable():
        return _literal(char)
    return str(ord(char))


class NetezzaDialect(Dialect):
    """Bulk-load dialect for Netezza remote-source external tables.

    Examples:
        >>> dialect = NetezzaDialect()
        >>> dialect.null_token
        'null'
        >>> sql = dialect.build_load_statement("sales", "/work/a1/export.fifo", DelimiterSet())
    """

    name = "netezza"

    def __init__(self, options: Optional[NetezzaLoadOptions] = None):
        self.options = options or NetezzaLoadOptions()

    @property
    def null_token(self) -> str:
        return self.options.null_value

    def normalize_delimiters(
        self, delimiters: DelimiterSet
    ) -> tuple[DelimiterSet, list[DelimiterNotice]]:
        notices = []
        if delimiters.enclosed_by is not None:
            notices.append(
                DelimiterNotice(
                    "enclosure_unsupported",
                    "Netezza does not support enclosed fields. Ignoring enclosed_by.",
                )
            )
        if delimiters.escaped_by not in (None, NETEZZA_ESCAPE_CHAR):
            notices.append(
                DelimiterNotice(
                    "escape_unsupported",
                    "Netezza only supports '\\' as an escape character. Ignoring escaped_by.",
                )
            )

        try:
            effective = DelimiterSet(
                field_delimiter=delimiters.field_delimiter,
                record_delimiter=delimiters.record_delimiter,
                enclosed_by=None,
                escaped_by=NETEZZA_ESCAPE_CHAR,
                enclose_required=False,
            )
        except ValueError as e:
            raise ConfigurationError(
                f"Delimiters cannot be used with Netezza's escape character: {e}"
            ) from e

        return effective, notices

    def escaped_characters(self, delimiters: DelimiterSet) -> str:
        chars = super().escaped_characters(delimiters)
        # CRINSTRING FALSE: a bare carriage return would end the record
        if delimiters.record_delimiter == "\n":
            chars += "\r"
        return chars

    def render_bool(self, value: bool) -> str:
        true_text, false_text = BOOL_STYLES[self.options.bool_style]
        return true_text if value else false_text

    def build_load_statement(
        self,
        table: str,
        pipe_path: str,
        delimiters: DelimiterSet,
        columns: Optional[Sequence[str]] = None,
    ) -> str:
        if not table or not table.strip():
            raise ConfigurationError("Target table is required")

        target = table
        if columns:
            target = f"{table} ({', '.join(columns)})"

        options = [
            f"REMOTESOURCE {_literal(self.options.remote_source)}",
            f"BOOLSTYLE {_literal(self.options.bool_style)}",
            "CRINSTRING FALSE",
            f"DELIMITER {_char_option(delimiters.field_delimiter)}",
            f"ENCODING {_literal(self.options.encoding)}",
            f"ESCAPECHAR {_literal(NETEZZA_ESCAPE_CHAR)}",
            "FORMAT 'text'",
            "INCLUDEZEROSECONDS TRUE",
            f"NULLVALUE {_literal(self.options.null_value)}",
        ]
        if delimiters.record_delimiter != "\n":
            options.append(f"RECORDDELIM {_char_option(delimiters.record_delimiter)}")
        if self.options.log_dir:
            options.append(f"LOGDIR {_literal(self.options.log_dir)}")

        return (
            f"INSERT INTO {target} SELECT * FROM EXTERNAL {_literal(pipe_path)} "
            f"USING ({' '.join(options)} )"
        )
