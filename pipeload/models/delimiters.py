"""Delimiter configuration for delimited text records."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field as PydanticField, field_validator, model_validator


class DelimiterSet(BaseModel):
    """Characters that frame fields and records in delimited text.

    A DelimiterSet is fixed for the duration of one export invocation.
    It is frozen (and therefore hashable) so it can be used as a cache key.

    Examples:
        >>> DelimiterSet().field_delimiter
        ','
        >>> DelimiterSet(field_delimiter="|", enclosed_by='"')
    """

    field_delimiter: str = PydanticField(
        ",",
        description="Character separating fields within a record",
    )

    record_delimiter: str = PydanticField(
        "\n",
        description="Character terminating each record",
    )

    enclosed_by: Optional[str] = PydanticField(
        None,
        description="Character enclosing field values, or None",
    )

    escaped_by: Optional[str] = PydanticField(
        "\\",
        description="Character escaping delimiters inside values, or None",
    )

    enclose_required: bool = PydanticField(
        False,
        description="Whether every field is enclosed (instead of only when needed)",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("field_delimiter", "record_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Delimiters are exactly one character."""
        if len(v) != 1:
            raise ValueError(f"Delimiter must be a single character, got {v!r}")
        return v

    @field_validator("enclosed_by", "escaped_by")
    @classmethod
    def validate_optional_char(cls, v: Optional[str]) -> Optional[str]:
        """Empty string and NUL both mean 'not set'."""
        if v is None or v == "" or v == "\0":
            return None
        if len(v) != 1:
            raise ValueError(f"Expected a single character, got {v!r}")
        return v

    @model_validator(mode="after")
    def validate_distinct(self) -> DelimiterSet:
        """Field and record delimiters, enclosure and escape must not collide."""
        chars = [self.field_delimiter, self.record_delimiter]
        if self.enclosed_by is not None:
            chars.append(self.enclosed_by)
        if self.escaped_by is not None:
            chars.append(self.escaped_by)
        if len(set(chars)) != len(chars):
            raise ValueError(f"Delimiter characters must be distinct: {chars!r}")
        if self.enclose_required and self.enclosed_by is None:
            raise ValueError("enclose_required needs enclosed_by to be set")
        return self
