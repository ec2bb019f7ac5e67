"""Base RecordSource abstract class.

This module defines the RecordSource interface for reading the records
an export streams into the warehouse.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence


class RecordSource(ABC):
    """Base class for record sources.

    A source yields records the encoder accepts: mappings keyed by column
    name, or sequences of field values.

    Examples:
        >>> source = DelimitedTextSource(Path("sales.csv"), DelimiterSet())
        >>> driver.export(source)
    """

    def __init__(self, path: Path, columns: Optional[Sequence[str]] = None):
        """Initialize record source.

        Args:
            path: Input file
            columns: Optional column names for the yielded records
        """
        self.path = Path(path)
        self.columns = list(columns) if columns else None
        self.records_read = 0

    @abstractmethod
    def records(self) -> Iterator[Any]:
        """Yield records from the input.

        Raises:
            ResourceError: If the input cannot be read
            RecordParseError: If the input is malformed
        """
        pass

    def __iter__(self) -> Iterator[Any]:
        return self.records()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={str(self.path)!r})"
