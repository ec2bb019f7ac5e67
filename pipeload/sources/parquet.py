"""Parquet record source.

Yields typed records (ints, floats, decimals, datetimes, booleans) that
the encoder renders in the bulk loader's text format.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

try:
    import pyarrow.parquet as pq

    PYARROW_AVAILABLE = True
except ImportError:
    PYARROW_AVAILABLE = False

from pipeload.core.source import RecordSource
from pipeload.exceptions import ConfigurationError, ResourceError
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)


class ParquetSource(RecordSource):
    """Parquet file read in batches via PyArrow.

    Records are dicts keyed by column name, in file (or ``columns``) order.

    Examples:
        >>> source = ParquetSource(Path("sales.parquet"), columns=["id", "amount"])
        >>> driver.export(source)
    """

    def __init__(
        self,
        path: Path,
        columns: Optional[Sequence[str]] = None,
        batch_size: int = 10000,
    ):
        """Initialize Parquet source.

        Raises:
            ConfigurationError: If PyArrow is not installed
        """
        if not PYARROW_AVAILABLE:
            raise ConfigurationError(
                "ParquetSource requires PyArrow. Install with: pip install pyarrow"
            )
        super().__init__(path, columns)
        self.batch_size = batch_size

    def records(self) -> Iterator[Any]:
        self.records_read = 0
        try:
            parquet_file = pq.ParquetFile(self.path)
        except (OSError, ValueError) as e:
            raise ResourceError(f"Cannot open Parquet input {self.path}: {e}") from e

        try:
            for batch in parquet_file.iter_batches(batch_size=self.batch_size, columns=self.columns):
                rows = batch.to_pylist()
                self.records_read += len(rows)
                yield from rows
        finally:
            parquet_file.close()

        logger.debug("source.finished", path=str(self.path), records=self.records_read)
