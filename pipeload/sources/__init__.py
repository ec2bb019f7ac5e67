"""Record sources for export jobs."""

from __future__ import annotations

from pathlib import Path

from pipeload.core.source import RecordSource
from pipeload.exceptions import ConfigurationError
from pipeload.models.job import InputConfig
from pipeload.sources.parquet import ParquetSource
from pipeload.sources.text import DelimitedTextSource


def open_source(input_config: InputConfig) -> RecordSource:
    """Build the record source for a job's input section.

    Raises:
        ConfigurationError: If the input format is not supported
    """
    path = Path(input_config.path)
    if input_config.format == "text":
        return DelimitedTextSource(
            path,
            delimiters=input_config.delimiters,
            columns=input_config.columns,
            null_token=input_config.null_token,
        )
    if input_config.format == "parquet":
        return ParquetSource(
            path,
            columns=input_config.columns,
            batch_size=input_config.batch_size,
        )
    raise ConfigurationError(f"Unsupported input format: {input_config.format}")


__all__ = ["DelimitedTextSource", "ParquetSource", "RecordSource", "open_source"]
