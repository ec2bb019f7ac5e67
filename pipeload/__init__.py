"""pipeload - Bulk exports into a warehouse through a named pipe."""

__version__ = "0.1.0"

from pipeload.exceptions import (
    ConfigurationError,
    ConnectionError,
    ExportError,
    ExportInterruptedError,
    LoadStatementError,
    PipeIOError,
    PipeloadError,
    RecordEncodingError,
    RecordParseError,
    ResourceError,
    ValidationError,
)

# Re-export models
from pipeload.models import DelimiterSet, ExportResult, LoadOutcome

# Re-export core classes for custom connectors and dialects
from pipeload.core import Connector, Dialect, Pipe, RecordSource
from pipeload.core.encoder import RecordEncoder
from pipeload.core.export_driver import ExportDriver, ExportState
from pipeload.core.loader_agent import LoaderAgent
from pipeload.core.export_runner import ExportRunner, run_export
from pipeload.models.job import ConnectionConfig, ExportJob, InputConfig

__all__ = [
    # Version
    "__version__",
    # Errors
    "PipeloadError",
    "ConfigurationError",
    "ConnectionError",
    "ExportError",
    "ExportInterruptedError",
    "LoadStatementError",
    "PipeIOError",
    "RecordEncodingError",
    "RecordParseError",
    "ResourceError",
    "ValidationError",
    # Models
    "DelimiterSet",
    "ExportResult",
    "LoadOutcome",
    "ConnectionConfig",
    "ExportJob",
    "InputConfig",
    # Core
    "Connector",
    "Dialect",
    "Pipe",
    "RecordSource",
    "RecordEncoder",
    "LoaderAgent",
    "ExportDriver",
    "ExportState",
    "ExportRunner",
    "run_export",
]
