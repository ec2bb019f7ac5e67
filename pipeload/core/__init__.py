"""pipeload core package.

This package contains the abstract base classes that define the
extensible seams (connectors, dialects, pipes, record sources) and the
export machinery built on them. The export machinery lives in its own
modules (encoder, loader_agent, export_driver, export_runner).
"""

from pipeload.core.config import PipeloadConfig, config, load_config
from pipeload.core.connector import Connector
from pipeload.core.dialect import DelimiterNotice, Dialect
from pipeload.core.pipe import Pipe
from pipeload.core.source import RecordSource

__all__ = [
    "Connector",
    "DelimiterNotice",
    "Dialect",
    "Pipe",
    "PipeloadConfig",
    "RecordSource",
    "config",
    "load_config",
]
