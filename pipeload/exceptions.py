"""pipeload exception hierarchy."""

from __future__ import annotations


class PipeloadError(Exception):
    """Base exception for all pipeload errors."""

    pass


class ConfigurationError(PipeloadError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(PipeloadError):
    """Raised when a job file or model fails validation."""

    pass


class ResourceError(PipeloadError):
    """Raised when the pipe cannot be created or removed."""

    pass


class ConnectionError(PipeloadError):
    """Raised when the warehouse connection cannot be established."""

    pass


class PipeIOError(PipeloadError):
    """Raised when writing to, opening or closing the pipe fails."""

    pass


class ExportInterruptedError(PipeIOError):
    """Raised when an export is interrupted before the load finished."""

    pass


class LoadStatementError(PipeloadError):
    """Raised when the bulk-load statement fails or is rejected."""

    pass


class RecordEncodingError(PipeloadError):
    """Raised when a record value cannot be rendered for the bulk loader."""

    pass


class RecordParseError(PipeloadError):
    """Raised when a delimited input line cannot be parsed."""

    pass


class ExportError(PipeloadError):
    """Raised when the export driver is used out of order."""

    pass
