"""pipeload models package.

This package contains the delimiter and result models. Job models live
in pipeload.models.job.
"""

from pipeload.models.delimiters import DelimiterSet
from pipeload.models.results import ExportResult, LoadOutcome

__all__ = [
    "DelimiterSet",
    "ExportResult",
    "LoadOutcome",
]
