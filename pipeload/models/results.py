"""Result models for the loader agent and the export driver.

LoadOutcome is what the loader thread publishes once when its statement
returns. ExportResult is what a successful export reports to its caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field as PydanticField


@dataclass(frozen=True)
class LoadOutcome:
    """Outcome of one bulk-load statement execution.

    Either a success, or a single stored failure (connection or statement).
    Frozen: once published by the loader thread it is read-only.
    """

    success: bool
    statement: Optional[str] = None
    executions: int = 0
    error: Optional[BaseException] = None
    duration_seconds: float = 0.0

    @classmethod
    def succeeded(cls, statement: str, duration_seconds: float) -> LoadOutcome:
        return cls(
            success=True,
            statement=statement,
            executions=1,
            duration_seconds=duration_seconds,
        )

    @classmethod
    def failed(
        cls,
        error: BaseException,
        statement: Optional[str] = None,
        executions: int = 0,
        duration_seconds: float = 0.0,
    ) -> LoadOutcome:
        return cls(
            success=False,
            statement=statement,
            executions=executions,
            error=error,
            duration_seconds=duration_seconds,
        )


class ExportResult(BaseModel):
    """Result of a completed export.

    Only successful exports produce a result; failures are raised as
    typed exceptions from pipeload.exceptions.
    """

    table: str = PydanticField(
        ...,
        description="Target table",
    )

    success: bool = PydanticField(
        ...,
        description="Whether the export succeeded",
    )

    records_written: int = PydanticField(
        0,
        description="Number of records written into the pipe",
        ge=0,
    )

    bytes_written: int = PydanticField(
        0,
        description="Number of encoded bytes written into the pipe",
        ge=0,
    )

    pipe_path: str = PydanticField(
        ...,
        description="Absolute path of the named pipe used for the transfer",
    )

    statement: Optional[str] = PydanticField(
        None,
        description="Bulk-load statement executed by the loader",
    )

    duration_seconds: float = PydanticField(
        0.0,
        description="Duration of the export in seconds",
        ge=0.0,
    )

    load_duration_seconds: float = PydanticField(
        0.0,
        description="Duration of the bulk-load statement in seconds",
        ge=0.0,
    )

    started_at: datetime = PydanticField(
        ...,
        description="Export start time",
    )

    completed_at: Optional[datetime] = PydanticField(
        None,
        description="Export completion time",
    )

    metadata: dict[str, Any] = PydanticField(
        default_factory=dict,
        description="Additional metadata",
    )

    model_config = {"extra": "forbid"}
