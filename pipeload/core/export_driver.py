"""Export driver: streams records through a named pipe into a bulk load.

The driver owns the pipe, the record encoder and every write. It starts
a LoaderAgent whose statement reads the pipe, writes encoded records
into the pipe, closes the write side to signal end-of-stream, and joins
the agent. A failure of the load statement is authoritative over any
failure seen while streaming, since it decides whether data landed.
"""

from __future__ import annotations

import time
from datetime import datetime
from enum import Enum
from typing import Any, BinaryIO, Iterable, Optional, Sequence

from pipeload.core.config import config
from pipeload.core.connector import Connector
from pipeload.core.dialect import Dialect
from pipeload.core.encoder import RecordEncoder
from pipeload.core.loader_agent import LoaderAgent
from pipeload.core.pipe import Pipe
from pipeload.exceptions import (
    ConfigurationError,
    ConnectionError,
    ExportError,
    ExportInterruptedError,
    LoadStatementError,
    PipeIOError,
    ResourceError,
)
from pipeload.models.delimiters import DelimiterSet
from pipeload.models.results import ExportResult, LoadOutcome
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)


class ExportState(str, Enum):
    """Lifecycle states of an ExportDriver."""

    IDLE = "idle"
    PIPE_READY = "pipe_ready"
    LOADER_STARTED = "loader_started"
    STREAMING = "streaming"
    DRAINING = "draining"
    CLOSED = "closed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ExportState.CLOSED, ExportState.FAILED})


class ExportDriver:
    """Orchestrates one export invocation.

    States: IDLE -> PIPE_READY -> LOADER_STARTED -> STREAMING -> DRAINING
    -> CLOSED, with FAILED reachable from any state after IDLE. The pipe
    is disposed exactly once, on entry to CLOSED or FAILED. A driver is
    single use.

    Records can be pulled from an iterable, or pushed one at a time:

    Examples:
        Pull:
        >>> driver = ExportDriver(connector, pipe, NetezzaDialect(), "sales")
        >>> result = driver.export(records)

        Push:
        >>> with ExportDriver(connector, pipe, NetezzaDialect(), "sales") as driver:
        ...     for record in records:
        ...         driver.write(record)
        >>> driver.result.records_written
    """

    def __init__(
        self,
        connector: Connector,
        pipe: Pipe,
        dialect: Dialect,
        table: str,
        delimiters: Optional[DelimiterSet] = None,
        columns: Optional[Sequence[str]] = None,
        poll_interval: Optional[float] = None,
        interrupt_join_timeout: Optional[float] = None,
    ):
        """Initialize export driver.

        Args:
            connector: Connector for the loader's connection
            pipe: Pipe to create and stream through (not yet created)
            dialect: Bulk-loader dialect
            table: Target table
            delimiters: Requested output delimiters (dialect defaults if None)
            columns: Column order for mapping records and the statement's column list
            poll_interval: Seconds between write-side open attempts
            interrupt_join_timeout: Bounded wait for the loader after an interruption
        """
        self.connector = connector
        self.pipe = pipe
        self.dialect = dialect
        self.table = table
        self.delimiters = delimiters or DelimiterSet()
        self.columns = list(columns) if columns else None
        self.poll_interval = poll_interval if poll_interval is not None else config.open_poll_interval
        self.interrupt_join_timeout = (
            interrupt_join_timeout
            if interrupt_join_timeout is not None
            else config.interrupt_join_timeout
        )

        self.encoder = RecordEncoder(dialect, self.columns)
        self.state = ExportState.IDLE
        self.statement: Optional[str] = None
        self.result: Optional[ExportResult] = None

        self._agent: Optional[LoaderAgent] = None
        self._stream: Optional[BinaryIO] = None
        self._write_opened = False
        self._disposed = False
        self._records_written = 0
        self._bytes_written = 0
        self._started_at: Optional[datetime] = None
        self._started_clock = 0.0
        self._context = {"table": table, "pipe": str(pipe.path)}

    @property
    def records_written(self) -> int:
        return self._records_written

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    # -- public surface -------------------------------------------------

    def open(self) -> None:
        """Create the pipe, start the loader and open the write side.

        Raises:
            ResourceError: If the pipe cannot be created
            ConnectionError: If the loader cannot connect (no write side opened)
            LoadStatementError: If the loader failed before reading the pipe
            PipeIOError: If the write side cannot be opened
            ExportInterruptedError: If interrupted while starting
        """
        self._require(ExportState.IDLE)
        self._started_at = datetime.now()
        self._started_clock = time.monotonic()
        logger.info("export.started", **self._context)

        try:
            self.statement = self._build_statement()
            self._create_pipe()
            self._start_loader()
            self._open_write_side()
        except (KeyboardInterrupt, SystemExit) as e:
            self._interrupt(e)

    def write(self, record: Any) -> None:
        """Encode one record and write it into the pipe.

        An encoding failure leaves the driver streaming (nothing was
        written for that record). A write failure drains the export and
        raises its final error.

        Raises:
            RecordEncodingError: If the record cannot be encoded
            LoadStatementError: If the write failed because the load failed
            PipeIOError: If the write failed and the load did not report an error
        """
        self._require(ExportState.STREAMING)
        data = self.encoder.encode(record, self.delimiters)

        try:
            self._stream.write(data)
        except OSError as e:
            failure = PipeIOError(f"Failed to write to {self.pipe.path}: {e}")
            failure.__cause__ = e
            self._finish(failure)

        self._records_written += 1
        self._bytes_written += len(data)

    def close(self) -> ExportResult:
        """Signal end-of-stream, wait for the load and report the result.

        Raises:
            LoadStatementError: If the bulk-load statement failed
            PipeIOError: If closing the write side failed
            ExportInterruptedError: If interrupted while waiting for the load
        """
        self._require(ExportState.STREAMING)
        return self._finish(None)

    def export(self, records: Iterable[Any]) -> ExportResult:
        """Stream every record of an iterable and finish the export.

        Returns:
            ExportResult for the completed load
        """
        with self:
            for record in records:
                self.write(record)
        return self.result

    def __enter__(self) -> ExportDriver:
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if self.state in TERMINAL_STATES:
            return False
        if exc_val is None:
            self.close()
            return False
        if isinstance(exc_val, (KeyboardInterrupt, SystemExit)):
            self._interrupt(exc_val)
        # Producer-side failure: still close and join; a load failure wins
        self._finish(exc_val, raise_error=False)
        return False

    # -- transitions ----------------------------------------------------

    def _build_statement(self) -> str:
        try:
            effective = self.encoder.effective_delimiters(self.delimiters)
            return self.dialect.build_load_statement(
                self.table, str(self.pipe.path), effective, self.columns
            )
        except ConfigurationError:
            self._enter_terminal(ExportState.FAILED)
            raise

    def _create_pipe(self) -> None:
        try:
            self.pipe.create()
        except ResourceError as e:
            logger.error("export.pipe_failed", error=str(e), **self._context)
            self._enter_terminal(ExportState.FAILED)
            raise
        self.state = ExportState.PIPE_READY

    def _start_loader(self) -> None:
        self._agent = LoaderAgent(self.connector, self.statement)
        try:
            self._agent.init_connection()
        except ConnectionError as e:
            logger.error("export.connection_failed", error=str(e), **self._context)
            self._enter_terminal(ExportState.FAILED)
            raise
        self._agent.start()
        self.state = ExportState.LOADER_STARTED

    def _open_write_side(self) -> None:
        agent = self._agent
        try:
            self._stream = self.pipe.open_for_write(
                should_abort=lambda: agent.done,
                poll_interval=self.poll_interval,
            )
            self._write_opened = True
        except PipeIOError as e:
            self._finish(e)
        self.state = ExportState.STREAMING

    def _finish(self, error: Optional[BaseException], raise_error: bool = True) -> Optional[ExportResult]:
        """Close the write side, join the loader and settle the outcome."""
        self.state = ExportState.DRAINING
        close_error = self._close_write_side()
        if error is None:
            error = close_error

        try:
            outcome = self._join_loader()
        except KeyboardInterrupt as e:
            logger.warning("export.interrupted_during_join", **self._context)
            self._enter_terminal(ExportState.FAILED)
            raise ExportInterruptedError(
                f"Interrupted while waiting for the bulk load into {self.table}"
            ) from e

        if outcome is not None and not outcome.success:
            if error is not None:
                logger.warning("export.stream_error_superseded", error=str(error), **self._context)
            logger.error("export.load_failed", error=str(outcome.error), **self._context)
            self._enter_terminal(ExportState.FAILED)
            raise LoadStatementError(
                f"Bulk load into {self.table} failed: {outcome.error}"
            ) from outcome.error

        if error is not None:
            logger.error("export.failed", error=str(error), **self._context)
            self._enter_terminal(ExportState.FAILED)
            if raise_error:
                raise error
            return None

        self._enter_terminal(ExportState.CLOSED)
        self.result = self._build_result(outcome)
        logger.info(
            "export.finished",
            records=self._records_written,
            bytes=self._bytes_written,
            duration_seconds=self.result.duration_seconds,
            **self._context,
        )
        return self.result

    def _interrupt(self, cause: BaseException) -> None:
        """Close and join within a bounded effort, then report the interruption."""
        logger.warning("export.interrupted", state=self.state.value, **self._context)
        if self.state not in TERMINAL_STATES:
            self.state = ExportState.DRAINING
            self._close_write_side()
            agent = self._agent
            if agent is not None and agent.is_alive:
                try:
                    self._join_released(self.interrupt_join_timeout)
                except ExportInterruptedError:
                    logger.error("export.loader_abandoned", **self._context)
                except KeyboardInterrupt:
                    logger.error("export.loader_abandoned", **self._context)
            elif agent is not None:
                agent.release()
            self._enter_terminal(ExportState.FAILED)
        raise ExportInterruptedError(f"Export into {self.table} was interrupted") from cause

    # -- helpers --------------------------------------------------------

    def _join_loader(self) -> Optional[LoadOutcome]:
        if self._agent is None:
            return None
        if not self._write_opened:
            return self._join_released(None)
        return self._agent.join()

    def _join_released(self, timeout: Optional[float]) -> LoadOutcome:
        """Join the loader while releasing a reader still waiting for a writer.

        Raises:
            ExportInterruptedError: If the loader is still running after timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            self.pipe.release_reader()
            step = self.poll_interval
            if deadline is not None:
                step = min(step, max(deadline - time.monotonic(), 0.0))
            try:
                return self._agent.join(timeout=step)
            except ExportInterruptedError:
                if deadline is not None and time.monotonic() >= deadline:
                    raise

    def _close_write_side(self) -> Optional[PipeIOError]:
        stream, self._stream = self._stream, None
        if stream is None:
            return None
        try:
            stream.close()
        except OSError as e:
            logger.warning("export.pipe_close_failed", error=str(e), **self._context)
            failure = PipeIOError(f"Failed to close write side of {self.pipe.path}: {e}")
            failure.__cause__ = e
            return failure
        return None

    def _enter_terminal(self, state: ExportState) -> None:
        self.state = state
        if not self._disposed:
            self._disposed = True
            self.pipe.dispose()

    def _require(self, expected: ExportState) -> None:
        if self.state is not expected:
            raise ExportError(
                f"Export driver is {self.state.value}; expected {expected.value}"
            )

    def _build_result(self, outcome: Optional[LoadOutcome]) -> ExportResult:
        completed_at = datetime.now()
        return ExportResult(
            table=self.table,
            success=True,
            records_written=self._records_written,
            bytes_written=self._bytes_written,
            pipe_path=str(self.pipe.path),
            statement=self.statement,
            duration_seconds=time.monotonic() - self._started_clock,
            load_duration_seconds=outcome.duration_seconds if outcome else 0.0,
            started_at=self._started_at,
            completed_at=completed_at,
            metadata={
                "dialect": self.dialect.name,
                "executions": outcome.executions if outcome else 0,
            },
        )
