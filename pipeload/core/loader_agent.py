"""Loader agent: runs the bulk-load statement on its own thread.

The statement reads the named pipe until end-of-stream, so it must run
concurrently with the thread that writes records into the pipe. Startup
is split in two steps so a connection failure is reported synchronously,
before any pipe I/O is attempted:

1. init_connection() - open the warehouse connection (caller's thread)
2. start() - run the statement on a daemon thread

The outcome is published once through an OutcomeSlot and read by the
owner after join().
"""

from __future__ import annotations

import threading
import time
from typing import Any, Optional

from pipeload.core.connector import Connector
from pipeload.exceptions import ConnectionError, ExportError, ExportInterruptedError
from pipeload.models.results import LoadOutcome
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)


class OutcomeSlot:
    """Single-assignment holder for a LoadOutcome."""

    def __init__(self):
        self._lock = threading.Lock()
        self._published = threading.Event()
        self._outcome: Optional[LoadOutcome] = None

    @property
    def is_set(self) -> bool:
        return self._published.is_set()

    def publish(self, outcome: LoadOutcome) -> None:
        """Store the outcome.

        Raises:
            ExportError: If an outcome was already published
        """
        with self._lock:
            if self._published.is_set():
                raise ExportError("Load outcome was already published")
            self._outcome = outcome
            self._published.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._published.wait(timeout)

    def get(self) -> LoadOutcome:
        """Return the published outcome.

        Raises:
            ExportError: If nothing was published yet
        """
        if not self._published.is_set():
            raise ExportError("Load outcome has not been published yet")
        return self._outcome


class LoaderAgent:
    """Executes one bulk-load statement on a background thread.

    Examples:
        >>> agent = LoaderAgent(connector, statement)
        >>> agent.init_connection()      # raises ConnectionError synchronously
        >>> agent.start()
        >>> ...                          # write into the pipe, then close it
        >>> outcome = agent.join()
        >>> if not outcome.success:
        ...     raise LoadStatementError(str(outcome.error)) from outcome.error
    """

    def __init__(self, connector: Connector, statement: str, name: str = "pipeload-loader"):
        """Initialize loader agent.

        Args:
            connector: Connector providing the dedicated connection
            statement: Bulk-load statement referencing the pipe's absolute path
            name: Thread name
        """
        self.connector = connector
        self.statement = statement
        self.name = name
        self._connection: Optional[Any] = None
        self._thread: Optional[threading.Thread] = None
        self._slot = OutcomeSlot()

    @property
    def done(self) -> bool:
        """Whether run() has finished and published its outcome."""
        return self._slot.is_set

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def init_connection(self) -> None:
        """Open the warehouse connection before the thread starts.

        Raises:
            ConnectionError: If the connection cannot be established
            ExportError: If called twice
        """
        if self._connection is not None:
            raise ExportError("Loader connection is already initialized")

        try:
            connection = self.connector.open_connection()
        except ConnectionError:
            raise
        except Exception as e:
            raise ConnectionError(f"Could not connect to database: {e}") from e

        if connection is None:
            raise ConnectionError("Could not connect to database")
        self._connection = connection
        logger.debug("loader.connection_opened", thread=self.name)

    def start(self) -> None:
        """Run the statement on a daemon thread and return immediately.

        Raises:
            ExportError: If the connection was not initialized or the
                agent was already started
        """
        if self._connection is None:
            raise ExportError("init_connection() must succeed before start()")
        if self._thread is not None:
            raise ExportError("Loader agent was already started")

        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()

    def run(self) -> None:
        """Execute the statement and publish the outcome.

        Statement failures are captured in the outcome, not raised. The
        connection is always closed; a failure while closing is logged
        and never replaces the captured outcome.
        """
        started = time.monotonic()
        outcome: Optional[LoadOutcome] = None
        try:
            logger.info("loader.statement_started", thread=self.name, statement=self.statement)
            self._connection.exec_driver_sql(self.statement)
            self._connection.commit()
            outcome = LoadOutcome.succeeded(self.statement, time.monotonic() - started)
            logger.info("loader.statement_finished", duration_seconds=outcome.duration_seconds)
        except Exception as e:
            outcome = LoadOutcome.failed(e, self.statement, 1, time.monotonic() - started)
            logger.error("loader.statement_failed", error=str(e))
        except BaseException as e:
            outcome = LoadOutcome.failed(e, self.statement, 1, time.monotonic() - started)
            raise
        finally:
            self._close_connection()
            self._slot.publish(outcome)

    def join(self, timeout: Optional[float] = None) -> LoadOutcome:
        """Wait for run() to return and expose its outcome.

        Args:
            timeout: Maximum seconds to wait; None waits indefinitely

        Returns:
            The published LoadOutcome

        Raises:
            ExportError: If the agent was never started
            ExportInterruptedError: If the timeout expired first
        """
        if self._thread is None:
            raise ExportError("Loader agent was never started")

        self._thread.join(timeout)
        if self._thread.is_alive():
            raise ExportInterruptedError(
                f"Loader thread '{self.name}' still running after {timeout}s"
            )
        return self._slot.get()

    def release(self) -> None:
        """Close an initialized connection that was never handed to a thread."""
        if self._thread is None and self._connection is not None:
            self._close_connection()

    def _close_connection(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            connection.close()
        except Exception as e:
            # Closing the connection does not change the load outcome
            logger.error("loader.close_failed", error=str(e))
