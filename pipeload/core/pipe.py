"""Base Pipe abstract class.

This module defines the Pipe interface: a single named, file-system
addressable byte conduit with one writer and one reader per use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional

# Returns True once the reader side can no longer attach
AbortCheck = Callable[[], bool]


class Pipe(ABC):
    """Base class for named pipes bridging a writer and a bulk loader.

    Lifecycle:
    1. create() - Create the conduit at its path
    2. open_for_write() - Open the write side (once)
    3. dispose() - Remove the conduit (best effort, idempotent)

    The path must live in a task-attempt private directory so concurrent
    attempts on the same host never share a pipe.

    Examples:
        >>> with create_pipe(attempt_dir / "export.fifo") as pipe:
        ...     stream = pipe.open_for_write(should_abort=lambda: agent.done)
        ...     stream.write(b"1,meep\\n")
        ...     stream.close()
    """

    def __init__(self, path: Path):
        """Initialize pipe.

        Args:
            path: Location of the conduit; made absolute
        """
        self._path = Path(path).absolute()
        self._created = False
        self._write_opened = False

    @property
    def path(self) -> Path:
        """Absolute path of the conduit."""
        return self._path

    @property
    def is_created(self) -> bool:
        return self._created

    @abstractmethod
    def create(self) -> None:
        """Create the conduit.

        Raises:
            ResourceError: If a stale entry cannot be removed or the
                platform cannot create a named conduit at the path
        """
        pass

    @abstractmethod
    def open_for_write(
        self,
        should_abort: Optional[AbortCheck] = None,
        poll_interval: Optional[float] = None,
    ) -> BinaryIO:
        """Open the write side.

        May wait until a reader has begun opening the other side. While
        waiting, ``should_abort`` is consulted; when it returns True the
        wait ends with PipeIOError.

        Args:
            should_abort: Predicate reporting that no reader will attach
            poll_interval: Seconds between open attempts

        Returns:
            Binary file object for writing

        Raises:
            PipeIOError: If the conduit was removed, the write side was
                already opened, or the reader will never attach
        """
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Remove the conduit.

        Never raises; failures are logged. Safe to call more than once.
        """
        pass

    def release_reader(self) -> bool:
        """Let a reader waiting for a writer see end-of-stream.

        Used when the write side will never be opened. Does nothing once
        the write side was opened.

        Returns:
            True if a waiting reader was released
        """
        return False

    def exists(self) -> bool:
        """Whether an entry exists at the pipe's path."""
        return self._path.exists() or self._path.is_symlink()

    def __enter__(self) -> Pipe:
        self.create()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r})"
