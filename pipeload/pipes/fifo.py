"""POSIX named pipe (FIFO) implementation."""

from __future__ import annotations

import errno
import os
import stat
import sys
import time
from pathlib import Path
from typing import BinaryIO, Optional

from pipeload.core.config import config
from pipeload.core.pipe import AbortCheck, Pipe
from pipeload.exceptions import PipeIOError, ResourceError
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)


class NamedFifo(Pipe):
    """Named pipe backed by mkfifo(3).

    Opening the write side of a FIFO blocks until a reader opens the other
    end. To avoid waiting forever on a loader that already failed, the
    write side is opened non-blocking in a polling loop (ENXIO means no
    reader yet) and switched back to blocking once a reader is attached,
    so that every write applies the pipe's own backpressure.

    Examples:
        >>> fifo = NamedFifo(Path("/tmp/attempt_01/export.fifo"))
        >>> fifo.create()
        >>> stream = fifo.open_for_write(should_abort=lambda: agent.done)
        >>> fifo.dispose()
    """

    def __init__(self, path: Path, mode: int = 0o600):
        """Initialize FIFO.

        Args:
            path: Location of the FIFO
            mode: Permission bits for the FIFO
        """
        super().__init__(path)
        self.mode = mode

    def create(self) -> None:
        if not hasattr(os, "mkfifo"):
            raise ResourceError(f"Named pipes are not supported on this platform ({sys.platform})")

        if self.exists():
            try:
                self._path.unlink()
            except OSError as e:
                raise ResourceError(f"Cannot remove existing entry at {self._path}: {e}") from e
            logger.warning("pipe.stale_entry_removed", path=str(self._path))

        try:
            os.mkfifo(self._path, self.mode)
        except OSError as e:
            raise ResourceError(f"Cannot create named pipe at {self._path}: {e}") from e

        self._created = True
        logger.debug("pipe.created", path=str(self._path))

    def open_for_write(
        self,
        should_abort: Optional[AbortCheck] = None,
        poll_interval: Optional[float] = None,
    ) -> BinaryIO:
        if self._write_opened:
            raise PipeIOError(f"Write side of {self._path} was already opened")
        if not self._created:
            raise PipeIOError(f"Named pipe {self._path} has not been created")

        interval = poll_interval if poll_interval is not None else config.open_poll_interval
        waited = False
        while True:
            try:
                fd = os.open(self._path, os.O_WRONLY | os.O_NONBLOCK)
                break
            except FileNotFoundError as e:
                raise PipeIOError(f"Named pipe {self._path} was removed") from e
            except OSError as e:
                if e.errno != errno.ENXIO:
                    raise PipeIOError(f"Cannot open named pipe {self._path}: {e}") from e

            if should_abort is not None and should_abort():
                raise PipeIOError(
                    f"No reader attached to {self._path}; the loader finished without opening it"
                )
            if not waited:
                logger.debug("pipe.waiting_for_reader", path=str(self._path))
                waited = True
            time.sleep(interval)

        try:
            if not stat.S_ISFIFO(os.fstat(fd).st_mode):
                raise PipeIOError(f"{self._path} is no longer a named pipe")
            os.set_blocking(fd, True)
            stream = os.fdopen(fd, "wb", buffering=config.write_buffer_size)
        except PipeIOError:
            os.close(fd)
            raise
        except OSError as e:
            os.close(fd)
            raise PipeIOError(f"Cannot prepare write side of {self._path}: {e}") from e

        self._write_opened = True
        logger.debug("pipe.write_opened", path=str(self._path))
        return stream

    def release_reader(self) -> bool:
        # Opening and closing a writer ends a pending reader's open() with EOF
        if not self._created or self._write_opened:
            return False
        try:
            fd = os.open(self._path, os.O_WRONLY | os.O_NONBLOCK)
        except OSError as e:
            if e.errno not in (errno.ENXIO, errno.ENOENT):
                logger.warning("pipe.release_failed", path=str(self._path), error=str(e))
            return False
        os.close(fd)
        logger.debug("pipe.reader_released", path=str(self._path))
        return True

    def dispose(self) -> None:
        if not self._created:
            return
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("pipe.dispose_failed", path=str(self._path), error=str(e))
            return
        self._created = False
        logger.debug("pipe.disposed", path=str(self._path))
