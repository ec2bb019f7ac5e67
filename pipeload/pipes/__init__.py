"""Named pipe backends.

The core only depends on the Pipe interface; the backend is chosen here
per platform.
"""

from __future__ import annotations

import os
from pathlib import Path

from pipeload.core.pipe import Pipe
from pipeload.exceptions import ResourceError
from pipeload.pipes.fifo import NamedFifo

# os.name -> Pipe implementation
PIPE_BACKENDS: dict[str, type[Pipe]] = {
    "posix": NamedFifo,
}


def create_pipe(path: Path) -> Pipe:
    """Return an (uncreated) pipe for the running platform.

    Args:
        path: Location of the pipe

    Raises:
        ResourceError: If the platform has no named pipe backend
    """
    backend = PIPE_BACKENDS.get(os.name)
    if backend is None:
        raise ResourceError(f"No named pipe backend for platform '{os.name}'")
    return backend(path)


__all__ = ["NamedFifo", "PIPE_BACKENDS", "create_pipe"]
