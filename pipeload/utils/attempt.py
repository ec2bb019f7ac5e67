"""Task-attempt working directories.

Each export invocation gets its own directory holding the named pipe:

    {work_dir}/{job_name}/{attempt_id}/export.fifo

Attempt IDs sort chronologically, so concurrent and repeated invocations
never share a pipe path.
"""

from __future__ import annotations

import secrets
import shutil
from datetime import datetime
from pathlib import Path

from pipeload.core.config import config
from pipeload.exceptions import ResourceError
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)


def generate_attempt_id() -> str:
    """Generate a sortable, unique attempt ID.

    Format: YYYYMMDD_HHMMSS_<random>
    Example: 20250604_143052_a1b2c3

    Returns:
        Unique attempt ID string
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    random_suffix = secrets.token_hex(3)  # 6 hex characters
    return f"{timestamp}_{random_suffix}"


def get_attempt_dir(job_name: str, attempt_id: str, work_dir: str | None = None) -> Path:
    """Get the directory for one task attempt.

    Args:
        job_name: Name of the export job
        attempt_id: Unique attempt identifier
        work_dir: Optional override for the base work directory

    Returns:
        Absolute path to the attempt directory
    """
    if work_dir:
        base_dir = Path(work_dir).absolute()
    else:
        base_dir = config.get_work_dir()

    return base_dir / job_name / attempt_id


def prepare_attempt_dir(attempt_dir: Path) -> Path:
    """Create the attempt directory, readable only by the current user.

    Raises:
        ResourceError: If the directory cannot be created
    """
    try:
        attempt_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        attempt_dir.chmod(0o700)
    except OSError as e:
        raise ResourceError(f"Cannot create attempt directory {attempt_dir}: {e}") from e
    return attempt_dir


def get_pipe_path(attempt_dir: Path, fifo_name: str | None = None) -> Path:
    """Get the named pipe path inside an attempt directory."""
    return attempt_dir / (fifo_name or config.fifo_name)


def cleanup_attempt_dir(attempt_dir: Path) -> None:
    """Remove an attempt directory.

    Best effort: a failure is logged and never raised, so it cannot
    replace the outcome of the export.
    """
    if not attempt_dir.exists():
        return
    try:
        shutil.rmtree(attempt_dir)
    except OSError as e:
        logger.warning("attempt.cleanup_failed", path=str(attempt_dir), error=str(e))
        return
    logger.debug("attempt.cleaned_up", path=str(attempt_dir))
