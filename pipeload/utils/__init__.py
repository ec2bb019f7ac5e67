"""pipeload utilities package.

This package contains logging setup and task-attempt directory helpers.
YAML job loading lives in pipeload.utils.yaml_parser.
"""

from pipeload.utils.logging import configure_logging, get_logger
from pipeload.utils.attempt import (
    cleanup_attempt_dir,
    generate_attempt_id,
    get_attempt_dir,
    get_pipe_path,
    prepare_attempt_dir,
)

__all__ = [
    "cleanup_attempt_dir",
    "configure_logging",
    "generate_attempt_id",
    "get_attempt_dir",
    "get_logger",
    "get_pipe_path",
    "prepare_attempt_dir",
]
