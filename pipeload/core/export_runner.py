"""Export runner engine.

This module runs a configured ExportJob end to end: it resolves the
connector, prepares a task-attempt directory for the named pipe, opens
the record source and drives the export.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pipeload.core.connector import Connector
from pipeload.core.export_driver import ExportDriver
from pipeload.models.job import ExportJob
from pipeload.models.results import ExportResult
from pipeload.operators import resolve_connector
from pipeload.operators.netezza.dialect import NetezzaDialect
from pipeload.pipes import create_pipe
from pipeload.sources import open_source
from pipeload.utils.attempt import (
    cleanup_attempt_dir,
    generate_attempt_id,
    get_attempt_dir,
    get_pipe_path,
    prepare_attempt_dir,
)
from pipeload.utils.logging import get_logger

logger = get_logger(__name__)

# Shown by build_statement() when no attempt directory exists yet
PLACEHOLDER_PIPE_PATH = Path("/<work_dir>/<job>/<attempt_id>/export.fifo")


class ExportRunner:
    """Export runner engine.

    Examples:
        >>> runner = ExportRunner()
        >>> result = runner.run(load_job(Path("daily_sales.yaml")))
        >>> print(f"Loaded {result.records_written} records into {result.table}")
    """

    def __init__(self, work_dir: Optional[str] = None, keep_attempt_dir: bool = False):
        """Initialize export runner.

        Args:
            work_dir: Override for the base work directory (job and env settings otherwise)
            keep_attempt_dir: Keep the attempt directory after the export
        """
        self.work_dir = work_dir
        self.keep_attempt_dir = keep_attempt_dir

    def run(
        self,
        job: ExportJob,
        attempt_id: Optional[str] = None,
        connector: Optional[Connector] = None,
    ) -> ExportResult:
        """Run one export attempt.

        Args:
            job: Export job configuration
            attempt_id: Optional attempt identifier. Auto-generated if not provided.
            connector: Optional connector; resolved from the job if not provided

        Returns:
            ExportResult of the completed load

        Raises:
            ConfigurationError: If the job cannot be turned into an export
            ResourceError: If the attempt directory or pipe cannot be created
            ConnectionError: If the warehouse connection fails
            PipeIOError: If streaming into the pipe fails
            LoadStatementError: If the bulk-load statement fails
        """
        attempt_id = attempt_id or generate_attempt_id()
        connector = connector or resolve_connector(job.connection)
        dialect = NetezzaDialect(job.load_options)
        source = open_source(job.input)

        attempt_dir = get_attempt_dir(job.name, attempt_id, self.work_dir or job.work_dir)
        logger.info(
            "runner.started",
            job=job.name,
            attempt_id=attempt_id,
            table=job.table,
            source=str(source.path),
        )

        prepare_attempt_dir(attempt_dir)
        try:
            driver = ExportDriver(
                connector,
                create_pipe(get_pipe_path(attempt_dir)),
                dialect,
                job.table,
                delimiters=job.output_delimiters,
                columns=job.columns,
            )
            result = driver.export(source)
        except Exception as e:
            logger.error("runner.failed", job=job.name, attempt_id=attempt_id, error=str(e))
            raise
        finally:
            connector.disconnect()
            if not self.keep_attempt_dir:
                cleanup_attempt_dir(attempt_dir)

        result.metadata.update(
            {
                "job": job.name,
                "attempt_id": attempt_id,
                "records_read": source.records_read,
            }
        )
        logger.info(
            "runner.finished",
            job=job.name,
            attempt_id=attempt_id,
            records=result.records_written,
            duration_seconds=result.duration_seconds,
        )
        return result

    def build_statement(self, job: ExportJob, pipe_path: Optional[Path] = None) -> str:
        """Render the load statement a job would run.

        Args:
            job: Export job configuration
            pipe_path: Pipe path to reference (a placeholder if None)
        """
        dialect = NetezzaDialect(job.load_options)
        effective, _ = dialect.normalize_delimiters(job.output_delimiters)
        return dialect.build_load_statement(
            job.table,
            str(pipe_path or PLACEHOLDER_PIPE_PATH),
            effective,
            job.columns,
        )


def run_export(job: ExportJob, attempt_id: Optional[str] = None) -> ExportResult:
    """Run a configured export job with default settings."""
    return ExportRunner().run(job, attempt_id=attempt_id)
