"""pipeload CLI - Command-line interface for named-pipe bulk exports."""

from typing import Optional

import typer
from pathlib import Path
from typing_extensions import Annotated

from pipeload import __version__
from pipeload.core.export_runner import ExportRunner
from pipeload.exceptions import (
    ConfigurationError,
    ConnectionError,
    LoadStatementError,
    PipeIOError,
    PipeloadError,
    ResourceError,
    ValidationError,
)
from pipeload.models.job import ExportJob
from pipeload.models.results import ExportResult
from pipeload.utils.logging import configure_logging

app = typer.Typer(
    name="pipeload",
    help="pipeload - Stream records into a warehouse bulk loader through a named pipe",
    add_completion=True,
)

JobPath = Annotated[
    Path,
    typer.Argument(
        help="Path to the YAML job file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"pipeload version {__version__}")
        raise typer.Exit()


def _display_result(result: ExportResult, verbose: bool = False) -> None:
    """Display export result to console."""
    typer.echo("\n" + "=" * 60)
    typer.secho("Export succeeded!", fg=typer.colors.GREEN, bold=True)

    typer.echo(f"\nTable: {result.table}")
    typer.echo(f"Attempt ID: {result.metadata.get('attempt_id', '-')}")
    typer.echo(f"Records written: {result.records_written:,}")
    typer.echo(f"Bytes written: {result.bytes_written:,}")
    typer.echo(f"Duration: {result.duration_seconds:.2f}s")

    if verbose:
        typer.echo(f"Load duration: {result.load_duration_seconds:.2f}s")
        typer.echo(f"Pipe: {result.pipe_path}")
        typer.echo(f"Statement: {result.statement}")


def _describe_job(job: ExportJob) -> None:
    typer.echo(f"Job: {job.name}")
    if job.description:
        typer.echo(f"Description: {job.description}")
    typer.echo(f"Table: {job.table}")
    typer.echo(f"Input: {job.input.path} ({job.input.format})")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """pipeload - Export records into Netezza through a named pipe."""
    pass


@app.command()
def export(
    job_path: JobPath,
    attempt_id: Annotated[
        Optional[str],
        typer.Option("-a", "--attempt-id", help="Attempt identifier (auto-generated if not provided)"),
    ] = None,
    keep_attempt_dir: Annotated[
        bool,
        typer.Option("--keep-attempt-dir", help="Keep the attempt directory after the export"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output"),
    ] = False,
) -> None:
    """Run an export job."""
    configure_logging(level="DEBUG" if verbose else None)
    try:
        typer.echo(f"Loading job: {job_path}")
        job = ExportJob.load_from_yaml(job_path)
        _describe_job(job)

        typer.echo("\nExporting...")
        runner = ExportRunner(keep_attempt_dir=keep_attempt_dir)
        result = runner.run(job, attempt_id=attempt_id)

        _display_result(result, verbose)

    except (ValidationError, ConfigurationError) as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except ConnectionError as e:
        typer.secho(f"Connection error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except LoadStatementError as e:
        typer.secho(f"Load failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except (PipeIOError, ResourceError) as e:
        typer.secho(f"Pipe error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except PipeloadError as e:
        typer.secho(f"Export error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.secho(f"Unexpected error: {e}", fg=typer.colors.RED, err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(code=1)


@app.command()
def validate(job_path: JobPath) -> None:
    """Validate a job YAML file."""
    try:
        typer.echo(f"Validating job: {job_path}")
        job = ExportJob.load_from_yaml(job_path)

        typer.secho("✓ Job is valid!", fg=typer.colors.GREEN, bold=True)
        typer.echo("")
        _describe_job(job)
        typer.echo(f"Version: {job.version}")
        if job.columns:
            typer.echo(f"Columns: {', '.join(job.columns)}")
        delims = job.output_delimiters
        typer.echo(
            f"Output delimiters: field={delims.field_delimiter!r} "
            f"record={delims.record_delimiter!r} escape={delims.escaped_by!r}"
        )

    except ValidationError as e:
        typer.secho(f"✗ Validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.secho(f"✗ Unexpected error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command()
def statement(
    job_path: JobPath,
    pipe_path: Annotated[
        Optional[Path],
        typer.Option("--pipe-path", "-p", help="Pipe path to show in the statement"),
    ] = None,
) -> None:
    """Print the bulk-load statement a job would run."""
    try:
        job = ExportJob.load_from_yaml(job_path)
        typer.echo(ExportRunner().build_statement(job, pipe_path))
    except (ValidationError, ConfigurationError) as e:
        typer.secho(f"✗ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
