"""Tests for the pipeload CLI."""

import textwrap

import pytest
from typer.testing import CliRunner

from conftest import requires_fifo
from pipeload import __version__
from pipeload.cli import app
from pipeload.utils.logging import configure_logging

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # The CLI binds the log handler to the runner's captured stderr
    configure_logging()


@pytest.fixture
def job_file(tmp_path):
    (tmp_path / "sales.txt").write_text("1|meep,beep\n2|null\n")
    path = tmp_path / "daily_sales.yaml"
    path.write_text(
        textwrap.dedent(
            f"""
            name: daily_sales
            connection:
              connector: conftest.FakeConnector
            table: SALES
            columns: [id, name]
            input:
              path: {tmp_path / "sales.txt"}
              delimiters:
                field_delimiter: "|"
            work_dir: {tmp_path / "work"}
            """
        )
    )
    return path


class TestCli:
    """Test CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_validate(self, job_file):
        result = runner.invoke(app, ["validate", str(job_file)])
        assert result.exit_code == 0
        assert "Job is valid" in result.output
        assert "Table: SALES" in result.output
        assert "Columns: id, name" in result.output

    def test_validate_invalid_job(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: daily_sales\ntable: SALES\n")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation failed" in result.output

    def test_validate_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2

    def test_statement(self, job_file):
        result = runner.invoke(app, ["statement", str(job_file), "--pipe-path", "/tmp/a1/export.fifo"])
        assert result.exit_code == 0
        assert "INSERT INTO SALES (id, name) SELECT * FROM EXTERNAL '/tmp/a1/export.fifo'" in result.output
        assert "DELIMITER ','" in result.output

    @requires_fifo
    def test_export(self, job_file, tmp_path):
        result = runner.invoke(app, ["export", str(job_file), "--attempt-id", "a1"])
        assert result.exit_code == 0, result.output
        assert "Export succeeded!" in result.output
        assert "Attempt ID: a1" in result.output
        assert "Records written: 2" in result.output
        assert not (tmp_path / "work" / "daily_sales" / "a1").exists()

    @requires_fifo
    def test_export_keep_attempt_dir(self, job_file, tmp_path):
        result = runner.invoke(app, ["export", str(job_file), "-a", "a1", "--keep-attempt-dir"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "work" / "daily_sales" / "a1").is_dir()

    def test_export_unknown_connector(self, job_file):
        job_file.write_text(job_file.read_text().replace("conftest.FakeConnector", "conftest.Missing"))
        result = runner.invoke(app, ["export", str(job_file)])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
