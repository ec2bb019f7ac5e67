"""End-to-end tests for the export runner."""

from datetime import datetime
from decimal import Decimal

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from conftest import FakeConnector, loader_threads, pipe_path_of, requires_fifo
from pipeload.core.export_runner import PLACEHOLDER_PIPE_PATH, ExportRunner, run_export
from pipeload.exceptions import ConfigurationError, LoadStatementError
from pipeload.models.job import ExportJob


def make_job(tmp_path, **overrides):
    data = {
        "name": "daily_sales",
        "connection": {"connection": "netezza+nzpy://admin:pw@nz-host/sales"},
        "table": "SALES",
        "input": {"path": str(tmp_path / "sales.txt"), "delimiters": {"field_delimiter": "|"}},
        "work_dir": str(tmp_path / "work"),
    }
    data.update(overrides)
    return ExportJob(**data)


@pytest.fixture
def sales_text(tmp_path):
    (tmp_path / "sales.txt").write_text("1|meep,beep\n2|null\n")


@requires_fifo
class TestExportRunner:
    """Test running whole jobs."""

    def test_text_job(self, tmp_path, sales_text):
        connector = FakeConnector()
        result = ExportRunner().run(make_job(tmp_path), attempt_id="a1", connector=connector)

        assert connector.received == b"1,meep\\,beep\n2,null\n"
        assert result.records_written == 2
        assert result.metadata["attempt_id"] == "a1"
        assert result.metadata["job"] == "daily_sales"
        assert result.metadata["records_read"] == 2
        assert pipe_path_of(connector.statements[0]) == str(tmp_path / "work" / "daily_sales" / "a1" / "export.fifo")

    def test_attempt_dir_removed_and_connector_released(self, tmp_path, sales_text):
        connector = FakeConnector()
        ExportRunner().run(make_job(tmp_path), attempt_id="a1", connector=connector)

        assert not (tmp_path / "work" / "daily_sales" / "a1").exists()
        assert connector.disconnects == 1
        assert loader_threads() == []

    def test_keep_attempt_dir(self, tmp_path, sales_text):
        runner = ExportRunner(keep_attempt_dir=True)
        runner.run(make_job(tmp_path), attempt_id="a1", connector=FakeConnector())

        attempt_dir = tmp_path / "work" / "daily_sales" / "a1"
        assert attempt_dir.is_dir()
        assert list(attempt_dir.iterdir()) == []

    def test_generated_attempt_id(self, tmp_path, sales_text):
        result = ExportRunner().run(make_job(tmp_path), connector=FakeConnector())
        assert result.metadata["attempt_id"]

    def test_runner_work_dir_override(self, tmp_path, sales_text):
        connector = FakeConnector()
        ExportRunner(work_dir=str(tmp_path / "other")).run(make_job(tmp_path), attempt_id="a1", connector=connector)
        assert pipe_path_of(connector.statements[0]).startswith(str(tmp_path / "other"))

    def test_output_delimiters_and_columns(self, tmp_path, sales_text):
        connector = FakeConnector()
        job = make_job(
            tmp_path,
            columns=["name", "id"],
            output_delimiters={"field_delimiter": ";"},
            input={
                "path": str(tmp_path / "sales.txt"),
                "delimiters": {"field_delimiter": "|"},
                "columns": ["id", "name"],
            },
        )
        ExportRunner().run(job, attempt_id="a1", connector=connector)

        assert connector.received == b"meep,beep;1\nnull;2\n"
        assert "INSERT INTO SALES (name, id)" in connector.statements[0]
        assert "DELIMITER ';'" in connector.statements[0]

    def test_parquet_job(self, tmp_path):
        path = tmp_path / "sales.parquet"
        pq.write_table(
            pa.table(
                {
                    "id": pa.array([1], type=pa.int64()),
                    "amount": pa.array([Decimal("9.50")], type=pa.decimal128(10, 2)),
                    "sold_at": pa.array([datetime(2024, 1, 2, 3, 4, 5)], type=pa.timestamp("us")),
                    "paid": pa.array([True]),
                }
            ),
            path,
        )
        connector = FakeConnector()
        job = make_job(tmp_path, input={"path": str(path), "format": "parquet"})
        ExportRunner().run(job, attempt_id="a1", connector=connector)

        assert connector.received == b"1,9.50,2024-01-02 03:04:05,true\n"

    def test_load_failure_cleans_up(self, tmp_path, sales_text):
        connector = FakeConnector(fail_before_read=True)
        with pytest.raises(LoadStatementError):
            ExportRunner().run(make_job(tmp_path), attempt_id="a1", connector=connector)

        assert not (tmp_path / "work" / "daily_sales" / "a1").exists()
        assert connector.disconnects == 1


class TestBuildStatement:
    """Test statement preview."""

    def test_placeholder_path(self, tmp_path):
        sql = ExportRunner().build_statement(make_job(tmp_path))
        assert f"EXTERNAL '{PLACEHOLDER_PIPE_PATH}'" in sql

    def test_unsupported_delimiters(self, tmp_path):
        job = make_job(tmp_path, output_delimiters={"field_delimiter": "\\", "escaped_by": None})
        with pytest.raises(ConfigurationError):
            ExportRunner().build_statement(job)


@requires_fifo
class TestRunExport:
    """Test the module-level entry point."""

    def test_resolves_connector_from_job(self, tmp_path, sales_text):
        job = make_job(tmp_path, connection={"connector": "conftest.FakeConnector"})
        result = run_export(job, attempt_id="a1")

        assert result.records_written == 2
        assert result.metadata["attempt_id"] == "a1"
