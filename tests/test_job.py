"""Tests for job models and YAML loading."""

import textwrap

import pytest
from pydantic import ValidationError as PydanticValidationError

from pipeload.exceptions import ValidationError
from pipeload.models.delimiters import DelimiterSet
from pipeload.models.job import ConnectionConfig, ExportJob, InputConfig
from pipeload.utils.yaml_parser import load_job, load_yaml, substitute_env_vars

JOB_YAML = """
version: 1
name: daily_sales
description: Nightly sales load
connection:
  connection: jdbc:netezza://${NZ_HOST}:5480/sales
  user: admin
  password: ${NZ_PASSWORD:-changeme}
table: SALES
columns: [id, name]
input:
  path: sales.txt
  delimiters:
    field_delimiter: "|"
output_delimiters:
  field_delimiter: "\\t"
  enclosed_by: '"'
load_options:
  null_value: "\\\\N"
"""


@pytest.fixture
def job_file(tmp_path, monkeypatch):
    monkeypatch.setenv("NZ_HOST", "nz-host")
    monkeypatch.delenv("NZ_PASSWORD", raising=False)
    path = tmp_path / "daily_sales.yaml"
    path.write_text(JOB_YAML)
    return path


def make_job(**overrides):
    data = {
        "name": "daily_sales",
        "connection": {"connection": "netezza+nzpy://admin:pw@nz-host/sales"},
        "table": "SALES",
        "input": {"path": "sales.txt"},
    }
    data.update(overrides)
    return ExportJob(**data)


class TestEnvSubstitution:
    """Test ${VAR} substitution."""

    def test_nested(self, monkeypatch):
        monkeypatch.setenv("NZ_HOST", "nz-host")
        data = {"a": ["${NZ_HOST}", {"b": "x-${NZ_HOST}-y"}], "c": 5}
        assert substitute_env_vars(data) == {"a": ["nz-host", {"b": "x-nz-host-y"}], "c": 5}

    def test_default(self, monkeypatch):
        monkeypatch.delenv("NZ_MISSING", raising=False)
        assert substitute_env_vars("${NZ_MISSING:-fallback}") == "fallback"
        assert substitute_env_vars("${NZ_MISSING:-}") == ""

    def test_empty_value_is_kept(self, monkeypatch):
        monkeypatch.setenv("NZ_EMPTY", "")
        assert substitute_env_vars("[${NZ_EMPTY}]") == "[]"

    def test_missing_without_default(self, monkeypatch):
        monkeypatch.delenv("NZ_MISSING", raising=False)
        with pytest.raises(ValidationError, match="NZ_MISSING"):
            substitute_env_vars("${NZ_MISSING}")


class TestLoadJob:
    """Test loading jobs from YAML."""

    def test_load_job(self, job_file):
        job = load_job(job_file)

        assert job.name == "daily_sales"
        assert job.table == "SALES"
        assert job.columns == ["id", "name"]
        assert job.connection.connection == "jdbc:netezza://nz-host:5480/sales"
        assert job.connection.options() == {"user": "admin", "password": "changeme"}
        assert job.input.delimiters.field_delimiter == "|"
        assert job.output_delimiters.field_delimiter == "\t"
        assert job.output_delimiters.enclosed_by == '"'
        assert job.load_options.null_value == "\\N"

    def test_load_from_yaml(self, job_file):
        assert ExportJob.load_from_yaml(job_file).name == "daily_sales"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="not found"):
            load_yaml(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValidationError, match="Empty"):
            load_yaml(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed")
        with pytest.raises(ValidationError, match="Invalid YAML"):
            load_yaml(path)

    def test_invalid_job(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(textwrap.dedent("""
            name: daily_sales
            table: SALES
            input:
              path: sales.txt
        """))
        with pytest.raises(ValidationError, match="Invalid job"):
            load_job(path)


class TestExportJob:
    """Test ExportJob validation."""

    def test_defaults(self):
        job = make_job()
        assert job.version == 1
        assert job.output_delimiters == DelimiterSet()
        assert job.load_options.remote_source == "python"
        assert job.input.format == "text"
        assert job.columns is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"version": 2},
            {"name": "a/b"},
            {"name": ".."},
            {"table": "  "},
            {"columns": ["id", "id"]},
            {"unexpected": True},
            {"input": {"path": "x", "format": "xlsx"}},
            {"output_delimiters": {"field_delimiter": ",", "record_delimiter": ","}},
        ],
    )
    def test_invalid(self, overrides):
        with pytest.raises(PydanticValidationError):
            make_job(**overrides)

    def test_connection_needs_target(self):
        with pytest.raises(PydanticValidationError):
            ConnectionConfig(user="admin")
        assert ConnectionConfig(connector="my.module.Connector").connection is None

    def test_input_batch_size_positive(self):
        with pytest.raises(PydanticValidationError):
            InputConfig(path="x.parquet", format="parquet", batch_size=0)
