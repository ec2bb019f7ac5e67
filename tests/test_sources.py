"""Tests for record sources."""

from datetime import datetime
from decimal import Decimal

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from pipeload.exceptions import RecordParseError, ResourceError
from pipeload.models.delimiters import DelimiterSet
from pipeload.models.job import InputConfig
from pipeload.sources import DelimitedTextSource, ParquetSource, open_source


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "sales.txt"
    path.write_bytes(b"1|meep\\|beep\n2|null\n3|cr\rhere\n")
    return path


@pytest.fixture
def parquet_file(tmp_path):
    path = tmp_path / "sales.parquet"
    table = pa.table(
        {
            "id": pa.array([1, 2, 3], type=pa.int64()),
            "amount": pa.array([Decimal("1.10"), None, Decimal("3.00")], type=pa.decimal128(10, 2)),
            "sold_at": pa.array([datetime(2024, 1, 2, 3, 4, 5)] * 3, type=pa.timestamp("us")),
            "paid": pa.array([True, False, None]),
        }
    )
    pq.write_table(table, path)
    return path


class TestDelimitedTextSource:
    """Test reading delimited text."""

    def test_reads_records(self, text_file):
        source = DelimitedTextSource(text_file, DelimiterSet(field_delimiter="|"))

        assert list(source) == [["1", "meep|beep"], ["2", None], ["3", "cr\rhere"]]
        assert source.records_read == 3

    def test_named_columns(self, text_file):
        source = DelimitedTextSource(text_file, DelimiterSet(field_delimiter="|"), columns=["id", "name"])
        assert next(iter(source)) == {"id": "1", "name": "meep|beep"}

    def test_last_record_without_delimiter(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_text("a,b\nc,d")
        assert list(DelimitedTextSource(path)) == [["a", "b"], ["c", "d"]]

    def test_field_count_mismatch(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_text("a,b\nc\n")
        source = DelimitedTextSource(path, columns=["x", "y"])
        with pytest.raises(RecordParseError, match="record 2"):
            list(source)

    def test_dangling_escape(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_text("a,b\nc\\")
        with pytest.raises(RecordParseError, match="record 2"):
            list(DelimitedTextSource(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceError):
            list(DelimitedTextSource(tmp_path / "nope.txt"))


class TestParquetSource:
    """Test reading Parquet."""

    def test_typed_records(self, parquet_file):
        source = ParquetSource(parquet_file)
        records = list(source)

        assert records[0] == {
            "id": 1,
            "amount": Decimal("1.10"),
            "sold_at": datetime(2024, 1, 2, 3, 4, 5),
            "paid": True,
        }
        assert records[1]["amount"] is None
        assert source.records_read == 3

    def test_column_subset_and_batches(self, parquet_file):
        source = ParquetSource(parquet_file, columns=["paid", "id"], batch_size=1)
        assert [r["id"] for r in source] == [1, 2, 3]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceError):
            list(ParquetSource(tmp_path / "nope.parquet"))


class TestOpenSource:
    """Test source selection."""

    def test_text(self, text_file):
        source = open_source(InputConfig(path=str(text_file), delimiters={"field_delimiter": "|"}))
        assert isinstance(source, DelimitedTextSource)
        assert source.delimiters.field_delimiter == "|"

    def test_parquet(self, parquet_file):
        source = open_source(InputConfig(path=str(parquet_file), format="parquet", batch_size=2))
        assert isinstance(source, ParquetSource)
        assert source.batch_size == 2
