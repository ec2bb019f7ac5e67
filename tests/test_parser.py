"""Tests for delimited text parsing."""

import pytest

from pipeload.core.encoder import RecordEncoder
from pipeload.core.parser import DelimitedTextParser, decode
from pipeload.exceptions import RecordParseError
from pipeload.models.delimiters import DelimiterSet
from pipeload.operators.netezza.dialect import NetezzaDialect


class TestRoundTrip:
    """Encoded records decode back to the original values."""

    @pytest.mark.parametrize(
        "delims",
        [
            DelimiterSet(),
            DelimiterSet(field_delimiter="|", record_delimiter=";"),
            DelimiterSet(field_delimiter="\t"),
        ],
    )
    def test_tricky_values_survive(self, delims):
        values = ["1", "meep,beep", "line\nbreak", "back\\slash", "cr\rhere", "pipe|semi;tab\t", "", None]
        encoder = RecordEncoder(NetezzaDialect())
        data = encoder.encode(values, delims)

        assert decode(data, encoder.effective_delimiters(delims)) == values


class TestDelimitedTextParser:
    """Test the incremental parser."""

    def test_parse_escaped_and_null(self):
        parser = DelimitedTextParser(DelimiterSet())
        assert parser.parse("1,meep\\,beep\n") == ["1", "meep,beep"]
        assert parser.parse("2,null") == ["2", None]

    def test_null_token_disabled(self):
        parser = DelimitedTextParser(DelimiterSet(), null_token=None)
        assert parser.parse("null,x") == ["null", "x"]

    def test_enclosed_fields(self):
        parser = DelimitedTextParser(DelimiterSet(enclosed_by='"'))
        assert parser.parse('"a,b","null",c\n') == ["a,b", "null", "c"]

    def test_enclosed_record_delimiter(self):
        parser = DelimitedTextParser(DelimiterSet(enclosed_by='"'))
        records = list(parser.parse_stream(['"multi\nline",x\n', "y,z\n"]))
        assert records == [["multi\nline", "x"], ["y", "z"]]

    def test_records_split_across_chunks(self):
        parser = DelimitedTextParser(DelimiterSet())
        chunks = ["1,a", "b\\", ",c\n2,", "d\n3,e"]
        assert list(parser.parse_stream(chunks)) == [["1", "ab,c"], ["2", "d"], ["3", "e"]]

    def test_empty_fields(self):
        parser = DelimitedTextParser(DelimiterSet())
        assert parser.parse(",,\n") == ["", "", ""]

    def test_dangling_escape(self):
        parser = DelimitedTextParser(DelimiterSet())
        parser.feed("1,abc\\")
        with pytest.raises(RecordParseError, match="escape"):
            parser.finish()

    def test_unterminated_enclosure(self):
        parser = DelimitedTextParser(DelimiterSet(enclosed_by='"'))
        parser.feed('1,"abc')
        with pytest.raises(RecordParseError, match="enclosed"):
            parser.finish()

    def test_parse_requires_exactly_one_record(self):
        parser = DelimitedTextParser(DelimiterSet())
        with pytest.raises(RecordParseError):
            parser.parse("1\n2\n")

    def test_finish_without_pending_text(self):
        parser = DelimitedTextParser(DelimiterSet())
        assert parser.feed("1,2\n") == [["1", "2"]]
        assert parser.finish() is None
