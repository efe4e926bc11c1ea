"""CSV and JSON import/export"""
import io

import pytest
from py_table import Cell, Slice, Table, read_csv, read_json
from py_table.errors import ParseError, WidthMismatchError


class TestEndToEnd:

    def test_worked_example(self):
        t = Table.from_json('[["a","b","c"],["1","2","3"]]')
        t.push_row(Slice(["4", "5", "6"]))
        total = t.row(1) + t.row(2)
        assert total.tokens() == ["5", "7", "9"]
        t.push_row(total)
        t.cell(3, 2).mul_value(2)
        assert t.get(3, 2) == Cell(18)
        assert t.to_csv() == "a,b,c\n1,2,3\n4,5,6\n5,7,18\n"

    def test_same_example_from_csv(self):
        t = Table.from_csv("a,b,c\n1,2,3\n")
        t.push_row(t.row(1) + ["4", "5", "6"])
        assert t.to_csv() == "a,b,c\n1,2,3\n5,7,9\n"


class TestCsvWrite:

    @pytest.mark.parametrize("value,field", [
        ("plain", "plain"),
        ("a,b", '"a,b"'),
        ('say "hi"', '"say ""hi"""'),
        ("two\nlines", '"two\nlines"'),
        ("cr\rhere", '"cr\rhere"'),
        (" padded ", " padded "),
        ("", ""),
    ])
    def test_minimal_quoting(self, value, field):
        t = Table([["x", value]])
        assert t.to_csv() == f"x,{field}\n"

    def test_numbers_keep_scale(self):
        t = Table([["1.50", "12,345", "-0.25"]])
        assert t.to_csv() == "1.50,12345,-0.25\n"

    def test_headers_first(self):
        t = Table([[1, 2]], headers=["Unit Price", "q,ty"])
        assert t.to_csv() == 'Unit Price,"q,ty"\n1,2\n'

    def test_write_to_sink(self):
        t = Table([[1, "a"]])
        sink = io.StringIO()
        t.write_csv(sink)
        assert sink.getvalue() == "1,a\n"

    def test_empty_table(self):
        assert Table().to_csv() == ""

    def test_rows_without_columns_rejected(self):
        t = Table.from_grid([[], []])
        sink = io.StringIO()
        with pytest.raises(WidthMismatchError):
            t.write_csv(sink)
        assert sink.getvalue() == ""


class TestCsvRead:

    def test_basic(self):
        t = Table.from_csv("x,y\n1,abc\n")
        assert t.size() == (2, 2)
        assert t.get(1, 0) == Cell(1)
        assert t.get(1, 1) == Cell("abc")

    def test_quoted_fields(self):
        t = Table.from_csv('"a,b","say ""hi""","two\nlines"\n')
        assert t.row(0).tokens() == ["a,b", 'say "hi"', "two\nlines"]

    def test_crlf_and_missing_final_newline(self):
        t = Table.from_csv("1,2\r\n3,4")
        assert t.size() == (2, 2)
        assert t.get(1, 1) == Cell(4)

    def test_blank_line_is_one_empty_field(self):
        t = Table.from_csv("1\n\n3\n")
        assert t.size() == (3, 1)
        assert t.get(1, 0).is_empty()

    def test_empty_fields(self):
        t = Table.from_csv("1,,3\n")
        assert t.get(0, 1).is_empty()

    def test_header_flag(self):
        t = Table.from_csv("name,qty\nbolt,10\n", header=True)
        assert t.headers == ("name", "qty")
        assert t.qty.tokens() == ["10"]

    def test_bytes_input(self):
        t = Table.from_csv("naïve,1\n".encode("utf-8"))
        assert t.get(0, 0) == Cell("naïve")

    @pytest.mark.parametrize("data", [b"a,\xff\xfe\n", bytearray(b"\xc3(")])
    def test_invalid_utf8(self, data):
        with pytest.raises(ParseError):
            Table.from_csv(data)

    def test_empty_input(self):
        assert Table.from_csv("").size() == (0, 0)

    @pytest.mark.parametrize("text", ['"abc', '"ab"c,d\n'])
    def test_malformed_quoting(self, text):
        with pytest.raises(ParseError):
            Table.from_csv(text)

    def test_ragged_reports_line(self):
        with pytest.raises(ParseError) as excinfo:
            Table.from_csv("a,b\nc\n")
        assert excinfo.value.line == 2

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            Table.from_csv("a,b\nc\n")

    def test_round_trip(self):
        grid = [["id", "note", "amount"], ["1", 'a "b", c', "-1,234.50"], ["2", "", "x\ny"]]
        t = Table.from_grid(grid)
        assert Table.from_csv(t.to_csv()) == t


class TestJson:

    def test_read(self):
        t = Table.from_json('[["a", 1.50, null], ["2", true, [1, 2]]]')
        assert t.row(0).tokens() == ["a", "1.50", ""]
        assert t.get(1, 0) == Cell(2)
        assert t.get(1, 1) == Cell("true")
        assert t.get(1, 2) == Cell("[1,2]")

    def test_write(self):
        t = Table([["a", "1.50", ""], ["x\"y", "-3", "7"]])
        assert t.to_json() == '[["a",1.50,null],["x\\"y",-3,7]]'

    def test_write_with_headers(self):
        t = Table([[1]], headers=["n"])
        assert t.to_json() == '[["n"],[1]]'
        sink = io.StringIO()
        t.write_json(sink)
        assert sink.getvalue() == '[["n"],[1]]'

    def test_header_flag(self):
        t = Table.from_json('[["x", "y"], [1, 2]]', header=True)
        assert t.headers == ("x", "y")
        assert t.size() == (1, 2)

    def test_round_trip(self):
        t = Table([["a", "1.000", ""], ["0.1", "b", "-7"]])
        assert Table.from_json(t.to_json()) == t

    def test_exact_decimals(self):
        text = '[[0.1000000000000000000000000000001]]'
        assert Table.from_json(text).to_json() == text

    def test_deeply_nested_value_kept_as_text(self):
        depth = 700
        nested = "[" * depth + "]" * depth
        t = Table.from_json("[[" + nested + "]]")
        assert t.size() == (1, 1)
        assert t.get(0, 0) == Cell(nested)

    def test_nested_object_kept_as_text(self):
        t = Table.from_json('[[{"k": [1.50, null, {"x": true}]}]]')
        assert str(t.get(0, 0)) == '{"k":[1.50,null,{"x":true}]}'

    def test_invalid_utf8(self):
        with pytest.raises(ParseError):
            Table.from_json(b'[["\xff"]]')
        with pytest.raises(ParseError):
            Table.try_from(b'[["\xff"]]')

    def test_empty_array(self):
        assert Table.from_json("[]").size() == (0, 0)

    @pytest.mark.parametrize("text", [
        '{"a": 1}',
        '[1, 2]',
        '[[1, 2], [3]]',
        '[[NaN]]',
        '[[1, 2]',
        '"abc"',
    ])
    def test_malformed(self, text):
        with pytest.raises(ParseError):
            Table.from_json(text)

    def test_syntax_error_reports_line(self):
        with pytest.raises(ParseError) as excinfo:
            Table.from_json('[\n[1,\n2 3]]')
        assert excinfo.value.line == 3


class TestTryFrom:

    def test_formats(self):
        assert Table.try_from('[["1"]]') == Table([[1]])
        assert Table.try_from("1\n", format="csv") == Table([[1]])

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            Table.try_from("1", format="xml")

    def test_module_helpers(self):
        assert read_csv("a\n1\n", header=True).headers == ("a",)
        assert read_json('[["a"], [1]]', header=True).a.tokens() == ["1"]
