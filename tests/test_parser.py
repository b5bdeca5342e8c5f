from salesboard.parser import decode_csv_bytes, parse_csv


def test_quoted_field_keeps_embedded_comma():
    assert parse_csv('"Acme, Inc.",North,100') == [["Acme, Inc.", "North", "100"]]


def test_doubled_quote_is_literal_quote():
    rows = parse_csv('"She said ""hi""",East,50')
    assert rows[0][0] == 'She said "hi"'
    assert len(rows[0]) == 3


def test_bom_is_stripped():
    rows = parse_csv("\ufeffproduct,sales\nA,1\n")
    assert rows == [["product", "sales"], ["A", "1"]]


def test_all_line_endings_split_rows():
    assert parse_csv("a,b\r\nc,d\re,f\ng,h") == [["a", "b"], ["c", "d"], ["e", "f"], ["g", "h"]]


def test_quoted_field_may_span_lines():
    assert parse_csv('a,"x\r\ny"\nb,z\n') == [["a", "x\ny"], ["b", "z"]]


def test_blank_rows_are_dropped():
    assert parse_csv("a,b\n\n , \n,\nc,d\n") == [["a", "b"], ["c", "d"]]


def test_last_row_without_newline_is_flushed():
    assert parse_csv("a,b\nc,") == [["a", "b"], ["c", ""]]


def test_short_rows_keep_their_length():
    assert parse_csv("a,b,c\nx\n") == [["a", "b", "c"], ["x"]]


def test_unterminated_quote_swallows_rest_of_input():
    assert parse_csv('a,"bc\nd') == [["a", "bc\nd"]]


def test_empty_text_gives_no_rows():
    assert parse_csv("") == []
    assert parse_csv("\n\r\n") == []


def test_decode_utf8_with_bom():
    text, encoding = decode_csv_bytes("product,sales\nA,1\n".encode("utf-8-sig"))
    assert encoding == "utf-8-sig"
    assert text.startswith("product")


def test_decode_latin1():
    text, _ = decode_csv_bytes("name,city\nPaul,Montréal\n".encode("latin-1"))
    assert "Montréal" in text
