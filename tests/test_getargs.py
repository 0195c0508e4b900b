from nettools.getargs import getargs


def test_plain_fields():
    assert getargs("a b\tc") == ["a", "b", "c"]


def test_leading_and_trailing_blanks():
    assert getargs("  host  02:00:00:00:00:01  ") == ["host", "02:00:00:00:00:01"]


def test_quoted_field():
    assert getargs('"hello world" x') == ["hello world", "x"]
    assert getargs("'one two'") == ["one two"]


def test_escaped_quote_kept():
    assert getargs('"a\\"b"') == ['a\\"b']


def test_quote_ends_field_without_blank():
    assert getargs("'ab'cd") == ["ab", "cd"]


def test_unterminated_quote_runs_to_end():
    assert getargs('"abc def') == ["abc def"]


def test_empty_line():
    assert getargs("") == []


def test_blank_line_gives_one_empty_field():
    assert getargs("   ") == [""]


def test_at_most_31_fields():
    words = [str(i) for i in range(40)]
    result = getargs(" ".join(words))
    assert len(result) == 31
    assert result == words[:31]