import json

import pytest

from klog.serialize import (
    MISSING_VALUE,
    Formatter,
    error_to_string,
    kv_format,
    kv_list_format,
    marshaler_to_value,
    merge_and_format_kvs,
    merge_kvs,
    stringer_to_string,
    with_values,
)


class _Stringer:
    def __init__(self, text):
        self.text = text

    def __str__(self):
        return self.text


class _BrokenStringer:
    def __str__(self):
        raise RuntimeError("boom")


class _Marshaler:
    def __init__(self, value):
        self.value = value

    def marshal_log(self):
        return self.value


class _BrokenMarshaler:
    def marshal_log(self):
        raise RuntimeError("boom")


class _TextWriter:
    def write_text(self, out):
        out.write('"x"')


class _BrokenTextWriter:
    def write_text(self, out):
        raise RuntimeError("boom")


class _BrokenError(Exception):
    def __str__(self):
        raise RuntimeError("boom")


def test_with_values_without_new_returns_old():
    old = ["a", 1]
    assert with_values(old, []) is old


def test_with_values_appends_into_new_list():
    old = ["a", 1]
    result = with_values(old, ["b", 2])
    assert result == ["a", 1, "b", 2]
    assert old == ["a", 1]


def test_with_values_pads_missing_value():
    assert with_values(["a", 1], ["b"]) == ["a", 1, "b", MISSING_VALUE]
    assert MISSING_VALUE == "(MISSING)"


def test_merge_kvs_empty():
    assert merge_kvs([], []) == []


def test_merge_kvs_second_only():
    assert merge_kvs([], ["a", 1]) == ["a", 1]


def test_merge_kvs_override():
    assert merge_kvs(["a", 1, "b", 2], ["b", 3]) == ["a", 1, "b", 3]


def test_merge_kvs_odd_second_padded():
    assert merge_kvs(["a", 1], ["b"]) == ["a", 1, "b", MISSING_VALUE]
    assert merge_kvs([], ["b"]) == ["b", MISSING_VALUE]


def test_merge_kvs_keys_of_different_types_are_distinct():
    assert merge_kvs(["1", "x"], [1, "y"]) == ["1", "x", 1, "y"]


def test_kv_format_plain_string():
    assert kv_format("key", "value") == ' key="value"'


def test_kv_format_escapes_quotes_and_controls():
    result = kv_format("k", 'say "hi"\t')
    assert '\\"hi\\"' in result
    assert "\\t" in result
    assert "\t" not in result


def test_kv_format_non_ascii_string_kept():
    assert kv_format("s", "é") == ' s="é"'


def test_kv_format_multiline_without_trailing_newline():
    result = kv_format("k", "line one\nline two")
    assert result.startswith(" k=<\n")
    assert result.endswith("\n >")
    body = result.split("\n")[1:-1]
    assert body == ["\tline one", "\tline two"]


def test_kv_format_multiline_with_trailing_newline():
    result = kv_format("k", "only\n")
    assert result.endswith("\n >")
    assert result.split("\n")[1:-1] == ["\tonly"]


def test_kv_format_int_uses_json():
    assert kv_format("n", 42) == " n=42"


def test_kv_format_dict_sorted_json():
    result = kv_format("m", {"b": 1, "a": 2})
    assert result.startswith(" m=")
    payload = result[len(" m="):]
    assert json.loads(payload) == {"a": 2, "b": 1}
    assert payload.index('"a"') < payload.index('"b"')


def test_kv_format_json_escapes_html():
    result = kv_format("l", ["<tag>&"])
    payload = result[len(" l="):]
    assert "<" not in payload and "&" not in payload
    assert json.loads(payload) == ["<tag>&"]


def test_kv_format_unencodable_value():
    result = kv_format("o", object())
    assert result.startswith(' o="<internal error:')


def test_kv_format_bytes_printable():
    assert kv_format("b", b"hi") == ' b="hi"'


def test_kv_format_bytes_escapes_non_printable_and_non_ascii():
    result = kv_format("b", b"\xff\x01" + "é".encode())
    assert "\\xff" in result
    assert "\\x01" in result
    assert "\\u00e9" in result


def test_kv_format_stringer():
    assert kv_format("s", _Stringer("hello")) == kv_format("s", "hello")


def test_kv_format_error():
    assert kv_format("err", ValueError("bad")) == kv_format("err", "bad")


def test_kv_format_marshaler_returning_string():
    assert kv_format("m", _Marshaler("a\nb")) == kv_format("m", "a\nb")


def test_kv_format_marshaler_returning_structure():
    result = kv_format("m", _Marshaler({"x": [1, 2]}))
    assert json.loads(result[len(" m="):]) == {"x": [1, 2]}


def test_kv_format_text_writer():
    assert kv_format("k", _TextWriter()) == ' k="x"'


def test_kv_format_text_writer_failure():
    result = kv_format("k", _BrokenTextWriter())
    assert result.startswith(" k=")
    assert '"<panic: boom>"' in result


def test_kv_format_non_string_key():
    assert kv_format(1, "v").startswith(" 1=")


def test_formatter_hook_for_non_strings():
    fmt = Formatter(any_to_string_hook=lambda v: "HOOK")
    assert fmt.kv_format("k", [1]) == " k=HOOK"
    assert fmt.kv_format("k", "text") == kv_format("k", "text")


def test_stringer_to_string_failure():
    assert stringer_to_string(_BrokenStringer()) == "<panic: boom>"
    assert stringer_to_string(_Stringer("ok")) == "ok"


def test_marshaler_to_value_failure():
    assert marshaler_to_value(_BrokenMarshaler()) == "<panic: boom>"
    assert marshaler_to_value(_Marshaler([3])) == [3]


def test_error_to_string_failure():
    assert error_to_string(_BrokenError()) == "<panic: boom>"
    assert error_to_string(KeyError("k")) == str(KeyError("k"))


def test_kv_list_format_matches_pairwise():
    args = ("a", 1, "b", "two")
    assert kv_list_format(*args) == kv_format("a", 1) + kv_format("b", "two")


def test_kv_list_format_odd_adds_missing():
    assert kv_list_format("a", 1, "b") == kv_format("a", 1) + kv_format(
        "b", MISSING_VALUE
    )


def test_kv_list_format_empty():
    assert kv_list_format() == ""


@pytest.mark.parametrize(
    "first, second",
    [
        ([], []),
        ([], ["a", 1]),
        ([], ["a"]),
        (["a", 1], []),
        (["a", 1, "b", 2], ["b", 3]),
        (["a", 1], ["b"]),
        (["a", 1, "b", 2], ["a", 5, "c"]),
    ],
)
def test_merge_and_format_matches_merge_then_format(first, second):
    assert merge_and_format_kvs(first, second) == kv_list_format(
        *merge_kvs(first, second)
    )