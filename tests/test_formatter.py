"""Tests for dataentry.core.formatter."""

from __future__ import annotations

import logging

import pytest

from dataentry.core.formatter import (
    NAMED_TRANSFORMS,
    escape_control,
    escape_html_attr,
    escape_replacement,
    format_entry,
)


class TestIdentity:
    @pytest.mark.parametrize("spec", ["*", "", "unknownTransform", "plain text"])
    def test_unrecognised_spec_returns_raw(self, spec):
        assert format_entry("abc 123", spec) == "abc 123"

    def test_none_spec_is_default(self):
        assert format_entry("abc", None) == "abc"


class TestSubstitution:
    def test_replace_first(self):
        assert format_entry("a-b-c", "/-/_/") == "a_b-c"

    def test_replace_global(self):
        assert format_entry("a-b-c", "/-/_/g") == "a_b_c"

    def test_group_reference(self):
        assert format_entry("1234", r"/(\d\d)(\d\d)/\2:\1/") == "34:12"

    def test_ignore_case(self):
        assert format_entry("ABC", "/b/x/i") == "AxC"

    def test_escaped_slash_in_replacement(self):
        assert format_entry("12", r"/(\d)(\d)/\1\/\2/") == "1/2"

    def test_empty_replacement_deletes(self):
        assert format_entry("0012", "/^0+//") == "12"

    def test_dollar_group_reference(self):
        assert format_entry("1234", r"/(\d\d)(\d\d)/$2:$1/") == "34:12"

    def test_dollar_whole_match(self):
        assert format_entry("42", "/\\d+/[$&]/") == "[42]"

    def test_dollar_named_group(self):
        assert format_entry("ab", r"/(?P<first>a)/$<first>$<first>/") == "aab"

    def test_double_dollar_is_literal(self):
        assert format_entry("5", "/5/$$5/") == "$5"

    def test_no_match_returns_raw(self):
        assert format_entry("abc", "/x/y/") == "abc"

    def test_invalid_find_returns_raw(self, caplog):
        with caplog.at_level(logging.ERROR, logger="dataentry.core.formatter"):
            assert format_entry("abc", "/(/x/") == "abc"
        assert "Regex formatting failed" in caplog.text

    def test_bad_group_reference_returns_raw(self, caplog):
        with caplog.at_level(logging.ERROR, logger="dataentry.core.formatter"):
            assert format_entry("abc", r"/b/\3/") == "abc"
        assert "Regex formatting failed" in caplog.text


class TestPrintf:
    def test_zero_padded_integer(self):
        assert format_entry("42", "%05d") == "00042"

    def test_float_precision(self):
        assert format_entry("3.14159", "%.2f") == "3.14"

    def test_string_with_surrounding_text(self):
        assert format_entry("abc", "[%s]") == "[abc]"

    def test_integer_from_decimal_text(self):
        assert format_entry("7.9", "%d") == "7"

    @pytest.mark.parametrize("raw", [
        "9780306406157123",
        "12345678901234567",
        "123456789012345678",
        "12345678901234567890",
    ])
    def test_long_codes_keep_every_digit(self, raw):
        assert format_entry(raw, "%d") == raw
        assert format_entry(raw, "%020d") == raw.zfill(20)

    def test_long_code_with_surrounding_whitespace(self):
        assert format_entry(" 9780306406157123 ", "%d") == "9780306406157123"

    def test_hex(self):
        assert format_entry("255", "0x%04X") == "0x00FF"

    def test_literal_percent_only(self):
        assert format_entry("abc", "100%%") == "100%"

    def test_non_numeric_for_integer_returns_raw(self, caplog):
        with caplog.at_level(logging.ERROR, logger="dataentry.core.formatter"):
            assert format_entry("abc", "%d") == "abc"
        assert "Printf formatting" in caplog.text

    def test_two_arguments_returns_raw(self):
        assert format_entry("5", "%s-%s") == "5"

    def test_empty_raw_for_float_returns_raw(self):
        assert format_entry("", "%.1f") == ""


class TestNamedTransforms:
    def test_shell_arg(self):
        assert format_entry("it's", "shellArg") == "'it'\"'\"'s'"

    def test_shell_arg_safe_text_unquoted(self):
        assert format_entry("abc123", "shellArg") == "abc123"

    def test_regexp(self):
        assert format_entry("a.b*c", "regExp") == r"a\.b\*c"

    def test_regexp_replacement(self):
        assert format_entry(r"a\1", "regExpReplacement") == r"a\\1"

    def test_html(self):
        assert format_entry('<a href="x">&</a>', "html") == '&lt;a href="x"&gt;&amp;&lt;/a&gt;'

    def test_html_attr(self):
        assert format_entry('"<b>"', "htmlAttr") == "&quot;&lt;b&gt;&quot;"

    def test_html_special_chars(self):
        assert format_entry("<'\">", "htmlSpecialChars") == "&lt;&#x27;&quot;&gt;"

    def test_control(self):
        assert format_entry("a\tb\nc\x1b", "control") == "a\\tb\\nc\\x1b"

    def test_all_names_registered(self):
        assert set(NAMED_TRANSFORMS) == {
            "shellArg", "regExp", "regExpReplacement",
            "html", "htmlAttr", "htmlSpecialChars", "control",
        }


class TestEscapeHelpers:
    def test_escape_control_leaves_printable(self):
        assert escape_control("plain text") == "plain text"

    def test_escape_control_delete_char(self):
        assert escape_control("\x7f") == "\\x7f"

    def test_escape_replacement_roundtrips_through_sub(self):
        import re
        assert re.sub("x", escape_replacement(r"\g<0>\n"), "x") == r"\g<0>\n"

    def test_escaped_value_is_literal_in_substitution(self):
        value = r"$1 \1 $&"
        assert format_entry("x", "/x/" + escape_replacement(value) + "/") == value

    def test_escape_html_attr_single_quote_untouched(self):
        assert escape_html_attr("'") == "'"


def test_substitution_takes_precedence_over_printf():
    assert format_entry("5", "/5/%d/") == "%d"
