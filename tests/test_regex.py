"""Tests for dataentry.core.regex — /pattern/flags matchers."""

from __future__ import annotations

import logging
import re

import pytest

from dataentry.core.regex import NEVER_MATCH, build_regex, compile_pattern


class TestBuildRegex:
    def test_plain_pattern(self):
        m = build_regex("/^\\d{4}$/")
        assert m.test("1234")
        assert not m.test("123")

    def test_ignore_case_flag(self):
        m = build_regex("/abc/i")
        assert m.test("xxABCxx")

    def test_without_flag_is_case_sensitive(self):
        assert not build_regex("/abc/").test("ABC")

    def test_multiple_flags(self):
        m = build_regex("/^b$/gim")
        assert m.is_global
        assert m.test("a\nB\nc")

    def test_sticky_flag_anchors_at_start(self):
        m = build_regex("/b/y")
        assert m.sticky
        assert not m.test("ab")
        assert m.test("ba")

    def test_unicode_and_indices_flags_accepted(self):
        assert build_regex("/x/ud").test("x")

    def test_default_enter_regex_matches_anything(self):
        m = build_regex("/.*/i")
        assert m.test("")
        assert m.test("anything")

    @pytest.mark.parametrize("text", ["abc", "/abc", "abc/", "//", "/abc/q", "", None])
    def test_wrong_shape_never_matches(self, text, caplog):
        with caplog.at_level(logging.WARNING, logger="dataentry.core.regex"):
            m = build_regex(text)
        assert m is NEVER_MATCH
        assert not m.test("abc")
        assert not m.test("")
        assert "Not a regular expression" in caplog.text

    def test_invalid_pattern_never_matches_and_logs(self, caplog):
        with caplog.at_level(logging.ERROR, logger="dataentry.core.regex"):
            m = build_regex("/(unclosed/")
        assert m is NEVER_MATCH
        assert 'Cannot compile regular expression from "/(unclosed/"' in caplog.text

    def test_never_match_rejects_empty_string(self):
        assert not NEVER_MATCH.test("")


class TestCompilePattern:
    def test_invalid_raises(self):
        with pytest.raises(re.error):
            compile_pattern("[", "")

    def test_unknown_flag_raises(self):
        with pytest.raises(ValueError):
            compile_pattern("a", "x")


class TestMatcherSub:
    def test_first_match_only_without_global(self):
        assert build_regex("/a/").sub("b", "aaa") == "baa"

    def test_all_matches_with_global(self):
        assert build_regex("/a/g").sub("b", "aaa") == "bbb"

    def test_sticky_replaces_only_at_start(self):
        m = build_regex("/a/y")
        assert m.sub("b", "aXa") == "bXa"
        assert m.sub("b", "Xa") == "Xa"
