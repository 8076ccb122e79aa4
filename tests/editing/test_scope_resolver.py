"""Tests for edit ranges, content splitting and range detection."""

import pytest

from chatpatch.editing.scope_resolver import (
    EditRange,
    content_range,
    detect_edit_range,
    split_content,
)

JS_SOURCE = """\
const x = 1;
function add(a, b) {
  return a + b;
}
function sub(a, b) {
  return a - b;
}
"""

PY_SOURCE = """\
import os

def greet(name):
    return "hi " + name

def other():
    pass
"""


class TestEditRange:
    def test_from_one_based(self):
        assert EditRange.from_one_based(3, 5) == EditRange(2, 4)

    def test_insertion(self):
        r = EditRange.insertion_at(2)
        assert r == EditRange(2, 1)
        assert r.is_insertion
        assert not EditRange(2, 2).is_insertion


class TestContentRange:
    def test_excludes_final_newline(self):
        assert content_range("a\nb\n") == EditRange(0, 1)

    def test_without_final_newline(self):
        assert content_range("a\nb") == EditRange(0, 1)

    def test_empty_content(self):
        assert content_range("") == EditRange(0, 0)


class TestSplitContent:
    def test_middle_line(self):
        prefix, highlighted, suffix = split_content("a\nb\nc\n", EditRange(1, 1))
        assert (prefix, highlighted, suffix) == ("a\n", "b", "\nc\n")

    def test_parts_reassemble(self):
        content = "one\ntwo\nthree\nfour"
        for start in range(4):
            for end in range(start, 4):
                parts = split_content(content, EditRange(start, end))
                assert "".join(parts) == content

    def test_whole_file_keeps_trailing_newline(self):
        prefix, highlighted, suffix = split_content("a\nb\n", content_range("a\nb\n"))
        assert (prefix, highlighted, suffix) == ("", "a\nb", "\n")

    def test_insertion_point(self):
        prefix, highlighted, suffix = split_content("a\nb", EditRange.insertion_at(1))
        assert (prefix, highlighted, suffix) == ("a\n", "", "\nb")

    def test_insertion_at_end(self):
        prefix, highlighted, suffix = split_content("a\nb", EditRange.insertion_at(2))
        assert (prefix, highlighted, suffix) == ("a\nb\n", "", "")

    def test_range_past_end_is_clamped(self):
        prefix, highlighted, suffix = split_content("a\nb", EditRange(1, 10))
        assert (prefix, highlighted, suffix) == ("a\n", "b", "")


class TestDetectEditRange:
    def test_js_function(self):
        request = "function add(a, b) {\n  return a + b + 0;\n}"
        assert detect_edit_range(JS_SOURCE, request) == EditRange(1, 3)

    def test_python_function(self):
        request = "def greet(name):\n    return f'hello {name}'"
        assert detect_edit_range(PY_SOURCE, request) == EditRange(2, 3)

    def test_todo_marker(self):
        content = "function a() {\n  // TODO: implement\n}\n"
        assert detect_edit_range(content, "implement the loop") == EditRange(1, 1)

    def test_todo_needs_completion_wording(self):
        content = "function a() {\n  // TODO: implement\n}\n"
        assert detect_edit_range(content, "rename variables") is None

    def test_unknown_function(self):
        request = "function missing() {\n  return 1;\n}"
        assert detect_edit_range(JS_SOURCE, request) is None
