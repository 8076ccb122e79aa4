"""Tests for PatchApplier and StreamEditor."""

import pytest

from chatpatch.editing.diff_engine import DiffKind, DiffLine
from chatpatch.editing.patch_applier import (
    EditResult,
    PatchApplier,
    StreamEditor,
    edit_confidence,
    leading_indentation,
    request_lines,
    summarize,
)
from chatpatch.editing.scope_resolver import EditRange

O, N, S = DiffKind.OLD, DiffKind.NEW, DiffKind.SAME

JS_SOURCE = """\
const x = 1;
function add(a, b) {
  return a + b;
}
function sub(a, b) {
  return a - b;
}
"""


@pytest.fixture
def editor():
    return StreamEditor()


class TestSummary:
    def test_summary_format(self):
        diff = [DiffLine(S, "a"), DiffLine(O, "b"), DiffLine(N, "B"), DiffLine(N, "c")]
        assert summarize(diff) == "+2 -1 ~1 lines"

    def test_empty_summary(self):
        assert summarize([]) == "+0 -0 ~0 lines"


class TestEditConfidence:
    def test_targeted_edit(self):
        diff = [DiffLine(S, "a"), DiffLine(S, "b"), DiffLine(N, "c")]
        assert edit_confidence(diff) == 90

    def test_pure_addition(self):
        assert edit_confidence([DiffLine(N, "a")]) == 85

    def test_modification(self):
        assert edit_confidence([DiffLine(O, "a"), DiffLine(N, "b")]) == 75

    def test_pure_deletion(self):
        assert edit_confidence([DiffLine(O, "a")]) == 60
        assert edit_confidence([]) == 60


class TestHelpers:
    def test_request_lines_drops_one_trailing_newline(self):
        assert request_lines("a\nb\n") == ["a", "b"]
        assert request_lines("a\n\n") == ["a", ""]
        assert request_lines("") == []

    def test_leading_indentation(self):
        assert leading_indentation("def f():\n    x = 1\n") == "    "
        assert leading_indentation("") == ""


class TestPatchApplier:
    def test_reconstruction(self):
        diff = [DiffLine(S, "a"), DiffLine(O, "b"), DiffLine(N, "B")]
        result = PatchApplier().apply("head\n", diff, "\ntail")
        assert isinstance(result, EditResult)
        assert result.new_content == "head\na\nB\ntail"
        assert result.summary == "+1 -1 ~1 lines"

    def test_insertion_reindents_new_lines(self):
        diff = [DiffLine(N, "y = 2"), DiffLine(N, "")]
        result = PatchApplier().apply("    x = 1\n", diff, "", insertion=True)
        assert [d.text for d in result.diff_lines] == ["    y = 2", ""]


class TestApplyEdit:
    def test_whole_file_when_nothing_detected(self, editor):
        result = editor.apply_edit("a\nb\nc\n", "a\nB\nc\n")
        assert result.new_content == "a\nB\nc\n"
        assert result.summary == "+1 -1 ~2 lines"
        assert result.confidence == 75

    def test_explicit_range(self, editor):
        original = "line1\nline2\nline3\nline4"
        result = editor.apply_edit(original, "LINE2", EditRange(1, 1))
        assert result.new_content == "line1\nLINE2\nline3\nline4"
        assert result.summary == "+1 -1 ~0 lines"

    def test_detected_function_only(self, editor):
        request = "function add(a, b) {\n  return a + b + 0;\n}"
        result = editor.apply_edit(JS_SOURCE, request)
        assert result.new_content == JS_SOURCE.replace("a + b;", "a + b + 0;")
        assert "function sub(a, b) {" in result.new_content
        assert result.summary == "+1 -1 ~2 lines"

    def test_insertion_into_indented_block(self, editor):
        original = "def f():\n    x = 1\n    return x\n"
        result = editor.apply_edit(original, "y = 2\n", EditRange.insertion_at(2))
        assert result.new_content == "def f():\n    x = 1\n    y = 2\n    return x\n"
        assert result.confidence == 85

    def test_empty_request_deletes_range(self, editor):
        result = editor.apply_edit("a\nb", "", EditRange(0, 1))
        assert result.new_content == ""
        assert result.summary == "+0 -2 ~0 lines"

    def test_empty_request_deletes_middle_line(self, editor):
        result = editor.apply_edit("a\nb\nc", "", EditRange(1, 1))
        assert result.new_content == "a\nc"
        assert result.summary == "+0 -1 ~0 lines"

    def test_empty_request_deletes_last_line(self, editor):
        result = editor.apply_edit("a\nb\nc", "", EditRange(2, 2))
        assert result.new_content == "a\nb"

    def test_empty_request_keeps_trailing_newline(self, editor):
        result = editor.apply_edit("a\nb\nc\n", "", EditRange(1, 2))
        assert result.new_content == "a\n"

    def test_removed_span_between_prefix_and_suffix(self):
        diff = [DiffLine(O, "b"), DiffLine(O, "c")]
        result = PatchApplier().apply("a\n", diff, "\nd")
        assert result.new_content == "a\nd"

    def test_whitespace_only_rewrite(self, editor):
        original = "function add(a,b){\n  return a+b;\n}"
        new = "function add(a, b) {\n  return a + b;\n}"
        result = editor.apply_edit(original, new)
        assert result.new_content == new


class TestIterEdit:
    def test_streams_against_whole_file(self, editor):
        diff = list(editor.iter_edit("a\nb\n", iter(["a", "x", "b"])))
        assert diff == [DiffLine(S, "a"), DiffLine(N, "x"), DiffLine(S, "b")]

    def test_streams_insertion_with_indentation(self, editor):
        original = "if ok:\n    run()\n"
        diff = list(editor.iter_edit(original, ["log()"], EditRange.insertion_at(2)))
        assert diff == [DiffLine(N, "    log()")]
