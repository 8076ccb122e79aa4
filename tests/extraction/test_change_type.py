"""Tests for change-type resolution and FileChangeCandidate."""

from unittest.mock import MagicMock

import pytest

from chatpatch.extraction.change_type import (
    ChangeType,
    ChangeTypeResolver,
    FileChangeCandidate,
    LineRange,
    extract_line_range,
)
from chatpatch.extraction.fragment_extractor import CodeFragment, FragmentExtractor


def _store(exists: bool) -> MagicMock:
    store = MagicMock()
    store.exists.return_value = exists
    return store


def _first_fragment(text: str) -> CodeFragment:
    return FragmentExtractor().extract(text)[0]


class TestChangeTypeResolver:
    def test_missing_file_is_create(self):
        text = "Create util.js:\n```js\nfunction util() { return 1; }\n```"
        frag = _first_fragment(text)
        store = _store(False)
        assert ChangeTypeResolver(store).resolve("util.js", frag, text) is ChangeType.CREATE
        store.exists.assert_called_once_with("util.js")

    def test_existing_file_is_update(self):
        text = "Update utils.js:\n```js\nfunction remove(x) { return x; }\n```"
        frag = _first_fragment(text)
        resolver = ChangeTypeResolver(_store(True))
        assert resolver.resolve("utils.js", frag, text) is ChangeType.UPDATE

    def test_remove_in_context_is_delete(self):
        text = "Remove the old helper from utils.js:\n```js\nfunction helper() { return 1; }\n```"
        frag = _first_fragment(text)
        resolver = ChangeTypeResolver(_store(True))
        assert resolver.resolve("utils.js", frag, text) is ChangeType.DELETE

    def test_delete_after_fragment(self):
        text = "```js\nfunction helper() { return 1; }\n```\nThen delete this file."
        frag = _first_fragment(text)
        resolver = ChangeTypeResolver(_store(True))
        assert resolver.resolve("helper.js", frag, text) is ChangeType.DELETE

    def test_delete_word_ignored_for_missing_file(self):
        text = "Remove nothing, just add:\n```js\nfunction helper() { return 1; }\n```"
        frag = _first_fragment(text)
        resolver = ChangeTypeResolver(_store(False))
        assert resolver.resolve("helper.js", frag, text) is ChangeType.CREATE

    def test_missing_file_and_empty_content(self):
        frag = CodeFragment(content="   ", source_offset=0)
        assert ChangeTypeResolver(_store(False)).resolve("x.js", frag, "") is None

    def test_line_range_for(self):
        text = "Replace lines 3-5 of app.py:\n```python\nvalue = compute(1, 2)\n```"
        frag = _first_fragment(text)
        resolver = ChangeTypeResolver(_store(True))
        assert resolver.line_range_for(frag, text) == LineRange(3, 5)


class TestExtractLineRange:
    def test_range(self):
        assert extract_line_range("replace lines 12-20 with") == LineRange(12, 20)

    def test_single_line(self):
        assert extract_line_range("on line 5") == LineRange(5, 5)

    def test_reversed_range(self):
        assert extract_line_range("Lines 9 - 3") == LineRange(3, 9)

    def test_no_range(self):
        assert extract_line_range("no numbers here") is None


class TestFileChangeCandidate:
    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            FileChangeCandidate(path="", content="x", change_type=ChangeType.CREATE)

    def test_confidence_clamped(self):
        high = FileChangeCandidate("a.js", "x", ChangeType.CREATE, confidence=150)
        low = FileChangeCandidate("a.js", "x", ChangeType.CREATE, confidence=-5)
        assert high.confidence == 100
        assert low.confidence == 0

    def test_to_dict(self):
        candidate = FileChangeCandidate(
            "src/a.py", "print(1)", ChangeType.UPDATE,
            original_content="print(0)", confidence=80,
            reasoning=["explicit_filename"], line_range=LineRange(1, 2),
        )
        data = candidate.to_dict()
        assert data["change_type"] == "update"
        assert data["line_range"] == {"start": 1, "end": 2}
        assert data["reasoning"] == ["explicit_filename"]
