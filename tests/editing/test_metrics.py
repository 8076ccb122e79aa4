"""Tests for edit metrics logging and stats."""

import json
import os

import pytest

from chatpatch.editing.metrics import log_edit_metric, read_edit_stats


@pytest.fixture
def metrics_file(tmp_path):
    return str(tmp_path / ".chatpatch" / "edit_metrics.jsonl")


class TestLogEditMetric:
    def test_creates_file_and_writes_entry(self, metrics_file):
        log_edit_metric(
            {"path": "src/auth.py", "change_type": "update", "confidence": 95},
            metrics_file,
        )

        assert os.path.isfile(metrics_file)
        with open(metrics_file) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["path"] == "src/auth.py"
        assert entry["confidence"] == 95
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, metrics_file):
        for name in ("a.py", "b.py", "c.py"):
            log_edit_metric({"path": name}, metrics_file)

        with open(metrics_file) as f:
            assert len(f.readlines()) == 3


class TestReadEditStats:
    def test_empty_stats(self, metrics_file):
        stats = read_edit_stats(metrics_file=metrics_file)

        assert stats["total_edits"] == 0
        assert stats["success_rate"] == 0.0
        assert stats["avg_confidence"] == 0.0
        assert stats["change_types"] == {}

    def test_stats_from_entries(self, metrics_file):
        entries = [
            {"path": "a.py", "change_type": "update", "confidence": 90,
             "edit_confidence": 90, "success": True},
            {"path": "b.py", "change_type": "update", "confidence": 80,
             "edit_confidence": 75, "success": True},
            {"path": "c.py", "change_type": "create", "confidence": 40,
             "edit_confidence": None, "success": False},
        ]
        for e in entries:
            log_edit_metric(e, metrics_file)

        stats = read_edit_stats(last_n=50, metrics_file=metrics_file)

        assert stats["total_edits"] == 3
        # 2 successes / 3 total ≈ 66.7%
        assert 66 <= stats["success_rate"] <= 67
        # (90 + 80 + 40) / 3 = 70
        assert stats["avg_confidence"] == pytest.approx(70.0)
        # entries without an edit confidence are ignored
        assert stats["avg_edit_confidence"] == pytest.approx(82.5)
        assert set(stats["change_types"]) == {"update", "create"}
        assert 66 <= stats["change_types"]["update"] <= 67

    def test_last_n_limits(self, metrics_file):
        for i in range(10):
            log_edit_metric({"path": f"f{i}.py", "success": True}, metrics_file)

        stats = read_edit_stats(last_n=5, metrics_file=metrics_file)
        assert stats["total_edits"] == 5

    def test_corrupt_lines_skipped(self, metrics_file):
        log_edit_metric({"path": "a.py", "success": True}, metrics_file)
        with open(metrics_file, "a") as f:
            f.write("{not json\n")

        assert read_edit_stats(metrics_file=metrics_file)["total_edits"] == 1
