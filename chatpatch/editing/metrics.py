"""
Edit metrics — tracks applied changes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_METRICS_FILE = ".chatpatch/edit_metrics.jsonl"


def log_edit_metric(data: dict, metrics_file: str = DEFAULT_METRICS_FILE) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (path, change_type, confidence, summary, ...).
    metrics_file:
        Path of the JSONL log.
    """
    directory = os.path.dirname(metrics_file)
    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(metrics_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Apply] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    metrics_file: str = DEFAULT_METRICS_FILE,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Parameters
    ----------
    last_n:
        Number of most-recent entries to include.
    metrics_file:
        Path of the JSONL log.

    Returns
    -------
    dict
        Statistics including total_edits, success_rate, avg_confidence,
        avg_edit_confidence and change_types.
    """
    entries: list[dict] = []
    if os.path.isfile(metrics_file):
        try:
            with open(metrics_file, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[Apply] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "avg_confidence": 0.0,
            "avg_edit_confidence": 0.0,
            "change_types": {},
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("success", False))
    confidences = [e["confidence"] for e in entries if "confidence" in e]
    edit_confidences = [
        e["edit_confidence"] for e in entries
        if e.get("edit_confidence") is not None
    ]
    change_types = Counter(e.get("change_type", "unknown") for e in entries)

    return {
        "total_edits": total,
        "success_rate": successes / total * 100,
        "avg_confidence": (
            sum(confidences) / len(confidences) if confidences else 0.0
        ),
        "avg_edit_confidence": (
            sum(edit_confidences) / len(edit_confidences)
            if edit_confidences else 0.0
        ),
        "change_types": {
            change_type: count / total * 100
            for change_type, count in change_types.most_common()
        },
    }
