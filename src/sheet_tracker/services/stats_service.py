"""
Progress statistics service.

This module derives read-only progress figures from the topic tree:
- Overall, per-topic and per-subtopic solved/total counts
- Per-difficulty breakdown over the canonical difficulty buckets
- A tabular per-topic report (pandas DataFrame)

Malformed or missing topic/subtopic/question collections are skipped.
"""

import math
from typing import Any

import pandas as pd

from sheet_tracker.config.constants import DIFFICULTY_LEVELS
from sheet_tracker.utils.helpers import validate_difficulty


def progress_percentage(solved: int, total: int) -> int:
    """Rounded solved percentage (halves round up); 0 when total is 0."""
    if total <= 0:
        return 0
    return int(math.floor(solved / total * 100 + 0.5))


def _iter_subtopics(topic: Any):
    if not isinstance(topic, dict) or not isinstance(topic.get("subtopics"), list):
        return
    for subtopic in topic["subtopics"]:
        if isinstance(subtopic, dict) and isinstance(subtopic.get("questions"), list):
            yield subtopic


def _iter_questions(subtopic: dict[str, Any]):
    for question in subtopic["questions"]:
        if isinstance(question, dict):
            yield question


def calculate_subtopic_progress(subtopic: Any) -> dict[str, int]:
    """Solved/total counts for one subtopic."""
    if not isinstance(subtopic, dict) or not isinstance(subtopic.get("questions"), list):
        return {"total": 0, "solved": 0}
    questions = list(_iter_questions(subtopic))
    return {
        "total": len(questions),
        "solved": sum(1 for q in questions if q.get("is_solved")),
    }


def calculate_topic_progress(topic: Any) -> dict[str, int]:
    """Solved/total counts summed over a topic's subtopics."""
    total = 0
    solved = 0
    for subtopic in _iter_subtopics(topic):
        progress = calculate_subtopic_progress(subtopic)
        total += progress["total"]
        solved += progress["solved"]
    return {"total": total, "solved": solved}


def calculate_total_progress(topics: Any) -> dict[str, int]:
    """
    Overall progress across every topic.

    Args:
        topics: Topic list

    Returns:
        {"total": int, "solved": int, "percentage": int}
    """
    total = 0
    solved = 0
    if isinstance(topics, list):
        for topic in topics:
            progress = calculate_topic_progress(topic)
            total += progress["total"]
            solved += progress["solved"]
    return {"total": total, "solved": solved, "percentage": progress_percentage(solved, total)}


def calculate_detailed_stats(topics: Any) -> dict[str, Any]:
    """
    Detailed statistics across all dimensions.

    Args:
        topics: Topic list

    Returns:
        {
            "total": int,
            "solved": int,
            "percentage": int,
            "by_difficulty": {"Easy": {"total": int, "solved": int}, ...},
            "by_topic": [{"name": str, "total": int, "solved": int}, ...]
        }
    """
    stats: dict[str, Any] = {
        "total": 0,
        "solved": 0,
        "percentage": 0,
        "by_difficulty": {level: {"total": 0, "solved": 0} for level in DIFFICULTY_LEVELS},
        "by_topic": [],
    }
    if not isinstance(topics, list):
        return stats

    for topic in topics:
        if not isinstance(topic, dict) or not isinstance(topic.get("subtopics"), list):
            continue

        topic_stats = {"name": topic.get("name", ""), "total": 0, "solved": 0}

        for subtopic in _iter_subtopics(topic):
            for question in _iter_questions(subtopic):
                bucket = stats["by_difficulty"][validate_difficulty(question.get("difficulty"))]
                stats["total"] += 1
                topic_stats["total"] += 1
                bucket["total"] += 1

                if question.get("is_solved"):
                    stats["solved"] += 1
                    topic_stats["solved"] += 1
                    bucket["solved"] += 1

        stats["by_topic"].append(topic_stats)

    stats["percentage"] = progress_percentage(stats["solved"], stats["total"])
    return stats


def progress_table(topics: Any) -> pd.DataFrame:
    """
    Per-topic progress as a DataFrame, in tree order.

    Columns: Topic, Solved, Total, Percentage
    """
    rows = [
        {
            "Topic": entry["name"],
            "Solved": entry["solved"],
            "Total": entry["total"],
            "Percentage": progress_percentage(entry["solved"], entry["total"]),
        }
        for entry in calculate_detailed_stats(topics)["by_topic"]
    ]
    return pd.DataFrame(rows, columns=["Topic", "Solved", "Total", "Percentage"])
