"""
Question filtering by search text, difficulty and solved status.
"""

from typing import Any, Optional

from sheet_tracker.config.constants import FILTER_ALL, FILTER_SOLVED, FILTER_UNSOLVED


def filter_questions(
    questions: Any,
    search_query: Optional[str] = "",
    filter_difficulty: Optional[str] = FILTER_ALL,
    filter_status: Optional[str] = FILTER_ALL,
) -> list[dict[str, Any]]:
    """
    Filter a question list. All three predicates must match.

    Args:
        questions: Question list (anything else yields an empty list)
        search_query: Case-insensitive substring matched against the title;
            blank matches everything
        filter_difficulty: "all" or a canonical difficulty label
        filter_status: "all", "solved" or "unsolved"

    Returns:
        New list holding the matching question dicts (same objects, same order)
    """
    if not isinstance(questions, list):
        return []

    normalized_search = (search_query or "").lower().strip()

    def matches(question: Any) -> bool:
        if not isinstance(question, dict):
            return False

        if normalized_search:
            title = question.get("title")
            if not isinstance(title, str) or normalized_search not in title.lower():
                return False

        if filter_difficulty and filter_difficulty != FILTER_ALL:
            if question.get("difficulty") != filter_difficulty:
                return False

        is_solved = bool(question.get("is_solved"))
        if filter_status == FILTER_SOLVED and not is_solved:
            return False
        if filter_status == FILTER_UNSOLVED and is_solved:
            return False

        return True

    return [question for question in questions if matches(question)]
