import pytest

from sheet_tracker.services.filter_service import filter_questions


@pytest.fixture
def questions():
    return [
        {"id": "match", "title": "Two Sum", "difficulty": "Easy", "is_solved": False},
        {"id": "wrong-title", "title": "Three Sum", "difficulty": "Easy", "is_solved": False},
        {"id": "wrong-difficulty", "title": "Two Sum II", "difficulty": "Medium", "is_solved": False},
        {"id": "solved", "title": "two sum (revisited)", "difficulty": "Easy", "is_solved": True},
    ]


def ids(result):
    return [q["id"] for q in result]


def test_predicates_are_combined(questions):
    result = filter_questions(questions, "two sum", "Easy", "unsolved")
    assert ids(result) == ["match"]


def test_blank_search_and_all_filters_match_everything(questions):
    assert ids(filter_questions(questions, "   ", "all", "all")) == ids(questions)
    assert ids(filter_questions(questions, None, None, None)) == ids(questions)


def test_search_is_case_insensitive_on_title(questions):
    assert ids(filter_questions(questions, "TWO SUM", "all", "all")) == ["match", "wrong-difficulty", "solved"]


def test_status_filters(questions):
    assert ids(filter_questions(questions, "", "all", "solved")) == ["solved"]
    assert "solved" not in ids(filter_questions(questions, "", "all", "unsolved"))


def test_difficulty_is_exact_match(questions):
    assert ids(filter_questions(questions, "", "Medium", "all")) == ["wrong-difficulty"]
    assert filter_questions(questions, "", "medium", "all") == []


def test_filter_returns_new_list_without_touching_items(questions):
    result = filter_questions(questions, "", "all", "all")
    assert result is not questions
    assert all(a is b for a, b in zip(result, questions))


def test_malformed_input():
    assert filter_questions(None, "x", "all", "all") == []
    assert filter_questions([None, {"id": "q", "title": None}], "x", "all", "all") == []
