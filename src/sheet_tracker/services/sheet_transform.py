"""
Sheet ingest service.

This module turns an external sheet document into the normalized tree:
- Validating the document envelope (data.sheet / data.questions)
- Grouping flat question records by (topic, subtopic) in first-seen order
- Normalizing sheet metadata and question fields
"""

import json
from pathlib import Path
from typing import Any

from sheet_tracker.config.constants import (
    DEFAULT_GROUP_NAME,
    DEFAULT_QUESTION_TITLE,
    DEFAULT_SHEET_NAME,
    ID_PREFIX_QUESTION,
    ID_PREFIX_SHEET,
    ID_PREFIX_SUBTOPIC,
    ID_PREFIX_TOPIC,
)
from sheet_tracker.utils.helpers import (
    generate_id,
    sanitize_string,
    validate_difficulty,
    validate_url,
)


class DataFormatError(ValueError):
    """Raised when a sheet document lacks its sheet or questions collection."""


def load_sheet_document(sheet_path: Path) -> dict[str, Any]:
    """
    Read a raw sheet document from a JSON file.

    Args:
        sheet_path: Path to the sheet JSON file

    Returns:
        Parsed JSON document

    Raises:
        DataFormatError: If the file is not UTF-8 encoded JSON
        OSError: If the file cannot be read
    """
    try:
        text = Path(sheet_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DataFormatError(f"{Path(sheet_path).name} is not valid UTF-8: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataFormatError(f"{Path(sheet_path).name} is not valid JSON: {exc}") from exc


def _string_list(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, str)]


def transform_sheet(sheet: dict[str, Any]) -> dict[str, Any]:
    """Normalize the sheet record, applying defaults for missing fields."""
    followers = sheet.get("followers")
    if isinstance(followers, bool) or not isinstance(followers, (int, float)):
        followers = 0
    return {
        "id": sheet.get("_id") or generate_id(ID_PREFIX_SHEET),
        "name": sanitize_string(sheet.get("name"), DEFAULT_SHEET_NAME),
        "description": sanitize_string(sheet.get("description")),
        "author": sanitize_string(sheet.get("author")),
        "followers": followers,
        "banner": sanitize_string(sheet.get("banner")),
        "link": validate_url(sheet.get("link")),
        "tags": _string_list(sheet.get("tag")),
    }


def transform_question(record: dict[str, Any], order: int) -> dict[str, Any]:
    """
    Build a question entity from one flat source record.

    Args:
        record: Source question record
        order: Position of the question inside its subtopic

    Returns:
        Normalized question dict
    """
    meta = record.get("questionId")
    if not isinstance(meta, dict):
        meta = {}
    return {
        "id": record.get("_id") or generate_id(ID_PREFIX_QUESTION),
        "title": sanitize_string(record.get("title"), DEFAULT_QUESTION_TITLE),
        "difficulty": validate_difficulty(meta.get("difficulty")),
        "url": validate_url(meta.get("problemUrl")),
        "resource": sanitize_string(record.get("resource")),
        "tags": _string_list(meta.get("topics")),
        "is_solved": bool(record.get("isSolved")),
        "is_starred": False,
        "notes": "",
        "order": order,
    }


def transform_sheet_data(raw_data: Any) -> dict[str, Any]:
    """
    Transform a raw sheet document into the normalized sheet/topic tree.

    Topics and subtopics are deduplicated by sanitized name. Insertion order
    defines the initial `order` at every level.

    Args:
        raw_data: Document shaped like {"data": {"sheet": {...}, "questions": [...]}}

    Returns:
        {"sheet": sheet_dict, "topics": [topic_dict, ...]}

    Raises:
        DataFormatError: If the sheet or questions collection is missing
    """
    data = raw_data.get("data") if isinstance(raw_data, dict) else None
    if not isinstance(data, dict):
        raise DataFormatError("Invalid sheet data format: missing 'data'")
    sheet = data.get("sheet")
    questions = data.get("questions")
    if not isinstance(sheet, dict):
        raise DataFormatError("Invalid sheet data format: missing 'data.sheet'")
    if not isinstance(questions, list):
        raise DataFormatError("Invalid sheet data format: missing 'data.questions'")

    topics_by_name: dict[str, dict[str, Any]] = {}  # topic name -> topic (subtopics keyed by name)

    for record in questions:
        if not isinstance(record, dict):
            continue
        topic_name = sanitize_string(record.get("topic"), DEFAULT_GROUP_NAME)
        subtopic_name = sanitize_string(record.get("subTopic"), DEFAULT_GROUP_NAME)

        topic = topics_by_name.get(topic_name)
        if topic is None:
            position = len(topics_by_name)
            topic = {
                "id": f"{ID_PREFIX_TOPIC}-{position}",
                "name": topic_name,
                "order": position,
                "subtopics": {},
            }
            topics_by_name[topic_name] = topic

        subtopic = topic["subtopics"].get(subtopic_name)
        if subtopic is None:
            position = len(topic["subtopics"])
            subtopic = {
                "id": f"{ID_PREFIX_SUBTOPIC}-{topic['id']}-{position}",
                "name": subtopic_name,
                "order": position,
                "questions": [],
            }
            topic["subtopics"][subtopic_name] = subtopic

        subtopic["questions"].append(transform_question(record, len(subtopic["questions"])))

    topics = [
        {**topic, "subtopics": list(topic["subtopics"].values())}
        for topic in topics_by_name.values()
    ]
    return {"sheet": transform_sheet(sheet), "topics": topics}
