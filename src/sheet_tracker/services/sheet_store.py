"""
Sheet progress store.

This module owns the canonical topic tree and every write to it:
- Loading: hydrate from persisted state, ingest the sheet document, two-phase reset
- Topic / subtopic / question CRUD
- Solved / starred / notes updates (question ids are looked up across the whole tree)
- Drag-and-drop reordering at all three levels
- UI preferences (expansion maps, search and filters, theme)

Every mutator replaces the topic list and each ancestor it touches with a new
object, so listeners comparing by identity see the change. Untouched siblings
keep their identity. Mutators return True when they applied a change and False
for a no-op (unknown id, blank required field); they never raise for bad input.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from sheet_tracker.config.constants import (
    FILTER_ALL,
    ID_PREFIX_QUESTION,
    ID_PREFIX_SUBTOPIC,
    ID_PREFIX_TOPIC,
    THEME_DARK,
    THEME_LIGHT,
)
from sheet_tracker.config.settings import RESET_RELOAD_DELAY_MS, SHEET_PATH
from sheet_tracker.services.filter_service import filter_questions
from sheet_tracker.services.reorder import find_index, reorder_items
from sheet_tracker.services.sheet_transform import (
    DataFormatError,
    load_sheet_document,
    transform_sheet_data,
)
from sheet_tracker.services.stats_service import (
    calculate_detailed_stats,
    calculate_total_progress,
)
from sheet_tracker.services.storage_service import PERSISTED_FIELDS, StorageService
from sheet_tracker.utils.helpers import (
    generate_id,
    sanitize_string,
    validate_difficulty,
    validate_url,
)

logger = logging.getLogger(__name__)

TopicsUpdater = Callable[[dict[str, Any]], Optional[dict[str, Any]]]


def _children(entity: Any, key: str) -> list[dict[str, Any]]:
    """Child list of a topic/subtopic, or [] when it is missing or malformed."""
    if not isinstance(entity, dict):
        return []
    value = entity.get(key)
    return value if isinstance(value, list) else []


def _replace_child(
    entity: dict[str, Any], key: str, child_id: str, updater: TopicsUpdater
) -> Optional[dict[str, Any]]:
    """
    Copy `entity` with the child `child_id` replaced by `updater(child)`.

    Returns None when the child is missing or the updater declines (returns None).
    """
    children = _children(entity, key)
    index = find_index(children, child_id)
    if index == -1:
        return None
    updated = updater(children[index])
    if updated is None:
        return None
    new_children = list(children)
    new_children[index] = updated
    return {**entity, key: new_children}


class SheetStore(QObject):
    """
    Store for the sheet, its topic tree and the UI preferences around it.

    Construct one per application and pass it to consumers. Persistence is
    delegated to a StorageService; the sheet document comes from `sheet_loader`.
    """

    state_changed = Signal()  # Emitted after every applied change
    load_failed = Signal(str)  # Emitted with the error message when ingest fails

    def __init__(
        self,
        storage: StorageService | None = None,
        sheet_loader: Callable[[], Any] | None = None,
        reload_delay_ms: int = RESET_RELOAD_DELAY_MS,
        parent: QObject | None = None,
    ):
        """
        Initialize an empty store in the loading state.

        Args:
            storage: Persistence gateway (None keeps the store in memory only)
            sheet_loader: Callable returning the raw sheet document
                (default: read SHEET_PATH)
            reload_delay_ms: Delay before re-ingesting after reset_progress()
            parent: Optional Qt parent object
        """
        super().__init__(parent)
        self.storage = storage
        self.sheet_loader = sheet_loader or (lambda: load_sheet_document(SHEET_PATH))
        self.reload_delay_ms = reload_delay_ms

        self.sheet: dict[str, Any] | None = None
        self.topics: list[dict[str, Any]] = []
        self.expanded_topics: dict[str, bool] = {}  # topic id -> expanded
        self.expanded_subtopics: dict[str, bool] = {}  # subtopic id -> expanded
        self.loading = True
        self.error: str | None = None
        self.search_query = ""
        self.filter_difficulty = FILTER_ALL
        self.filter_status = FILTER_ALL
        self.theme = THEME_DARK
        self.show_stats = False

    # ------------------------------------------------------------------
    # State plumbing
    # ------------------------------------------------------------------
    def _set(self, persist: bool = True, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self, name, value)
        self.state_changed.emit()
        if persist and self.storage is not None and any(name in PERSISTED_FIELDS for name in changes):
            self._save()

    def _save(self) -> None:
        # The in-memory change stands even if the write fails.
        try:
            self.storage.save_state(self.persisted_state())
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to save sheet progress: %s", exc)

    def persisted_state(self) -> dict[str, Any]:
        """Snapshot of the state written to storage (`loading` is always False)."""
        state = {field: getattr(self, field) for field in PERSISTED_FIELDS}
        state["loading"] = False
        return state

    def _updated_topic(self, topic_id: str, updater: TopicsUpdater) -> list[dict[str, Any]] | None:
        """New topic list with one topic replaced, or None when nothing changes."""
        if not topic_id:
            return None
        index = find_index(self.topics, topic_id)
        if index == -1:
            return None
        updated = updater(self.topics[index])
        if updated is None:
            return None
        topics = list(self.topics)
        topics[index] = updated
        return topics

    def _updated_subtopic(
        self, topic_id: str, subtopic_id: str, updater: TopicsUpdater
    ) -> list[dict[str, Any]] | None:
        if not subtopic_id:
            return None
        return self._updated_topic(
            topic_id, lambda topic: _replace_child(topic, "subtopics", subtopic_id, updater)
        )

    def _updated_question(
        self, topic_id: str, subtopic_id: str, question_id: str, updater: TopicsUpdater
    ) -> list[dict[str, Any]] | None:
        if not question_id:
            return None
        return self._updated_subtopic(
            topic_id,
            subtopic_id,
            lambda subtopic: _replace_child(subtopic, "questions", question_id, updater),
        )

    def _update_question_anywhere(self, question_id: str, updater: TopicsUpdater) -> bool:
        """Apply `updater` to every question with this id, wherever it lives."""
        if not question_id:
            return False
        changed = False
        topics = []
        for topic in self.topics:
            new_subtopics = None
            for position, subtopic in enumerate(_children(topic, "subtopics")):
                questions = _children(subtopic, "questions")
                if find_index(questions, question_id) == -1:
                    continue
                new_questions = [
                    updater(q) if isinstance(q, dict) and q.get("id") == question_id else q
                    for q in questions
                ]
                if new_subtopics is None:
                    new_subtopics = list(topic["subtopics"])
                new_subtopics[position] = {**subtopic, "questions": new_questions}
            if new_subtopics is None:
                topics.append(topic)
            else:
                topics.append({**topic, "subtopics": new_subtopics})
                changed = True
        if changed:
            self._set(topics=topics)
        return changed

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def hydrate(self) -> bool:
        """
        Restore persisted state from storage.

        Returns:
            True if a saved state was found and applied
        """
        if self.storage is None:
            return False
        state = self.storage.load_state()
        if not state:
            return False
        changes: dict[str, Any] = {"loading": False}
        if isinstance(state.get("topics"), list):
            changes["topics"] = state["topics"]
        if isinstance(state.get("sheet"), dict):
            changes["sheet"] = state["sheet"]
        for field in ("expanded_topics", "expanded_subtopics"):
            if isinstance(state.get(field), dict):
                changes[field] = state[field]
        if state.get("theme") in (THEME_DARK, THEME_LIGHT):
            changes["theme"] = state["theme"]
        self._set(persist=False, **changes)
        logger.info("Restored %d topic(s) from saved progress", len(self.topics))
        return True

    def fetch_sheet_data(self) -> bool:
        """
        Ingest the sheet document unless a tree is already loaded.

        On a malformed or unreadable document the store enters the error
        state: `error` is set, the topic list stays empty and `load_failed`
        is emitted.

        Returns:
            True if a new tree was ingested
        """
        if self.topics and not self.loading:
            return False

        self._set(persist=False, loading=True, error=None)
        try:
            result = transform_sheet_data(self.sheet_loader())
        except (DataFormatError, OSError) as exc:
            message = str(exc) or "Failed to load data"
            logger.error("Failed to load sheet data: %s", message)
            self._set(persist=False, topics=[], sheet=None, loading=False, error=message)
            self.load_failed.emit(message)
            return False

        self._set(sheet=result["sheet"], topics=result["topics"], loading=False)
        logger.info("Loaded sheet '%s' with %d topic(s)", self.sheet["name"], len(self.topics))
        return True

    def reset_progress(self) -> None:
        """
        Discard all progress and re-ingest the sheet document.

        Phase one runs now: saved state is cleared and the store becomes empty
        and loading. Phase two (the ingest) runs on a later event-loop turn,
        so listeners always see the loading state first.
        """
        if self.storage is not None:
            self.storage.clear_state()
        self._set(persist=False, topics=[], sheet=None, loading=True, error=None)
        logger.info("Progress reset; reloading sheet")
        QTimer.singleShot(self.reload_delay_ms, self.fetch_sheet_data)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_topic(self, topic_id: str) -> dict[str, Any] | None:
        index = find_index(self.topics, topic_id)
        return self.topics[index] if index != -1 else None

    def find_subtopic(self, topic_id: str, subtopic_id: str) -> dict[str, Any] | None:
        subtopics = _children(self.find_topic(topic_id), "subtopics")
        index = find_index(subtopics, subtopic_id)
        return subtopics[index] if index != -1 else None

    def find_question(self, question_id: str) -> dict[str, Any] | None:
        """Find a question by id anywhere in the tree."""
        for topic in self.topics:
            for subtopic in _children(topic, "subtopics"):
                questions = _children(subtopic, "questions")
                index = find_index(questions, question_id)
                if index != -1:
                    return questions[index]
        return None

    def visible_questions(self, subtopic: dict[str, Any]) -> list[dict[str, Any]]:
        """Questions of a subtopic that pass the current search and filters."""
        return filter_questions(
            _children(subtopic, "questions"),
            self.search_query,
            self.filter_difficulty,
            self.filter_status,
        )

    def total_progress(self) -> dict[str, int]:
        return calculate_total_progress(self.topics)

    def detailed_stats(self) -> dict[str, Any]:
        return calculate_detailed_stats(self.topics)

    # ------------------------------------------------------------------
    # Topic CRUD
    # ------------------------------------------------------------------
    def add_topic(self, name: str) -> bool:
        name = sanitize_string(name)
        if not name:
            return False
        topic = {
            "id": generate_id(ID_PREFIX_TOPIC),
            "name": name,
            "order": len(self.topics),
            "subtopics": [],
        }
        self._set(topics=[*self.topics, topic])
        return True

    def update_topic(self, topic_id: str, name: str) -> bool:
        name = sanitize_string(name)
        if not name:
            return False
        topics = self._updated_topic(topic_id, lambda topic: {**topic, "name": name})
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    def delete_topic(self, topic_id: str) -> bool:
        """Delete a topic with everything under it. Sibling `order` is left as is."""
        topic = self.find_topic(topic_id) if topic_id else None
        if topic is None:
            return False
        expanded_topics = dict(self.expanded_topics)
        expanded_topics.pop(topic_id, None)
        expanded_subtopics = dict(self.expanded_subtopics)
        for subtopic in _children(topic, "subtopics"):
            if isinstance(subtopic, dict):
                expanded_subtopics.pop(subtopic.get("id"), None)
        self._set(
            topics=[t for t in self.topics if t is not topic],
            expanded_topics=expanded_topics,
            expanded_subtopics=expanded_subtopics,
        )
        return True

    # ------------------------------------------------------------------
    # Subtopic CRUD
    # ------------------------------------------------------------------
    def add_subtopic(self, topic_id: str, name: str) -> bool:
        name = sanitize_string(name)
        if not name:
            return False

        def append(topic: dict[str, Any]) -> dict[str, Any]:
            subtopics = _children(topic, "subtopics")
            subtopic = {
                "id": generate_id(ID_PREFIX_SUBTOPIC),
                "name": name,
                "order": len(subtopics),
                "questions": [],
            }
            return {**topic, "subtopics": [*subtopics, subtopic]}

        topics = self._updated_topic(topic_id, append)
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    def update_subtopic(self, topic_id: str, subtopic_id: str, name: str) -> bool:
        name = sanitize_string(name)
        if not name:
            return False
        topics = self._updated_subtopic(topic_id, subtopic_id, lambda s: {**s, "name": name})
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    def delete_subtopic(self, topic_id: str, subtopic_id: str) -> bool:
        if not subtopic_id or self.find_subtopic(topic_id, subtopic_id) is None:
            return False
        topics = self._updated_topic(
            topic_id,
            lambda topic: {
                **topic,
                "subtopics": [
                    s
                    for s in _children(topic, "subtopics")
                    if not (isinstance(s, dict) and s.get("id") == subtopic_id)
                ],
            },
        )
        expanded_subtopics = dict(self.expanded_subtopics)
        expanded_subtopics.pop(subtopic_id, None)
        self._set(topics=topics, expanded_subtopics=expanded_subtopics)
        return True

    # ------------------------------------------------------------------
    # Question CRUD
    # ------------------------------------------------------------------
    def add_question(self, topic_id: str, subtopic_id: str, data: dict[str, Any]) -> bool:
        """
        Append a question to a subtopic.

        Args:
            topic_id: Parent topic id
            subtopic_id: Parent subtopic id
            data: {"title": str, "difficulty": str, "url": str, "resource": str}
                (only title is required)
        """
        if not isinstance(data, dict):
            return False
        title = sanitize_string(data.get("title"))
        if not title:
            return False

        def append(subtopic: dict[str, Any]) -> dict[str, Any]:
            questions = _children(subtopic, "questions")
            question = {
                "id": generate_id(ID_PREFIX_QUESTION),
                "title": title,
                "difficulty": validate_difficulty(data.get("difficulty")),
                "url": validate_url(data.get("url")),
                "resource": sanitize_string(data.get("resource")),
                "tags": [],
                "is_solved": False,
                "is_starred": False,
                "notes": "",
                "order": len(questions),
            }
            return {**subtopic, "questions": [*questions, question]}

        topics = self._updated_subtopic(topic_id, subtopic_id, append)
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    def update_question(
        self, topic_id: str, subtopic_id: str, question_id: str, partial: dict[str, Any]
    ) -> bool:
        """
        Merge validated fields into a question.

        Only keys present in `partial` are applied: `title` (ignored when blank),
        `difficulty` (coerced to a canonical value) and `url` (validated; an
        invalid URL clears the field).
        """
        if not isinstance(partial, dict):
            return False
        changes: dict[str, Any] = {}
        title = sanitize_string(partial.get("title"))
        if title:
            changes["title"] = title
        if partial.get("difficulty"):
            changes["difficulty"] = validate_difficulty(partial["difficulty"])
        if "url" in partial:
            changes["url"] = validate_url(partial["url"])
        if not changes:
            return False
        topics = self._updated_question(topic_id, subtopic_id, question_id, lambda q: {**q, **changes})
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    def delete_question(self, topic_id: str, subtopic_id: str, question_id: str) -> bool:
        """Remove a question. Surviving `order` values are left as is."""
        if not question_id:
            return False
        subtopic = self.find_subtopic(topic_id, subtopic_id)
        if find_index(_children(subtopic, "questions"), question_id) == -1:
            return False
        topics = self._updated_subtopic(
            topic_id,
            subtopic_id,
            lambda s: {
                **s,
                "questions": [
                    q
                    for q in _children(s, "questions")
                    if not (isinstance(q, dict) and q.get("id") == question_id)
                ],
            },
        )
        self._set(topics=topics)
        return True

    # ------------------------------------------------------------------
    # Question progress (global id lookup)
    # ------------------------------------------------------------------
    def toggle_question_solved(self, question_id: str) -> bool:
        return self._update_question_anywhere(
            question_id, lambda q: {**q, "is_solved": not q.get("is_solved")}
        )

    def toggle_question_starred(self, question_id: str) -> bool:
        return self._update_question_anywhere(
            question_id, lambda q: {**q, "is_starred": not q.get("is_starred")}
        )

    def update_question_notes(self, question_id: str, notes: str) -> bool:
        notes = sanitize_string(notes)
        return self._update_question_anywhere(question_id, lambda q: {**q, "notes": notes})

    def toggle_all_in_subtopic(self, topic_id: str, subtopic_id: str, solved: bool) -> bool:
        """Mark every question in a subtopic as solved or unsolved."""
        solved = bool(solved)
        topics = self._updated_subtopic(
            topic_id,
            subtopic_id,
            lambda s: {
                **s,
                "questions": [
                    {**q, "is_solved": solved} if isinstance(q, dict) else q
                    for q in _children(s, "questions")
                ],
            },
        )
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    # ------------------------------------------------------------------
    # Reordering
    # ------------------------------------------------------------------
    def reorder_topics(self, active_id: str, over_id: str) -> bool:
        topics = reorder_items(self.topics, active_id, over_id)
        if topics is self.topics:
            return False
        self._set(topics=topics)
        return True

    def reorder_subtopics(self, topic_id: str, active_id: str, over_id: str) -> bool:
        def reorder(topic: dict[str, Any]) -> dict[str, Any] | None:
            subtopics = _children(topic, "subtopics")
            reordered = reorder_items(subtopics, active_id, over_id)
            return None if reordered is subtopics else {**topic, "subtopics": reordered}

        topics = self._updated_topic(topic_id, reorder)
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    def reorder_questions(self, topic_id: str, subtopic_id: str, active_id: str, over_id: str) -> bool:
        def reorder(subtopic: dict[str, Any]) -> dict[str, Any] | None:
            questions = _children(subtopic, "questions")
            reordered = reorder_items(questions, active_id, over_id)
            return None if reordered is questions else {**subtopic, "questions": reordered}

        topics = self._updated_subtopic(topic_id, subtopic_id, reorder)
        if topics is None:
            return False
        self._set(topics=topics)
        return True

    # ------------------------------------------------------------------
    # UI preferences
    # ------------------------------------------------------------------
    def toggle_topic_expansion(self, topic_id: str) -> bool:
        if not topic_id:
            return False
        expanded = dict(self.expanded_topics)
        expanded[topic_id] = not expanded.get(topic_id, False)
        self._set(expanded_topics=expanded)
        return True

    def toggle_subtopic_expansion(self, subtopic_id: str) -> bool:
        if not subtopic_id:
            return False
        expanded = dict(self.expanded_subtopics)
        expanded[subtopic_id] = not expanded.get(subtopic_id, False)
        self._set(expanded_subtopics=expanded)
        return True

    def expand_all_topics(self) -> None:
        self._set(expanded_topics={t["id"]: True for t in self.topics if isinstance(t, dict) and "id" in t})

    def collapse_all_topics(self) -> None:
        self._set(expanded_topics={})

    def set_search_query(self, query: str) -> None:
        self._set(search_query=query if isinstance(query, str) else "")

    def set_filter_difficulty(self, difficulty: str) -> None:
        self._set(filter_difficulty=difficulty or FILTER_ALL)

    def set_filter_status(self, status: str) -> None:
        self._set(filter_status=status or FILTER_ALL)

    def toggle_theme(self) -> None:
        self._set(theme=THEME_LIGHT if self.theme == THEME_DARK else THEME_DARK)

    def toggle_stats(self) -> None:
        self._set(show_stats=not self.show_stats)
