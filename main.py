"""
Main entry point for the Question Sheet Tracker.

Usage:
    python main.py [--db PATH] [--sheet PATH] [--reset]
                   [--search TEXT] [--difficulty LEVEL] [--status STATUS]

Loads saved progress (or ingests the sheet on first run), then prints overall,
per-difficulty and per-topic progress and the questions matching the filters.
"""

import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from sheet_tracker.config.constants import DIFFICULTY_LEVELS, FILTER_ALL, STATUS_FILTERS
from sheet_tracker.config.settings import DB_PATH, LOG_FORMAT, LOG_LEVEL, SHEET_PATH
from sheet_tracker.services import SheetStore, StorageService, load_sheet_document, progress_table


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show progress through a question sheet.")
    parser.add_argument("--db", type=Path, default=DB_PATH, help="SQLite file holding saved progress")
    parser.add_argument("--sheet", type=Path, default=SHEET_PATH, help="Sheet JSON document")
    parser.add_argument("--reset", action="store_true", help="Discard saved progress and reload the sheet")
    parser.add_argument("--search", default="", help="Only list questions whose title contains this text")
    parser.add_argument("--difficulty", default=FILTER_ALL, choices=[FILTER_ALL, *DIFFICULTY_LEVELS])
    parser.add_argument("--status", default=FILTER_ALL, choices=list(STATUS_FILTERS))
    return parser.parse_args(argv)


def print_report(store: SheetStore) -> None:
    stats = store.detailed_stats()
    sheet_name = store.sheet["name"] if store.sheet else "Question Sheet"
    print(f"{sheet_name}: {stats['solved']}/{stats['total']} solved ({stats['percentage']}%)")
    for level, counts in stats["by_difficulty"].items():
        print(f"  {level:<7} {counts['solved']}/{counts['total']}")
    print()
    print(progress_table(store.topics).to_string(index=False))
    print()
    for topic in store.topics:
        for subtopic in topic["subtopics"]:
            for question in store.visible_questions(subtopic):
                mark = "x" if question["is_solved"] else " "
                print(f"[{mark}] {topic['name']} / {subtopic['name']}: {question['title']} ({question['difficulty']})")


def main(argv=None) -> int:
    """Build the store, load data and print the report."""
    args = parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    store = SheetStore(
        storage=StorageService(args.db),
        sheet_loader=lambda: load_sheet_document(args.sheet),
    )
    store.hydrate()

    if args.reset:
        # Wait for the deferred reload before reporting.
        store.state_changed.connect(lambda: None if store.loading else app.quit())
        store.reset_progress()
        app.exec()
    else:
        store.fetch_sheet_data()

    if store.error:
        print(f"Failed to load sheet: {store.error}", file=sys.stderr)
        return 1

    store.set_search_query(args.search)
    store.set_filter_difficulty(args.difficulty)
    store.set_filter_status(args.status)
    print_report(store)
    return 0


if __name__ == "__main__":
    sys.exit(main())
