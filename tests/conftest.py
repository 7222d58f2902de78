import copy
import time

import pytest
from PySide6.QtCore import QCoreApplication

from sheet_tracker.services import SheetStore, StorageService


SAMPLE_SHEET = {
    "data": {
        "sheet": {
            "_id": "sheet-1",
            "name": "  Practice Sheet  ",
            "description": "Core problems",
            "author": "Tester",
            "followers": 42,
            "banner": "",
            "link": "https://example.com/sheet",
            "tag": ["dsa", 7, "arrays"],
        },
        "questions": [
            {
                "_id": "q1",
                "title": "Two Sum",
                "topic": "Arrays",
                "subTopic": "Basics",
                "resource": "https://example.com/r/two-sum",
                "isSolved": False,
                "questionId": {"difficulty": "Easy", "problemUrl": "https://example.com/p/two-sum", "topics": ["array"]},
            },
            {
                "_id": "q2",
                "title": "Max Subarray",
                "topic": "Arrays",
                "subTopic": "Basics",
                "isSolved": True,
                "questionId": {"difficulty": "Medium", "problemUrl": "https://example.com/p/max-subarray"},
            },
            {
                "_id": "q3",
                "title": "Reverse List",
                "topic": "Linked List",
                "subTopic": "Basics",
                "isSolved": False,
                "questionId": {"difficulty": "Hard", "problemUrl": "not a url"},
            },
            {
                "_id": "q4",
                "title": "Container With Most Water",
                "topic": "Arrays",
                "subTopic": "Two Pointers",
                "isSolved": True,
                "questionId": {"difficulty": "Impossible"},
            },
        ],
    }
}


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def raw_sheet():
    return copy.deepcopy(SAMPLE_SHEET)


@pytest.fixture
def storage(tmp_path):
    return StorageService(tmp_path / "progress.db")


@pytest.fixture
def store(storage, raw_sheet):
    store = SheetStore(storage=storage, sheet_loader=lambda: raw_sheet)
    store.fetch_sheet_data()
    return store


@pytest.fixture
def wait_until(qapp):
    """Run the Qt event loop until condition() holds or the timeout expires."""

    def wait(condition, timeout=2.0):
        deadline = time.monotonic() + timeout
        while not condition() and time.monotonic() < deadline:
            qapp.processEvents()
            time.sleep(0.005)
        return condition()

    return wait
