"""
Application constants and configuration values.
Contains file paths, storage keys, enum-like value sets and default names.
"""

from pathlib import Path

# ============================================================================
# Base Directories and File Paths
# ============================================================================

# Installed package directory (bundled data files live under it)
PACKAGE_DIR = Path(__file__).resolve().parent.parent

# Bundled sheet document used for the initial ingest
SHEET_DATA_FILE = PACKAGE_DIR / "data" / "sheet.json"

# Per-user directory for writable application data
USER_DATA_DIR = Path.home() / ".sheet_tracker"

# SQLite database holding the persisted state blob
DEFAULT_DB_PATH = USER_DATA_DIR / "sheet_tracker.db"


# ============================================================================
# Persistence
# ============================================================================

# Single fixed key under which the whole persisted state is stored
STORAGE_KEY = "question-sheet-storage"


# ============================================================================
# Difficulty Levels
# ============================================================================

DIFFICULTY_EASY = "Easy"
DIFFICULTY_MEDIUM = "Medium"
DIFFICULTY_HARD = "Hard"
DIFFICULTY_BASIC = "Basic"

# Canonical order used for statistics buckets
DIFFICULTY_LEVELS = (
    DIFFICULTY_EASY,
    DIFFICULTY_MEDIUM,
    DIFFICULTY_HARD,
    DIFFICULTY_BASIC,
)

DEFAULT_DIFFICULTY = DIFFICULTY_MEDIUM


# ============================================================================
# Filters and Themes
# ============================================================================

FILTER_ALL = "all"
FILTER_SOLVED = "solved"
FILTER_UNSOLVED = "unsolved"

STATUS_FILTERS = (FILTER_ALL, FILTER_SOLVED, FILTER_UNSOLVED)

THEME_DARK = "dark"
THEME_LIGHT = "light"


# ============================================================================
# Id Prefixes and Default Names
# ============================================================================

ID_PREFIX_SHEET = "sheet"
ID_PREFIX_TOPIC = "topic"
ID_PREFIX_SUBTOPIC = "subtopic"
ID_PREFIX_QUESTION = "question"

DEFAULT_SHEET_NAME = "Question Sheet"
DEFAULT_GROUP_NAME = "General"  # Fallback for blank topic/subtopic names
DEFAULT_QUESTION_TITLE = "Untitled Question"
