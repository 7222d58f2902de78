"""
Application settings and configuration options.
"""

import os
from pathlib import Path

from sheet_tracker.config.constants import DEFAULT_DB_PATH, SHEET_DATA_FILE

# ============================================================================
# Storage Settings
# ============================================================================

# SQLite file for persisted progress (override with SHEET_TRACKER_DB)
DB_PATH = Path(os.environ.get("SHEET_TRACKER_DB", DEFAULT_DB_PATH))

# Sheet document read on first start and after a reset
SHEET_PATH = Path(os.environ.get("SHEET_TRACKER_SHEET", SHEET_DATA_FILE))


# ============================================================================
# Application Behavior Settings
# ============================================================================

# Delay before re-ingesting after a progress reset (milliseconds).
# Zero still defers the reload to the next event-loop turn.
RESET_RELOAD_DELAY_MS = 0


# ============================================================================
# Logging Settings
# ============================================================================

LOG_LEVEL = os.environ.get("SHEET_TRACKER_LOG_LEVEL", "INFO").upper()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
