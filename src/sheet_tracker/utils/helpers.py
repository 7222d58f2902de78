"""
Utility functions for input sanitizing, validation and id generation.
These functions are used throughout the application for consistent data processing.
None of them raise: invalid input degrades to a fallback value.
"""

import re
import uuid
from typing import Any
from urllib.parse import urlsplit

from sheet_tracker.config.constants import DEFAULT_DIFFICULTY, DIFFICULTY_LEVELS

# Schemes that need a host part to form an absolute URL
_HIERARCHICAL_SCHEMES = {"http", "https", "ftp", "ws", "wss"}

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


# ============================================================================
# Text Sanitizing Functions
# ============================================================================

def sanitize_string(value: Any, fallback: str = "") -> str:
    """
    Trim a string value, falling back when it is not usable.

    Args:
        value: Untrusted input value
        fallback: Value returned for non-strings and blank strings

    Returns:
        Trimmed string, or fallback
    """
    if not isinstance(value, str):
        return fallback
    return value.strip() or fallback


# ============================================================================
# Validation Functions
# ============================================================================

def validate_difficulty(value: Any) -> str:
    """Return value if it is a canonical difficulty label, else Medium."""
    if isinstance(value, str) and value in DIFFICULTY_LEVELS:
        return value
    return DEFAULT_DIFFICULTY


def _is_absolute_url(value: str) -> bool:
    if not _SCHEME_RE.match(value) or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if parts.scheme.lower() in _HIERARCHICAL_SCHEMES:
        return bool(parts.netloc)
    return True


def validate_url(value: Any) -> str:
    """
    Validate a URL leniently.

    Args:
        value: Untrusted input value

    Returns:
        The trimmed string if it is an absolute URL or starts with "http",
        otherwise an empty string
    """
    if not value or not isinstance(value, str):
        return ""
    trimmed = value.strip()
    if not trimmed:
        return ""
    if _is_absolute_url(trimmed):
        return trimmed
    return trimmed if trimmed.startswith("http") else ""


# ============================================================================
# Identifier Functions
# ============================================================================

def generate_id(prefix: str) -> str:
    """Generate a unique id such as 'question-<uuid4>'."""
    return f"{prefix}-{uuid.uuid4()}"
