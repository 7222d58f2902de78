"""
Question sheet progress tracker.

Tracks progress through a sheet of practice questions grouped into topics and
subtopics, with reordering, editing, statistics, filtering and persistence.
"""

__version__ = "1.0.0"
