"""
Services layer for business logic.

Contains:
- sheet_transform: Sheet document ingest (flat records -> topic tree)
- reorder: Drag-and-drop reordering of sibling lists
- stats_service: Progress statistics and the per-topic report table
- filter_service: Search / difficulty / status filtering
- storage_service: SQLite persistence of the store state
- sheet_store: The store owning the topic tree and all mutators
"""

from .sheet_transform import DataFormatError, load_sheet_document, transform_sheet_data
from .reorder import move_item, reorder_items
from .stats_service import (
    calculate_detailed_stats,
    calculate_subtopic_progress,
    calculate_topic_progress,
    calculate_total_progress,
    progress_percentage,
    progress_table,
)
from .filter_service import filter_questions
from .storage_service import StorageService
from .sheet_store import SheetStore

__all__ = [
    'DataFormatError',
    'load_sheet_document',
    'transform_sheet_data',
    'move_item',
    'reorder_items',
    'calculate_detailed_stats',
    'calculate_subtopic_progress',
    'calculate_topic_progress',
    'calculate_total_progress',
    'progress_percentage',
    'progress_table',
    'filter_questions',
    'StorageService',
    'SheetStore',
]
