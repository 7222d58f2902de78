"""
Reordering of sibling lists (topics, subtopics or questions).

A drag event arrives as "move item `active_id` to the position of `over_id`".
The moved item is removed and reinserted (not swapped) and every sibling gets
a fresh dense `order` value.
"""

from typing import Any


def find_index(items: list[dict[str, Any]], item_id: str) -> int:
    """Return the index of the item with the given id, or -1."""
    for index, item in enumerate(items):
        if isinstance(item, dict) and item.get("id") == item_id:
            return index
    return -1


def move_item(items: list[dict[str, Any]], old_index: int, new_index: int) -> list[dict[str, Any]]:
    """
    Move one element from old_index to new_index and renumber `order`.

    Args:
        items: Sibling list
        old_index: Current position of the moved item
        new_index: Target position

    Returns:
        New list of copied items with order 0..n-1, or `items` itself when
        either index is -1 or both are equal
    """
    if old_index == -1 or new_index == -1 or old_index == new_index:
        return items
    result = list(items)
    moved = result.pop(old_index)
    result.insert(new_index, moved)
    return [{**item, "order": index} for index, item in enumerate(result)]


def reorder_items(items: list[dict[str, Any]], active_id: str, over_id: str) -> list[dict[str, Any]]:
    """Move the item `active_id` to the position held by `over_id`."""
    if not active_id or not over_id or active_id == over_id:
        return items
    return move_item(items, find_index(items, active_id), find_index(items, over_id))
