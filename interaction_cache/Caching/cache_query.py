"""
Cache Query Module

Pure feed helpers driven by the interaction caches: ordering a feed so unseen
posts come first, merging paginated results, and dropping posts by blocked
authors. Nothing here performs I/O or mutates its inputs.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Container, Iterable, List, Optional, Sequence, Tuple, Union

# Configure logging
logger = logging.getLogger(__name__)

# A set-like container of ids, or a predicate answering "is this id in it?"
Membership = Union[Container[str], Callable[[str], bool]]


def get_item_id(item: Any, id_field: str = "id") -> Optional[str]:
    """
    Read an item's identifier from a mapping key or an attribute.

    Args:
        item: Feed item (dict-like or object)
        id_field: Key or attribute name holding the id

    Returns:
        The id as a string, or None if the item has none
    """
    if isinstance(item, Mapping):
        value = item.get(id_field)
    else:
        value = getattr(item, id_field, None)
    if value is None:
        return None
    return str(value)


def _membership_test(membership: Membership) -> Callable[[str], bool]:
    if callable(membership) and not hasattr(membership, "__contains__"):
        return membership
    return lambda item_id: item_id in membership


def partition_by_seen(items: Iterable[Any],
                      seen: Membership,
                      id_field: str = "id") -> Tuple[List[Any], List[Any]]:
    """
    Split items into (unseen, seen), each keeping the input order.

    Items without an id count as unseen.

    Args:
        items: Feed items
        seen: Seen ids as a container or predicate
        id_field: Key or attribute holding each item's id

    Returns:
        Tuple of (unseen items, seen items)
    """
    is_seen = _membership_test(seen)
    unseen_items = []
    seen_items = []
    for item in items:
        item_id = get_item_id(item, id_field)
        if item_id is not None and is_seen(item_id):
            seen_items.append(item)
        else:
            unseen_items.append(item)
    return unseen_items, seen_items


def sort_unseen_first(items: Iterable[Any], seen: Membership, id_field: str = "id") -> List[Any]:
    """
    Stable partition of a feed: unseen items first, then seen items.

    Args:
        items: Feed items in display order
        seen: Seen ids as a container (set, MembershipCache) or predicate
        id_field: Key or attribute holding each item's id

    Returns:
        New list; relative order within each group is preserved
    """
    unseen_items, seen_items = partition_by_seen(items, seen, id_field)
    return unseen_items + seen_items


def merge_feed_page(current: Sequence[Any],
                    new_items: Iterable[Any],
                    seen: Membership,
                    id_field: str = "id") -> List[Any]:
    """
    Append a freshly loaded page to the feed and re-order it.

    Items of the new page whose id is already in the feed are skipped, so a
    page that overlaps the previous one does not produce duplicates.

    Args:
        current: Feed as currently displayed
        new_items: Items from the next page
        seen: Seen ids as a container or predicate
        id_field: Key or attribute holding each item's id

    Returns:
        Merged feed ordered with unseen items first
    """
    present = {get_item_id(item, id_field) for item in current}
    present.discard(None)

    merged = list(current)
    skipped = 0
    for item in new_items:
        item_id = get_item_id(item, id_field)
        if item_id is not None and item_id in present:
            skipped += 1
            continue
        if item_id is not None:
            present.add(item_id)
        merged.append(item)

    if skipped:
        logger.debug(f"Skipped {skipped} duplicate items while merging feed page")
    return sort_unseen_first(merged, seen, id_field)


def exclude_blocked(items: Iterable[Any],
                    blocked: Membership,
                    author_field: str = "author_id") -> List[Any]:
    """
    Drop items whose author is blocked.

    Args:
        items: Feed items
        blocked: Blocked user ids as a container or predicate
        author_field: Key or attribute holding each item's author id

    Returns:
        New list without items by blocked authors, order preserved
    """
    is_blocked = _membership_test(blocked)
    kept = []
    for item in items:
        author_id = get_item_id(item, author_field)
        if author_id is not None and is_blocked(author_id):
            continue
        kept.append(item)
    return kept
