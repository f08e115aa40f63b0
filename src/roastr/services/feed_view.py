"""Client-side filter and sort over an aggregated feed.

Everything here is pure: the same inputs always produce the same ordering,
and items that tie keep their relative input order.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Sequence
from enum import Enum

from roastr.schemas import FeedItem

__all__ = ["SortKey", "apply_view", "controversy_ratio", "filter_by_tags", "sort_feed"]


class SortKey(str, Enum):
    """Orderings offered by the feed."""

    NEWEST = "newest"
    OLDEST = "oldest"
    UPVOTES = "upvotes"
    CONTROVERSIAL = "controversial"


def controversy_ratio(item: FeedItem) -> float:
    """Return ``downvotes / max(upvotes, 1)``.

    This ranks heavily downvoted, rarely upvoted posts first rather than
    posts with an even split of votes.
    """
    return item.downvotes / max(item.upvotes, 1)


def filter_by_tags(items: Sequence[FeedItem], selected_tags: Collection[str]) -> list[FeedItem]:
    """Keep items carrying at least one of ``selected_tags``; empty keeps all."""
    if not selected_tags:
        return list(items)
    selected = set(selected_tags)
    return [item for item in items if any(tag.name in selected for tag in item.tags)]


_SORTS: dict[SortKey, tuple[Callable[[FeedItem], object], bool]] = {
    SortKey.NEWEST: (lambda item: item.created_at, True),
    SortKey.OLDEST: (lambda item: item.created_at, False),
    SortKey.UPVOTES: (lambda item: item.upvotes, True),
    SortKey.CONTROVERSIAL: (controversy_ratio, True),
}


def sort_feed(items: Sequence[FeedItem], sort_key: SortKey | str) -> list[FeedItem]:
    """Return a stably sorted copy of ``items``."""
    key, descending = _SORTS[SortKey(sort_key)]
    # sorted() keeps ties in input order even with reverse=True.
    return sorted(items, key=key, reverse=descending)


def apply_view(
    items: Sequence[FeedItem],
    selected_tags: Collection[str] = (),
    sort_key: SortKey | str = SortKey.NEWEST,
) -> list[FeedItem]:
    """Filter by tag membership, then sort."""
    return sort_feed(filter_by_tags(items, selected_tags), sort_key)
