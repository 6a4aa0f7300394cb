"""
Ranking of idea listings.

Pure functions over aggregate rows: no database access, no clock. The order
produced for a given input is always the same, so pagination over a ranked
listing is stable.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

import models.schemas as schemas


def _normalize(text: str) -> str:
    return text.casefold()


def filter_rows(
    rows: Iterable[schemas.IdeaAggregate],
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[schemas.IdeaAggregate]:
    """
    Keep rows that carry ``category`` and whose title or description
    contains ``search`` (case-insensitive).

    Blank filters are ignored.
    """
    category_name = category.strip().lower() if category else ""
    needle = _normalize(search.strip()) if search else ""

    result = []
    for row in rows:
        if category_name and category_name not in {c.name for c in row.categories}:
            continue
        if needle and not (
            needle in _normalize(row.title) or needle in _normalize(row.description)
        ):
            continue
        result.append(row)
    return result


def _timestamp(value: datetime) -> float:
    # SQLite hands back naive values; they are stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def rank(
    rows: Iterable[schemas.IdeaAggregate],
    policy: schemas.RankingPolicy = schemas.RankingPolicy.NEWEST,
) -> List[schemas.IdeaAggregate]:
    """
    Order rows by a ranking policy.

    - newest: created_at descending, then id ascending
    - popular: vote_count descending, then created_at descending, then id
      ascending

    Args:
        rows: Aggregate rows
        policy: Ranking policy

    Returns:
        New list in ranked order
    """
    if policy == schemas.RankingPolicy.POPULAR:
        return sorted(
            rows, key=lambda r: (-r.vote_count, -_timestamp(r.created_at), r.id)
        )
    return sorted(rows, key=lambda r: (-_timestamp(r.created_at), r.id))


def paginate(
    rows: Sequence[schemas.IdeaAggregate], skip: int = 0, limit: Optional[int] = None
) -> List[schemas.IdeaAggregate]:
    """Slice a ranked listing; a negative skip counts as 0."""
    start = max(skip, 0)
    if limit is None:
        return list(rows[start:])
    return list(rows[start : start + max(limit, 0)])
