"""
Grouping engine: partitions a flat record collection into date-keyed groups.

Groups are rebuilt from scratch on every change to the underlying records;
there is no incremental diffing.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from labdesk.domain.models import Group, Record


def group(records: Iterable[Record]) -> Tuple[Group, ...]:
    """
    Bucket records by their date key.

    Keys are sorted newest first (ISO dates compare lexicographically); records
    keep their input order within a group. Only the most recent group starts
    expanded.
    """
    buckets: Dict[str, List[Record]] = {}
    for record in records:
        buckets.setdefault(record.group_key, []).append(record)

    keys = sorted(buckets, reverse=True)
    return tuple(
        Group(key=key, records=tuple(buckets[key]), expanded=index == 0)
        for index, key in enumerate(keys)
    )


def toggle_expanded(groups: Sequence[Group], key: str) -> Tuple[Group, ...]:
    """Flip the expand state of the group with `key`; other groups are untouched."""
    return tuple(
        g.model_copy(update={"expanded": not g.expanded}) if g.key == key else g
        for g in groups
    )


def find_group(groups: Sequence[Group], key: str) -> Optional[Group]:
    for g in groups:
        if g.key == key:
            return g
    return None


def filter_by_date_range(
    records: Iterable[Record],
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[Record]:
    """
    Keep records whose date key lies within ``[start, end]``.

    Bounds are ISO dates (``YYYY-MM-DD``) and either may be omitted.
    """
    kept: List[Record] = []
    for record in records:
        key = record.group_key
        if start is not None and key < start:
            continue
        if end is not None and key > end:
            continue
        kept.append(record)
    return kept


__all__ = ["filter_by_date_range", "find_group", "group", "toggle_expanded"]
