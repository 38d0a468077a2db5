from __future__ import annotations

from typing import List, Sequence

from location_records import LocationRecord

SEARCH_RESULT_LIMIT = 8


def filter_records(records: Sequence[LocationRecord], query: str) -> List[LocationRecord]:
    """Case-insensitive substring match on name, keeping the input order."""
    if not query.strip():
        return list(records)
    needle = query.lower()
    return [record for record in records if needle in record.name.lower()]


def search_results(
    records: Sequence[LocationRecord],
    query: str,
    limit: int = SEARCH_RESULT_LIMIT,
) -> List[LocationRecord]:
    if not query.strip():
        return []
    return filter_records(records, query)[:limit]
