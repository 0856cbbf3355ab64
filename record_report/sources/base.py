"""
Record source protocol and equality filtering.

Record sources are the asynchronous boundary of the system: they fetch
records, and the report engine only runs once they have resolved. Filtering
is plain field equality, applied by the source; there is no query language.

Example:
    >>> records = [{"status": "active"}, {"status": "expired"}]
    >>> apply_filters(records, {"status": "active"})
    [{'status': 'active'}]
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RecordSource(Protocol):
    """
    Protocol for asynchronous record providers.

    Implementations return records as plain dicts, in a stable order, keeping
    only records whose fields equal every filter value.
    """

    async def get_records(
        self, filters: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch records matching all equality filters."""
        ...


def matches_filters(record: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """
    Check whether a record satisfies every equality filter.

    A string filter value also matches a non-string field whose str() form
    is equal, so CLI filters like "year=2024" match integer fields.

    Examples:
        >>> matches_filters({"year": 2024}, {"year": "2024"})
        True
        >>> matches_filters({"status": "active"}, {"status": "expired"})
        False
        >>> matches_filters({}, {"status": "active"})
        False
    """
    for field, expected in filters.items():
        if field not in record:
            return False
        actual = record[field]
        if actual == expected:
            continue
        if isinstance(expected, str) and actual is not None and str(actual) == expected:
            continue
        return False
    return True


def apply_filters(
    records: list[Mapping[str, Any]],
    filters: Mapping[str, Any] | None,
) -> list[dict[str, Any]]:
    """
    Return shallow copies of the records that match all filters, in order.

    Copies keep callers from mutating the source's own data.
    """
    active_filters = filters or {}
    return [
        dict(record) for record in records if matches_filters(record, active_filters)
    ]
