from typing import List, Optional, Sequence

from maps_directory.models import Record


def _contains(text: Optional[str], needle: str) -> bool:
    return text is not None and needle in text.casefold()


def matches(record: Record, query: str) -> bool:
    """True if the record's name or address contains ``query``, ignoring case.

    An empty or whitespace-only query matches nothing.
    """
    needle = (query or "").strip().casefold()
    if not needle:
        return False
    return _contains(record.name, needle) or _contains(record.address, needle)


def visible(records: Sequence[Record], query: str, show_all: bool) -> List[Record]:
    """
    Compute the subset of records to display.

    A non-empty query always narrows the result, whatever ``show_all`` says.
    With no query, ``show_all`` decides between everything and nothing.

    Args:
        records (Sequence[Record]): Records of the active category.
        query (str): Free-text search; surrounding whitespace is ignored.
        show_all (bool): Whether to list every record when there is no query.

    Returns:
        List[Record]: Matching records in input order.
    """
    needle = (query or "").strip().casefold()
    if not needle:
        return list(records) if show_all else []
    return [r for r in records if _contains(r.name, needle) or _contains(r.address, needle)]
