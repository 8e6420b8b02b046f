"""Listing of page names with filtering, sorting and pagination."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from memento.store import Store
from memento.timestamp import last_updated_for_file

_DEFAULT_SORT = "alphabetical"
_DEFAULT_LIMIT = 50
_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def matches_filter(name: str, keywords: Iterable[str]) -> bool:
    """Report whether *name* contains every keyword, ignoring case.

    An empty collection of keywords matches every name.
    """
    lower = name.lower()
    return all(keyword.lower() in lower for keyword in keywords)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_timestamp(stamp: str) -> datetime:
    if not stamp:
        return _EARLIEST
    text = stamp[:-1] + "+00:00" if stamp.endswith(("Z", "z")) else stamp
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return _EARLIEST
    if moment.tzinfo is None:
        return _EARLIEST
    return moment


def _clean_keywords(keywords: Any) -> list[str]:
    if not isinstance(keywords, (list, tuple)):
        return []
    return [kw.lower() for kw in keywords if isinstance(kw, str) and kw]


def list_pages(
    store: Store,
    index: Any,
    sort_by: str | None = None,
    limit: int | float | None = None,
    offset: int | float | None = None,
    keywords: Iterable[str] | None = None,
) -> dict:
    """Return a sorted, filtered, paginated listing of page names.

    ``sort_by`` is one of "alphabetical" (default), "least_linked",
    "most_linked", "newest" or "oldest". The time-based orders return page
    objects carrying ``last_updated`` instead of plain names.
    """
    order = sort_by if isinstance(sort_by, str) and sort_by else _DEFAULT_SORT
    page_limit = int(limit) if _is_number(limit) and limit > 0 else _DEFAULT_LIMIT
    skip = int(offset) if _is_number(offset) and offset >= 0 else 0
    filters = _clean_keywords(keywords)

    filtered = [page for page in store.scan() if matches_filter(page.name, filters)]
    total = len(filtered)
    start = min(skip, total)
    end = min(start + page_limit, total)

    if order in ("newest", "oldest"):
        entries = []
        for page in filtered:
            stamp = last_updated_for_file(store.file_path(page.name))
            entries.append((page.name, stamp, _parse_timestamp(stamp)))
        entries.sort(key=lambda entry: entry[2], reverse=order == "newest")
        objects = []
        for name, stamp, _ in entries[start:end]:
            item = {"page": name}
            if stamp:
                item["last_updated"] = stamp
            objects.append(item)
        return {"pages": objects, "total": total, "offset": skip, "limit": page_limit}

    def inbound(name: str) -> int:
        return len(index.linked_from(name) or [])

    if order == "most_linked":
        filtered.sort(key=lambda page: (-inbound(page.name), page.name.lower()))
    elif order == "least_linked":
        filtered.sort(key=lambda page: (inbound(page.name), page.name.lower()))
    else:
        filtered.sort(key=lambda page: page.name.lower())

    names = [page.name for page in filtered[start:end]]
    return {"pages": names, "total": total, "offset": skip, "limit": page_limit}