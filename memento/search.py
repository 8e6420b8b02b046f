"""Relevance-ranked search over pages, with graph-connected page details."""

from __future__ import annotations

import json
from typing import Any

from memento.page_tools import ToolError
from memento.store import PageNotFoundError, Store
from memento.timestamp import last_updated_for_file

_DEFAULT_MAX_RESULTS = 10
_SNIPPET_LIMIT = 300
# Line 1 of a stored page is its heading, so the body starts at line 2.
_BODY_START_LINE = 2


def first_body_paragraph(body: str) -> str:
    """Return the first paragraph of a page body, cut to at most 300 bytes."""
    paragraph = body.strip().partition("\n\n")[0].strip()
    encoded = paragraph.encode("utf-8")
    if len(encoded) > _SNIPPET_LIMIT:
        paragraph = encoded[:_SNIPPET_LIMIT].decode("utf-8", errors="ignore")
    return paragraph


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return int(value)
    return default


def _count_tokens(obj: dict) -> int:
    return len(json.dumps(obj, ensure_ascii=False, separators=(",", ":")).split())


def _linked_entry(store: Store, name: str, snippet: str, line: int) -> dict:
    entry: dict[str, Any] = {"page": name}
    stamp = last_updated_for_file(store.file_path(name))
    if stamp:
        entry["last_updated"] = stamp
    entry["snippet"] = snippet
    entry["line"] = line
    return entry


def _try_load(store: Store, name: str):
    try:
        return store.load(name)
    except (PageNotFoundError, OSError):
        return None


def search(
    store: Store,
    index: Any,
    query: str,
    max_results: int | float | None = None,
    max_tokens: int | float | None = None,
) -> dict:
    """Query the index and return ranked results plus linked page details.

    Direct matches become ``results``; pages reached through wikilinks, and
    results that only scored through the link graph, are listed once each in
    ``linked_page_details``. A positive ``max_tokens`` stops adding results
    once the whitespace-separated token count of the output would exceed it.
    """
    if query is None:
        raise ToolError("query is required")
    if not isinstance(query, str) or not query:
        raise ToolError("query must not be empty")

    limit = _positive_int(max_results, _DEFAULT_MAX_RESULTS)
    budget = _positive_int(max_tokens, 0)

    raw_results = list(index.search(query, limit))
    top_score = raw_results[0].score if raw_results else 0.0

    direct = [r for r in raw_results if r.is_direct]
    direct_names = {r.page.lower() for r in direct}

    linked_details: list[dict] = []
    seen_linked: set[str] = set()

    results: list[dict] = []
    token_count = 0

    for result in direct:
        relevance = result.score / top_score if top_score > 0 else 0.0

        new_details: list[dict] = []
        pending: set[str] = set()

        def collect(name: str) -> None:
            linked = _try_load(store, name)
            if linked is None:
                return
            key = linked.name.lower()
            if key in seen_linked or key in direct_names or key in pending:
                return
            pending.add(key)
            new_details.append(
                _linked_entry(
                    store, linked.name, first_body_paragraph(linked.body), _BODY_START_LINE
                )
            )

        linked_names = []
        for target in index.links_to(result.page) or []:
            linked = _try_load(store, target)
            if linked is None:
                continue
            linked_names.append(linked.name)
            collect(target)

        # Pages that link to this result, and what else they link to.
        for referrer in index.linked_from(result.page) or []:
            for co_linked in index.links_to(referrer) or []:
                collect(co_linked)

        entry: dict[str, Any] = {"page": result.page, "relevance": relevance}
        stamp = last_updated_for_file(store.file_path(result.page))
        if stamp:
            entry["last_updated"] = stamp
        entry["snippet"] = result.snippet
        entry["line"] = result.line
        entry["linked_pages"] = linked_names

        if budget > 0:
            cost = _count_tokens(entry) + sum(_count_tokens(d) for d in new_details)
            if token_count + cost > budget:
                break
            token_count += cost

        for detail in new_details:
            seen_linked.add(detail["page"].lower())
            linked_details.append(detail)
        results.append(entry)

    for result in raw_results:
        if result.is_direct:
            continue
        key = result.page.lower()
        if key in seen_linked or key in direct_names:
            continue
        seen_linked.add(key)
        linked_details.append(_linked_entry(store, result.page, result.snippet, result.line))

    return {"results": results, "linked_page_details": linked_details}