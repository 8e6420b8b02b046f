"""Page-level tool operations: fetching, deleting and renaming pages."""

from __future__ import annotations

import json
import re
from typing import Any, Protocol, Sequence

from memento.names import names_match
from memento.store import PageExistsError, PageNotFoundError, Store
from memento.timestamp import last_updated_for_file

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class ToolError(Exception):
    """A tool call failed; the message is meant for the caller."""


class Committer(Protocol):
    def commit(self, message: str, files: Sequence[str]) -> None: ...


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _to_int(text: str, what: str) -> int:
    if not _INTEGER_RE.fullmatch(text):
        raise ValueError(f"invalid {what}: {_quote(text)}")
    return int(text)


def parse_line_range(text: str) -> tuple[int, int]:
    """Parse "10-25" or "10" into an inclusive, 1-indexed (start, end) pair."""
    start_text, dash, end_text = text.partition("-")
    if dash:
        return _to_int(start_text, "start"), _to_int(end_text, "end")
    line = _to_int(text, "line number")
    return line, line


def _require(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise ToolError(f"{field} is required")
    return value


def _load(store: Store, name: str):
    try:
        return store.load(name)
    except PageNotFoundError as exc:
        raise ToolError(str(exc)) from exc
    except OSError as exc:
        raise ToolError(f"load page {_quote(name)}: {exc}") from exc


def _run_commit(committer: Committer | None, message: str, files: Sequence[str]) -> list[str]:
    if committer is None:
        return []
    try:
        committer.commit(message, list(files))
    except Exception as exc:  # any commit failure is reported, not fatal
        return [str(exc)]
    return []


def get_page(store: Store, index: Any, page: str, lines: Sequence[str] | None = None) -> dict:
    """Return a page's full content, or the requested line ranges of it."""
    page_name = _require(page, "page")
    loaded = _load(store, page_name)

    full_content = f"# {loaded.name}\n{loaded.body}"
    content_lines = full_content.split("\n")
    total_lines = len(content_lines)

    links_to = list(index.links_to(loaded.name) or [])
    linked_from = list(index.linked_from(loaded.name) or [])
    last_updated = last_updated_for_file(store.file_path(loaded.name))

    response: dict[str, Any] = {"page": loaded.name}

    if lines is None:
        response["content"] = full_content
    else:
        if isinstance(lines, (str, bytes)) or not isinstance(lines, (list, tuple)):
            raise ToolError("lines must be an array of strings")
        sections = []
        for range_text in lines:
            if not isinstance(range_text, str) or not range_text:
                raise ToolError("line range must be a non-empty string")
            try:
                start, end = parse_line_range(range_text)
            except ValueError as exc:
                raise ToolError(f"invalid line range {_quote(range_text)}: {exc}") from exc
            if start < 1 or end > total_lines or start > end:
                raise ToolError(
                    f"line range {_quote(range_text)} out of bounds: page has {total_lines} lines"
                )
            sections.append(
                {"lines": range_text, "content": "\n".join(content_lines[start - 1 : end])}
            )
        response["sections"] = sections

    response["total_lines"] = total_lines
    if last_updated:
        response["last_updated"] = last_updated
    response["links_to"] = links_to
    response["linked_from"] = linked_from
    return response


def delete_page(store: Store, index: Any, page: str, committer: Committer | None = None) -> dict:
    """Delete a page and drop it from the index."""
    page_name = _require(page, "page")
    canonical = _load(store, page_name).name
    page_file = str(store.file_path(canonical))

    try:
        store.delete(page_name)
    except PageNotFoundError as exc:
        raise ToolError(str(exc)) from exc
    except OSError as exc:
        raise ToolError(f"delete page {_quote(page_name)}: {exc}") from exc

    index.remove(canonical)

    response: dict[str, Any] = {"page": canonical}
    failures = _run_commit(committer, f"memento: deleted {_quote(canonical)}", [page_file])
    if failures:
        response["commit_failures"] = failures
    return response


def rename_page(
    store: Store, index: Any, page: str, new_name: str, committer: Committer | None = None
) -> dict:
    """Rename a page and rewrite every wikilink that pointed at the old name."""
    page_name = _require(page, "page")
    target = _require(new_name, "new_name")

    old_name = _load(store, page_name).name
    old_file = str(store.file_path(old_name))
    new_file = str(store.file_path(target))

    try:
        store.rename(old_name, target)
    except (PageNotFoundError, PageExistsError, ValueError, OSError) as exc:
        raise ToolError(str(exc)) from exc

    index.remove(old_name)

    pattern = re.compile(r"\[\[" + re.escape(old_name) + r"\]\]", re.IGNORECASE)
    replacement = f"[[{target}]]"
    commit_files = [old_file, new_file]

    for scanned in store.scan():
        new_body = pattern.sub(lambda _m: replacement, scanned.body)
        if new_body != scanned.body:
            try:
                updated = store.write(scanned.name, new_body)
            except (ValueError, OSError):
                continue
            index.add(updated)
            commit_files.append(str(store.file_path(scanned.name)))
        elif names_match(scanned.name, target):
            index.add(scanned)

    response: dict[str, Any] = {"page": target, "old_name": old_name}
    failures = _run_commit(
        committer, f"memento: renamed {_quote(old_name)} to {_quote(target)}", commit_files
    )
    if failures:
        response["commit_failures"] = failures
    return response