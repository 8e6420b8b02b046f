"""Targeted, atomic edits to an existing page."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Sequence

from memento.page_tools import ToolError, parse_line_range
from memento.store import PageNotFoundError, Store

_CREATE_CAPABLE = frozenset({"append", "prepend"})
_NEEDS_PAGE = frozenset({"replace", "replace_lines"})


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _text(data: Mapping, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class PatchOp:
    """One edit: "replace", "replace_lines", "append" or "prepend"."""

    op: str
    old: str = ""
    new: str = ""
    lines: str = ""
    content: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PatchOp":
        """Build an operation from a JSON-style object; non-string fields are ignored."""
        if not isinstance(data, Mapping):
            raise TypeError("must be an object")
        op = _text(data, "op")
        if not op:
            raise ValueError("'op' field is required")
        return cls(
            op=op,
            old=_text(data, "old"),
            new=_text(data, "new"),
            lines=_text(data, "lines"),
            content=_text(data, "content"),
        )


def _parse_operations(operations: Any) -> list[PatchOp]:
    if operations is None:
        raise ToolError("operations is required")
    if not isinstance(operations, (list, tuple)):
        raise ToolError("operations must be an array")
    ops = []
    for i, raw in enumerate(operations):
        if isinstance(raw, PatchOp):
            ops.append(raw)
            continue
        try:
            ops.append(PatchOp.from_mapping(raw))
        except TypeError as exc:
            raise ToolError(f"operation {i} must be an object") from exc
        except ValueError as exc:
            raise ToolError(f"operation {i}: {exc}") from exc
    return ops


def _validate(ops: Sequence[PatchOp], full_content: str, total_lines: int) -> None:
    for i, op in enumerate(ops):
        if op.op == "replace":
            if not op.old:
                raise ToolError(f"operation {i}: 'old' is required for replace")
            count = full_content.count(op.old)
            if count == 0:
                raise ToolError(f"operation {i}: text not found: {_quote(op.old)}")
            if count > 1:
                raise ToolError(
                    f"operation {i}: text is ambiguous (appears {count} times): {_quote(op.old)}"
                )
        elif op.op == "replace_lines":
            if not op.lines:
                raise ToolError(f"operation {i}: 'lines' is required for replace_lines")
            try:
                start, end = parse_line_range(op.lines)
            except ValueError as exc:
                raise ToolError(
                    f"operation {i}: invalid lines range {_quote(op.lines)}: {exc}"
                ) from exc
            if start < 1 or end > total_lines or start > end:
                raise ToolError(
                    f"operation {i}: line range {_quote(op.lines)} out of bounds "
                    f"(page has {total_lines} lines)"
                )
        elif op.op not in _CREATE_CAPABLE:
            raise ToolError(f"operation {i}: unknown op {_quote(op.op)}")


def _apply(ops: Sequence[PatchOp], content: str) -> str:
    # Line ranges refer to the original content; the offset tracks how far
    # earlier operations have shifted them.
    line_offset = 0
    for op in ops:
        if op.op == "replace":
            content = content.replace(op.old, op.new, 1)
            line_offset += op.new.count("\n") - op.old.count("\n")
        elif op.op == "replace_lines":
            start, end = parse_line_range(op.lines)
            adj_start, adj_end = start + line_offset, end + line_offset
            lines = content.split("\n")
            new_lines = op.new.split("\n") if op.new else []
            content = "\n".join(lines[: adj_start - 1] + new_lines + lines[adj_end:])
            line_offset += len(new_lines) - (end - start + 1)
        elif op.op == "append":
            content += op.content
        elif op.op == "prepend":
            heading, newline, rest = content.partition("\n")
            if newline:
                content = heading + newline + op.content + rest
            else:
                content += "\n" + op.content
    return content


def _strip_heading(content: str) -> str:
    if content.startswith("# "):
        _, newline, rest = content.partition("\n")
        return rest if newline else ""
    return content


def patch_page(
    store: Store, index: Any, page: str, operations: Any, committer: Any = None
) -> dict:
    """Apply all *operations* to a page atomically and re-index it.

    A missing page is created when every operation is an append or prepend.
    """
    if not isinstance(page, str) or not page:
        raise ToolError("page is required")
    ops = _parse_operations(operations)

    if not store.exists(page):
        for i, op in enumerate(ops):
            if op.op in _NEEDS_PAGE:
                raise ToolError(f"operation {i}: page {_quote(page)} not found")
        try:
            current = store.write(page, "")
        except (ValueError, OSError) as exc:
            raise ToolError(str(exc)) from exc
    else:
        try:
            current = store.load(page)
        except PageNotFoundError as exc:
            raise ToolError(str(exc)) from exc
        except OSError as exc:
            raise ToolError(f"load page {_quote(page)}: {exc}") from exc

    full_content = f"# {current.name}\n{current.body}"
    _validate(ops, full_content, len(full_content.split("\n")))

    body = _strip_heading(_apply(ops, full_content))
    try:
        updated = store.write(current.name, body)
    except (ValueError, OSError) as exc:
        raise ToolError(str(exc)) from exc

    index.add(updated)

    response: dict[str, Any] = {"page": updated.name, "links_to": list(updated.wiki_links)}
    if committer is not None:
        try:
            committer.commit(
                f"memento: patched {_quote(updated.name)}", [str(store.file_path(updated.name))]
            )
        except Exception as exc:  # commit failures are reported, not fatal
            response["commit_failures"] = [str(exc)]
    return response