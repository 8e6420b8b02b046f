"""Parsing of markdown page content."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_H1_RE = re.compile(r"# (.+)")
_WIKILINK_RE = re.compile(r"\[\[([^\[\]]+)\]\]")
_FENCED_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`[^`]*`")


@dataclass
class Page:
    """A parsed markdown page."""

    name: str
    title: str
    body: str = ""
    wiki_links: list[str] = field(default_factory=list)
    lines: int = 0


def parse(name: str, content: bytes | str) -> Page:
    """Parse page *content*, extracting title, body, wikilinks and line count."""
    raw = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
    lines = _split_lines(raw)

    title = name
    title_index = None
    for i, line in enumerate(lines):
        match = _H1_RE.match(line)
        if match:
            title = match.group(1)
            title_index = i
            break

    body = "\n".join(line for i, line in enumerate(lines) if i != title_index).strip()

    return Page(
        name=name,
        title=title,
        body=body,
        wiki_links=_extract_wiki_links(raw),
        lines=len(lines),
    )


def _split_lines(text: str) -> list[str]:
    if not text:
        return []
    return text.replace("\r\n", "\n").split("\n")


def _blank(match: re.Match[str]) -> str:
    return " " * len(match.group(0))


def _extract_wiki_links(text: str) -> list[str]:
    """Return unique wikilink targets outside fenced blocks and inline code."""
    text = _FENCED_BLOCK_RE.sub(_blank, text)
    text = _INLINE_CODE_RE.sub(_blank, text)
    return list(dict.fromkeys(m.group(1) for m in _WIKILINK_RE.finditer(text) if m.group(1)))