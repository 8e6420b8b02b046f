"""Filesystem-backed storage of pages in a flat directory of markdown files."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path

from memento.names import filename_to_name, name_to_filename, normalize, validate_name
from memento.parser import Page, parse


class PageNotFoundError(LookupError):
    """Raised when no page matches the requested name."""


class PageExistsError(Exception):
    """Raised when a page with the target name already exists."""


def _manage_heading(name: str, content: str) -> str:
    """Ensure content opens with "# name", replacing any leading H1 line."""
    if content.startswith("# "):
        _, newline, rest = content.partition("\n")
        content = rest if newline else ""
    return f"# {name}\n{content}"


class Store:
    """Page storage with case-insensitive, whitespace-normalised name lookup.

    The H1 heading inside each file is the page's canonical name.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def file_path(self, name: str) -> Path:
        """Return the path a page with this exact name is stored at."""
        return self.directory / name_to_filename(name)

    def _markdown_entries(self) -> list[os.DirEntry[str]]:
        try:
            with os.scandir(self.directory) as it:
                entries = list(it)
        except OSError:
            return []
        return sorted(
            (e for e in entries if e.name.endswith(".md") and not e.is_dir()),
            key=lambda e: e.name,
        )

    def _resolve_path(self, name: str) -> Path | None:
        exact = self.file_path(name)
        if exact.exists():
            return exact
        wanted = normalize(name)
        for entry in self._markdown_entries():
            if normalize(filename_to_name(entry.name)) == wanted:
                return self.directory / entry.name
        return None

    def write(self, name: str, content: str) -> Page:
        """Create or replace a page, managing its heading; return the parsed page."""
        try:
            validate_name(name)
        except ValueError as exc:
            raise ValueError(f"write page {name!r}: {exc}") from exc

        file_content = _manage_heading(name, content)
        new_path = self.file_path(name)

        existing = self._resolve_path(name)
        if existing is not None and existing != new_path:
            existing.unlink()

        new_path.write_bytes(file_content.encode("utf-8"))
        return dataclasses.replace(parse(name, file_content), name=name)

    def load(self, name: str) -> Page:
        """Read a page; its name is taken from the H1 heading in the file."""
        path = self._resolve_path(name)
        if path is None:
            raise PageNotFoundError(f"page not found: {name!r}")
        page = parse(filename_to_name(path.name), path.read_bytes())
        return dataclasses.replace(page, name=page.title)

    def delete(self, name: str) -> None:
        """Remove a page."""
        path = self._resolve_path(name)
        if path is None:
            raise PageNotFoundError(f"page not found: {name!r}")
        path.unlink()

    def rename(self, old_name: str, new_name: str) -> None:
        """Rename a page and rewrite its heading to the new name."""
        try:
            validate_name(new_name)
        except ValueError as exc:
            raise ValueError(f"rename page {old_name!r} -> {new_name!r}: {exc}") from exc

        old_path = self._resolve_path(old_name)
        if old_path is None:
            raise PageNotFoundError(f"page not found: {old_name!r}")
        new_path = self.file_path(new_name)
        if new_path.exists():
            raise PageExistsError(f"page already exists: {new_name!r}")

        data = old_path.read_bytes().decode("utf-8", errors="replace")
        new_path.write_bytes(_manage_heading(new_name, data).encode("utf-8"))
        try:
            old_path.unlink()
        except OSError:
            new_path.unlink(missing_ok=True)
            raise

    def scan(self) -> list[Page]:
        """Parse every markdown file in the directory; unreadable files are skipped."""
        result = []
        for entry in self._markdown_entries():
            try:
                data = Path(entry.path).read_bytes()
            except OSError:
                continue
            page = parse(filename_to_name(entry.name), data)
            result.append(dataclasses.replace(page, name=page.title))
        return result

    def exists(self, name: str) -> bool:
        """Report whether a page with this name exists."""
        return self._resolve_path(name) is not None