"""Page-name validation, normalisation and filename mapping."""

from __future__ import annotations

# Characters rejected in page names: illegal on at least one of Windows,
# macOS, Linux, iOS or Android (the same set Obsidian refuses).
_FORBIDDEN_CHARS = frozenset('*"[]#^|<>:?/\\')

_MAX_STEM_LENGTH = 200
_EXTENSION = ".md"


def validate_name(name: str) -> str:
    """Check that *name* is a usable page name and return its filename.

    Raises ValueError if the name is empty, starts with '.', or contains a
    forbidden character.
    """
    if not name:
        raise ValueError("page name must not be empty")
    if name.startswith("."):
        raise ValueError("page name must not start with '.'")
    for char in name:
        if char in _FORBIDDEN_CHARS:
            raise ValueError(f"page name contains forbidden character {char!r}")
    return name_to_filename(name)


def normalize(name: str) -> str:
    """Return the canonical form of a name: lower case, whitespace collapsed."""
    return " ".join(name.split()).lower()


def name_to_filename(name: str) -> str:
    """Map a page name to its filename, truncating the stem to 200 characters."""
    return name[:_MAX_STEM_LENGTH] + _EXTENSION


def filename_to_name(filename: str) -> str:
    """Map a filename back to a page name by dropping the '.md' suffix."""
    return filename.removesuffix(_EXTENSION)


def names_match(a: str, b: str) -> bool:
    """Report whether two names refer to the same page."""
    return normalize(a) == normalize(b)