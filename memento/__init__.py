"""Markdown page storage, editing, listing and search helpers for a wikilinked brain."""

__version__ = "0.1.0"