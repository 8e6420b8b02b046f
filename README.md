# memento

`memento` manages a "brain": a flat directory of markdown pages joined by
`[[wikilinks]]`. Each page is stored as `<Page Name>.md`, and its first line is
the managed heading `# Page Name`. Obsidian vaults use the same layout.

The package has no third-party dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Page names

Page lookups ignore case and treat any run of whitespace as a single space.

```python
from memento.names import normalize, names_match, validate_name, name_to_filename

normalize("  Crowd\tControl ")                   # "crowd control"
names_match("Crowd Control", "crowd  control")   # True
validate_name("Crowd Control")                   # "Crowd Control.md"
validate_name("Bad:Name")                        # raises ValueError
```

A name is rejected if it is empty, if it starts with `.`, or if it contains any
of these characters: `* " [ ] # ^ | < > : ? / \`. Before the `.md` suffix is
added, `name_to_filename` cuts the name to 200 characters.
`filename_to_name` reverses the mapping.

## Parsing

```python
from memento.parser import parse

page = parse("notes", b"# Notes\n\nSee [[Enchanter]] and `[[not a link]]`.")
page.title        # "Notes"
page.body         # "See [[Enchanter]] and `[[not a link]]`."
page.wiki_links   # ["Enchanter"]
page.lines        # 3
```

The title comes from the first `# ` heading. When there is no such heading, the
title is the name that was passed in. `wiki_links` lists each link target once,
in the order the targets first appear. Links inside inline code spans and
fenced code blocks are skipped.

## The store

```python
from memento.store import Store

store = Store("/path/to/brain")
store.write("Crowd Control", "Abilities that limit [[Enchanter]] targets.")
page = store.load("crowd control")   # page.name == "Crowd Control"
store.rename("Crowd Control", "CC Mechanics")
store.exists("cc mechanics")         # True
store.scan()                         # every page in the directory
store.delete("CC Mechanics")
```

`write` sets the heading itself. If a file is already there under a different
casing of the same name, that file is replaced. `write` and `rename` raise
`ValueError` for an invalid name. `load`, `delete` and `rename` raise
`PageNotFoundError` when the page is missing. `rename` raises `PageExistsError`
when a page with the target name already exists. `file_path(name)` gives the
path where a page of that exact name is stored.

## Tool operations

The functions below work on a store and a link index. Each one returns a
dictionary that can be serialised as JSON, and each one raises
`memento.page_tools.ToolError` when a request is invalid.

- `memento.page_tools.get_page(store, index, page, lines=None)` returns the
  whole page, or only the requested line ranges such as `["10-25", "34"]`. The
  result also holds the total line count, the outbound and inbound links, and
  the last-updated time.
- `memento.page_tools.delete_page(store, index, page, committer=None)` deletes
  a page and removes it from the index.
- `memento.page_tools.rename_page(store, index, page, new_name, committer=None)`
  renames a page and rewrites every `[[Old Name]]` link in the brain. Old names
  are matched case-insensitively.
- `memento.listing.list_pages(store, index, sort_by, limit, offset, keywords)`
  returns page names filtered by keywords, with paging. Every keyword must
  appear in the name, and case is ignored. The sort orders are `alphabetical`
  (the default), `most_linked`, `least_linked`, `newest` and `oldest`. The two
  time-based orders return objects that carry `last_updated`. The default limit
  is 50.
- `memento.patch.patch_page(store, index, page, operations, committer=None)`
  applies `replace`, `replace_lines`, `append` and `prepend` operations, given
  as mappings or `PatchOp` values. Every operation is checked before any is
  applied. Line numbers refer to the page as it was before the patch. If the
  page is missing and every operation is `append` or `prepend`, the page is
  created.
- `memento.search.search(store, index, query, max_results=None, max_tokens=None)`
  returns ranked results with snippets and relevance relative to the top
  result. The default is 10 results. Pages linked from the results are listed
  once in `linked_page_details`. A positive `max_tokens` stops adding results
  once the whitespace-separated token count would go over the budget.

Last-updated times come from `memento.timestamp.last_updated_for_file`. It uses
the time of the most recent git commit that touched the file, and falls back to
the file's modification time. The time is given as an RFC 3339 UTC string.

## What the package does not do

- **No link index or search engine.** The `index` argument must be supplied by
  the caller. It needs these methods:
  - `links_to(name)` and `linked_from(name)`, each returning a list of names;
  - `add(page)` and `remove(name)`;
  - `search(query, limit)`, returning objects with `page`, `score`,
    `is_direct`, `snippet` and `line`.
- **No git integration.** The optional `committer` must also be supplied by
  the caller. It needs a `commit(message, files)` method. If `commit` fails,
  the error text appears under `commit_failures` in the response.
- **No server and no command-line program.**
- **No watching of the directory** for changes made outside the store.