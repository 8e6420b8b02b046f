import os

import pytest

from memento.listing import list_pages, matches_filter
from memento.names import names_match
from memento.store import Store


class FakeIndex:
    def __init__(self):
        self.links = {}

    def add(self, page):
        self.links[page.name] = list(page.wiki_links)

    def remove(self, name):
        for key in [k for k in self.links if names_match(k, name)]:
            del self.links[key]

    def links_to(self, name):
        for key, links in self.links.items():
            if names_match(key, name):
                return links
        return []

    def linked_from(self, name):
        return [src for src, links in self.links.items() if any(names_match(l, name) for l in links)]


@pytest.fixture
def env(tmp_path):
    return Store(tmp_path), FakeIndex()


def write(env, name, content="Content."):
    store, index = env
    index.add(store.write(name, content))


def position(pages, name):
    return pages.index(name)


def test_matches_filter_all_keywords():
    assert matches_filter("Combat Spells", ["combat", "spells"]) is True
    assert matches_filter("Combat Tactics", ["combat", "spells"]) is False
    assert matches_filter("Anything", []) is True


def test_sort_alphabetical(env):
    for name in ["Zebra Notes", "Apple Guide", "Mango Tips", "Banana Facts"]:
        write(env, name)
    resp = list_pages(*env, sort_by="alphabetical")
    assert resp["total"] == 4
    assert resp["pages"] == ["Apple Guide", "Banana Facts", "Mango Tips", "Zebra Notes"]


def test_sort_alphabetical_case_insensitive(env):
    for name in ["zebra notes", "Apple Guide", "mango tips"]:
        write(env, name)
    resp = list_pages(*env, sort_by="alphabetical")
    assert resp["pages"] == ["Apple Guide", "mango tips", "zebra notes"]


def test_sort_most_linked(env):
    write(env, "Hub", "Hub concept.")
    write(env, "Medium", "Medium concept.")
    write(env, "Orphan", "Orphan concept.")
    write(env, "Linker A", "See [[Hub]].")
    write(env, "Linker B", "See [[Hub]].")
    write(env, "Linker C", "See [[Hub]] and [[Medium]].")
    pages = list_pages(*env, sort_by="most_linked")["pages"]
    assert position(pages, "Hub") < position(pages, "Medium") < position(pages, "Orphan")


def test_sort_least_linked(env):
    write(env, "Busy", "Busy concept.")
    write(env, "Quiet", "Quiet concept.")
    write(env, "Lonely", "Lonely concept.")
    write(env, "Ref A", "See [[Busy]].")
    write(env, "Ref B", "See [[Busy]].")
    write(env, "Ref C", "See [[Busy]] and [[Quiet]].")
    pages = list_pages(*env, sort_by="least_linked")["pages"]
    assert position(pages, "Lonely") < position(pages, "Quiet") < position(pages, "Busy")


def test_sort_least_linked_zero_inbound_first(env):
    write(env, "Linked Page", "Linked content.")
    write(env, "Orphan Page", "Orphan content.")
    write(env, "Pointer", "See [[Linked Page]].")
    resp = list_pages(*env, sort_by="least_linked", keywords=["Page"])
    assert resp["pages"] == ["Orphan Page", "Linked Page"]


@pytest.mark.parametrize("sort_by", ["most_linked", "least_linked"])
def test_sort_link_count_tiebreak_alphabetical(env, sort_by):
    write(env, "Zeta Topic")
    write(env, "Alpha Topic")
    write(env, "Mu Topic")
    write(env, "Link To Zeta", "See [[Zeta Topic]].")
    write(env, "Link To Alpha", "See [[Alpha Topic]].")
    write(env, "Link To Mu", "See [[Mu Topic]].")
    resp = list_pages(*env, sort_by=sort_by, keywords=["Topic"])
    assert resp["pages"] == ["Alpha Topic", "Mu Topic", "Zeta Topic"]


def test_filter_single_keyword(env):
    write(env, "Combat Spells")
    write(env, "Combat Tactics")
    write(env, "Healing Arts")
    resp = list_pages(*env, keywords=["Combat"])
    assert resp["total"] == 2
    assert sorted(resp["pages"]) == ["Combat Spells", "Combat Tactics"]


def test_filter_multi_keyword_and_semantics(env):
    write(env, "Combat Spells")
    write(env, "Combat Tactics")
    write(env, "Healing Spells")
    resp = list_pages(*env, keywords=["Combat", "Spells"])
    assert resp["total"] == 1
    assert resp["pages"] == ["Combat Spells"]


def test_filter_case_insensitive(env):
    write(env, "Combat Spells")
    write(env, "Combat Tactics")
    write(env, "Healing Arts")
    lower = list_pages(*env, keywords=["combat"])
    upper = list_pages(*env, keywords=["COMBAT"])
    assert lower["pages"] == upper["pages"] == ["Combat Spells", "Combat Tactics"]
    assert lower["total"] == upper["total"] == 2


def test_filter_empty_returns_all(env):
    for name in ["Alpha", "Beta", "Gamma"]:
        write(env, name)
    no_filter = list_pages(*env)
    empty_filter = list_pages(*env, keywords=[])
    assert no_filter["total"] == 3
    assert no_filter == empty_filter


def test_filter_no_match(env):
    write(env, "Alpha")
    write(env, "Beta")
    resp = list_pages(*env, keywords=["xyznonexistentterm"])
    assert resp["pages"] == []
    assert resp["total"] == 0


FIVE = ["Alpha Page", "Beta Page", "Charlie Page", "Delta Page", "Echo Page"]


@pytest.mark.parametrize(
    "offset, expected",
    [(0, ["Alpha Page", "Beta Page"]), (2, ["Charlie Page", "Delta Page"]), (4, ["Echo Page"])],
)
def test_pagination_windows(env, offset, expected):
    for name in FIVE:
        write(env, name)
    resp = list_pages(*env, sort_by="alphabetical", limit=2, offset=offset)
    assert resp == {"pages": expected, "total": 5, "offset": offset, "limit": 2}


def test_pagination_offset_past_end(env):
    for name in FIVE[:3]:
        write(env, name)
    resp = list_pages(*env, limit=2, offset=10)
    assert resp["total"] == 3
    assert resp["pages"] == []


def test_pagination_total_reflects_filter(env):
    for name in ["Special Alpha", "Special Beta", "Special Gamma", "Other Delta", "Other Echo"]:
        write(env, name)
    resp = list_pages(*env, keywords=["Special"], limit=1, offset=0)
    assert resp["total"] == 3
    assert len(resp["pages"]) == 1


def test_pagination_walk_all_pages(env):
    names = ["Page A", "Page B", "Page C", "Page D", "Page E"]
    for name in names:
        write(env, name)
    collected = []
    offset = 0
    while True:
        resp = list_pages(*env, sort_by="alphabetical", limit=2, offset=offset)
        collected.extend(resp["pages"])
        offset += 2
        if offset >= resp["total"]:
            break
    assert collected == names


def test_default_sort_is_alphabetical(env):
    for name in ["Zebra", "Apple", "Mango"]:
        write(env, name)
    assert list_pages(*env)["pages"] == ["Apple", "Mango", "Zebra"]


def test_default_limit_is_fifty(env):
    for i in range(60):
        write(env, f"Default Limit Page {i:02d}")
    resp = list_pages(*env)
    assert resp["total"] == 60
    assert len(resp["pages"]) == 50
    assert resp["limit"] == 50


def test_default_limit_fewer_than_fifty_returns_all(env):
    for i in range(10):
        write(env, f"Small Brain Page {i}")
    resp = list_pages(*env)
    assert resp["total"] == 10
    assert len(resp["pages"]) == 10


def test_default_offset_is_zero(env):
    for name in ["Alpha", "Beta", "Gamma"]:
        write(env, name)
    resp = list_pages(*env)
    assert resp["offset"] == 0
    assert resp["pages"][0] == "Alpha"


def test_non_positive_limit_and_negative_offset_use_defaults(env):
    write(env, "Alpha")
    resp = list_pages(*env, limit=0, offset=-3)
    assert resp["limit"] == 50
    assert resp["offset"] == 0


def test_empty_brain(env):
    resp = list_pages(*env)
    assert resp == {"pages": [], "total": 0, "offset": 0, "limit": 50}


def test_single_page_brain(env):
    write(env, "Only Page", "Sole content.")
    resp = list_pages(*env)
    assert resp["total"] == 1
    assert resp["pages"] == ["Only Page"]


@pytest.mark.parametrize("sort_by", ["least_linked", "most_linked"])
def test_stable_tiebreak_deterministic(env, sort_by):
    write(env, "Isolated Zeta", "No links.")
    write(env, "Isolated Alpha", "No links.")
    write(env, "Isolated Mu", "No links.")
    resp = list_pages(*env, sort_by=sort_by, keywords=["Isolated"])
    assert resp["pages"] == ["Isolated Alpha", "Isolated Mu", "Isolated Zeta"]


def test_filter_combined_with_least_linked(env):
    write(env, "Spell Hub", "Central spell reference.")
    write(env, "Spell Orphan", "An isolated spell.")
    write(env, "Unrelated Page", "No spells here.")
    write(env, "Ref X", "See [[Spell Hub]].")
    write(env, "Ref Y", "See [[Spell Hub]].")
    for i in range(1, 4):
        write(env, f"Ref W{i}", "See [[Unrelated Page]].")
    resp = list_pages(*env, sort_by="least_linked", keywords=["Spell"])
    assert resp["total"] == 2
    assert resp["pages"] == ["Spell Orphan", "Spell Hub"]


def test_output_names_only(env):
    write(env, "Name Only Page", "This body content must not appear in list_pages output.")
    assert list_pages(*env)["pages"] == ["Name Only Page"]


def test_reflects_writes(env):
    write(env, "First Page")
    assert list_pages(*env)["total"] == 1
    write(env, "Second Page")
    resp = list_pages(*env)
    assert resp["total"] == 2
    assert "Second Page" in resp["pages"]


def test_reflects_deletes(env):
    store, _ = env
    write(env, "Keep Page")
    write(env, "Delete Page")
    store.delete("Delete Page")
    resp = list_pages(*env)
    assert resp["total"] == 1
    assert resp["pages"] == ["Keep Page"]


def _set_mtimes(store, stamps):
    for name, stamp in stamps.items():
        os.utime(store.file_path(name), (stamp, stamp))


@pytest.mark.parametrize(
    "sort_by, expected",
    [("newest", ["Recent", "Middle", "Ancient"]), ("oldest", ["Ancient", "Middle", "Recent"])],
)
def test_time_sorts_return_objects(env, sort_by, expected):
    store, _ = env
    for name in ["Ancient", "Middle", "Recent"]:
        write(env, name)
    _set_mtimes(store, {"Ancient": 1_000_000_000, "Middle": 1_100_000_000, "Recent": 1_200_000_000})
    resp = list_pages(*env, sort_by=sort_by)
    assert [item["page"] for item in resp["pages"]] == expected
    assert resp["total"] == 3


def test_time_sort_pins_last_updated(env):
    store, _ = env
    write(env, "Ancient")
    _set_mtimes(store, {"Ancient": 1_000_000_000})
    resp = list_pages(*env, sort_by="newest")
    assert resp["pages"] == [{"page": "Ancient", "last_updated": "2001-09-09T01:46:40Z"}]