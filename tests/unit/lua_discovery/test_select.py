from __future__ import annotations

import pytest

from luaenv.lua_discovery import (
    ZERO,
    Candidate,
    Family,
    NoInterpreterFoundError,
    SelectionPolicy,
    Version,
    VersionRange,
    parse_api_range,
    parse_jit_range,
    parse_release_range,
)

REF = Family.REFERENCE
JIT = Family.JIT


def candidate(path, api, release, family=REF):
    return Candidate(path, family, Version(*api), Version(*release))


def test_higher_api_and_release_wins():
    policy = SelectionPolicy(release_range=parse_release_range("5.1-5.3"))
    winner = policy.select([candidate("/a/lua5.1", (5, 1), (5, 1, 5)), candidate("/b/lua5.3", (5, 3), (5, 3, 4))])
    assert winner.path == "/b/lua5.3"


def test_first_seen_wins_exact_tie():
    first = candidate("/a/lua", (5, 3), (5, 3, 6))
    second = candidate("/b/lua", (5, 3), (5, 3, 6))
    assert SelectionPolicy().select([first, second]) is first


def test_lower_api_never_displaces():
    first = candidate("/a/lua5.4", (5, 4), (5, 4, 0))
    second = candidate("/b/lua5.3", (5, 3), (5, 3, 6))
    assert SelectionPolicy().select([first, second]) is first


def test_equal_api_needs_strictly_higher_release():
    first = candidate("/a/lua", (5, 4), (5, 4, 4))
    second = candidate("/b/lua", (5, 4), (5, 4, 6))
    assert SelectionPolicy().select([first, second]) is second
    assert SelectionPolicy().select([second, first]) is second


def test_selection_is_deterministic():
    candidates = [
        candidate("/a/lua5.2", (5, 2), (5, 2, 4)),
        candidate("/b/luajit", (5, 1), (2, 1, 0), JIT),
        candidate("/c/lua5.4", (5, 4), (5, 4, 6)),
        candidate("/d/lua", (5, 4), (5, 4, 6)),
    ]
    policy = SelectionPolicy()
    assert policy.select(candidates) == policy.select(list(candidates))
    assert policy.select(candidates).path == "/c/lua5.4"


def test_unprobable_api_never_selected():
    policy = SelectionPolicy(parse_api_range("0-"), parse_release_range("0-"))
    unprobed = Candidate("/a/lua", REF, ZERO, Version(5, 4, 6))
    assert not policy.accepts(unprobed)
    with pytest.raises(NoInterpreterFoundError):
        policy.select([unprobed])


def test_api_outside_range_rejected():
    policy = SelectionPolicy(api_range=parse_api_range("5.2-5.3"))
    assert not policy.accepts(candidate("/a/lua", (5, 1), (5, 1, 5)))
    assert policy.accepts(candidate("/a/lua", (5, 3), (5, 3, 6)))


def test_jit_dual_range():
    policy = SelectionPolicy(release_range=parse_release_range("5.1-"), jit_range=parse_jit_range("2.0-"))
    assert policy.accepts(candidate("/a/luajit", (5, 1), (2, 1, 0), JIT))
    assert not policy.accepts(candidate("/a/lua", (5, 1), (2, 1, 0), REF))


def test_excluded_jit_range_rejects_jit():
    policy = SelectionPolicy(release_range=parse_release_range("5.1-"), jit_range=VersionRange.EMPTY)
    assert not policy.accepts(candidate("/a/luajit", (5, 1), (2, 1, 0), JIT))
    assert not policy.accepts(Candidate("/a/luajit", JIT, Version(5, 1), ZERO))


def test_jit_only_rejects_reference():
    policy = SelectionPolicy(release_range=VersionRange.EMPTY)
    assert not policy.accepts(Candidate("/a/lua", REF, Version(5, 1), ZERO))
    assert policy.accepts(candidate("/a/luajit", (5, 1), (2, 1, 0), JIT))


def test_nothing_found_names_ranges():
    policy = SelectionPolicy(release_range=parse_release_range("5.2"))
    with pytest.raises(NoInterpreterFoundError, match=r"release within 5\.2\.0-5\.2\.99"):
        policy.select([candidate("/a/lua5.3", (5, 3), (5, 3, 4))])


def test_select_consumes_lazily():
    seen = []

    def proposed():
        for at in range(3):
            seen.append(at)
            yield candidate(f"/{at}/lua", (5, 3), (5, 3, at))

    assert SelectionPolicy().select(proposed()).path == "/2/lua"
    assert seen == [0, 1, 2]
