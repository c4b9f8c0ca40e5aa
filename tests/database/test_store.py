from __future__ import annotations

import pytest

from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.enums.owner_kind import OwnerKind
from mehu.domain.errors import ConstraintViolation, NotFound


def _counters(store, media_id):
    return {t.text: t.counter for t in store.tags_for_media(media_id)}


def _bump(store, media_id, prefix, times=1):
    for _ in range(times):
        store.bump_tag_counter(media_id, prefix)


# ---------------------------------------------------------------- media / tags

def test_upsert_media_is_idempotent(store):
    a = store.upsert_media("AgAD-1", MediaKind.photo)
    b = store.upsert_media("AgAD-1", MediaKind.photo)
    assert a == b

    # same file reference under another kind is a different media
    c = store.upsert_media("AgAD-1", MediaKind.animated_gif)
    assert c != a

    m = store.fetch_media_by_id(a)
    assert m.file_reference == "AgAD-1"
    assert m.kind is MediaKind.photo


def test_upsert_tag_folds_case_and_never_touches_counter(store):
    mid = store.upsert_media("AgAD-2", MediaKind.photo)
    t1 = store.upsert_tag(mid, "Red")
    _bump(store, mid, "red")
    t2 = store.upsert_tag(mid, "RED")

    assert t1 == t2
    assert _counters(store, mid) == {"red": 1}


def test_upsert_tag_rejects_blank(store):
    mid = store.upsert_media("AgAD-3", MediaKind.photo)
    with pytest.raises(ValueError):
        store.upsert_tag(mid, "   ")


def test_upsert_tag_for_missing_media_is_constraint_violation(store):
    with pytest.raises(ConstraintViolation):
        store.upsert_tag(9999, "orphan")


def test_bump_counter_uses_case_sensitive_prefix(store):
    mid = store.upsert_media("AgAD-4", MediaKind.photo)
    other = store.upsert_media("AgAD-5", MediaKind.photo)
    for t in ("red", "redwood", "blue"):
        store.upsert_tag(mid, t)
    store.upsert_tag(other, "red")

    assert store.bump_tag_counter(mid, "red") == 2
    assert _counters(store, mid) == {"red": 1, "redwood": 1, "blue": 0}
    # other media untouched
    assert _counters(store, other) == {"red": 0}

    # stored tags are lower case, so an upper-case prefix matches nothing
    assert store.bump_tag_counter(mid, "Red") == 0
    # no LIKE wildcards
    assert store.bump_tag_counter(mid, "r%") == 0
    assert store.bump_tag_counter(mid, "_ed") == 0


def test_fetch_media_by_id_missing(store):
    with pytest.raises(NotFound):
        store.fetch_media_by_id(12345)


# ---------------------------------------------------------------- ranking

def test_query_media_ranks_by_total_counter(store):
    a = store.upsert_media("A", MediaKind.photo)
    b = store.upsert_media("B", MediaKind.animated_gif)
    store.upsert_tag(a, "cat")
    store.upsert_tag(b, "dog")
    store.upsert_tag(b, "dot")
    _bump(store, a, "cat", times=5)
    _bump(store, b, "do", times=1)  # dog=1, dot=1

    rows = store.query_media()
    assert [r.id for r in rows] == [a, b]
    assert [r.score for r in rows] == [5, 2]


def test_query_media_skips_untagged_and_breaks_ties_by_age(store):
    untagged = store.upsert_media("U", MediaKind.photo)
    first = store.upsert_media("F", MediaKind.photo)
    second = store.upsert_media("S", MediaKind.photo)
    store.upsert_tag(second, "x")
    store.upsert_tag(first, "y")

    ids = [r.id for r in store.query_media()]
    assert untagged not in ids
    assert ids == [first, second]


def test_query_media_limit(store):
    for i in range(5):
        mid = store.upsert_media(f"M{i}", MediaKind.photo)
        store.upsert_tag(mid, "t")
    assert len(store.query_media(limit=3)) == 3


def test_query_by_tag_prefix_filters_but_ranks_on_all_tags(store):
    a = store.upsert_media("A", MediaKind.photo)
    b = store.upsert_media("B", MediaKind.photo)
    c = store.upsert_media("C", MediaKind.photo)
    store.upsert_tag(a, "car")
    store.upsert_tag(b, "cart")
    store.upsert_tag(b, "shopping")
    store.upsert_tag(c, "bike")
    _bump(store, b, "shop", times=3)

    rows = store.query_media_by_tag_prefix("car")
    # b scores on its non-matching tag too
    assert [r.id for r in rows] == [b, a]
    assert store.query_media_by_tag_prefix("zzz") == []
    assert store.query_media_by_tag_prefix("Car") == []


# ---------------------------------------------------------------- access

def test_record_access_is_idempotent_and_kind_is_immutable(store):
    mid = store.upsert_media("AgAD-6", MediaKind.photo)

    first = store.record_access(mid, 1001, OwnerKind.user)
    again = store.record_access(mid, 1001, OwnerKind.group)
    assert again.id == first.id
    assert again.owner_kind is OwnerKind.user

    store.record_access(mid, -2002, OwnerKind.group)
    got = store.access_for_media(mid)
    assert [(a.owner_id, a.owner_kind) for a in got] == [(-2002, OwnerKind.group), (1001, OwnerKind.user)]
