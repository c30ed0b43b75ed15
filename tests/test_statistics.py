"""Tests for statistics tracking."""

from bounded_select_list.bounded_list import BoundedSelectList


def test_get_stats_initial_state(letters: dict[int, str]) -> None:
    """Initial statistics should be zeros apart from the current sizes."""
    cache = BoundedSelectList(letters, limit=2)

    stats = cache.get_stats()

    assert stats["selections"] == 0
    assert stats["promotions"] == 0
    assert stats["refreshes"] == 0
    assert stats["evictions"] == 0
    assert stats["misses"] == 0
    assert stats["total_inserts"] == 0
    assert stats["total_deletes"] == 0
    assert stats["total_updates"] == 0
    assert stats["current_items"] == 3
    assert stats["current_active_items"] == 2


def test_stats_track_promotions_and_evictions(letters: dict[int, str]) -> None:
    cache = BoundedSelectList(letters, limit=2)

    # 1 is active already: refresh, evicting 2
    cache.select(1)
    # 2 comes back: promotion, no eviction
    cache.select(2)
    # 3 is new: promotion, evicting 1
    cache.select(3)

    stats = cache.get_stats()
    assert stats["selections"] == 3
    assert stats["refreshes"] == 1
    assert stats["promotions"] == 2
    assert stats["evictions"] == 2
    assert stats["current_active_items"] == 2


def test_stats_track_misses() -> None:
    cache: BoundedSelectList[int, str] = BoundedSelectList()

    cache.select(1)
    cache.select(2)

    stats = cache.get_stats()
    assert stats["selections"] == 2
    assert stats["misses"] == 2


def test_stats_track_bulk_operations(letters: dict[int, str]) -> None:
    cache = BoundedSelectList(letters)

    cache.insert_items({4: "d", 5: "e"})
    cache.delete_keys([1, 2, 99])
    cache.update_items(lambda m: {k: v.upper() for k, v in m.items()})

    stats = cache.get_stats()
    assert stats["total_inserts"] == 2
    assert stats["total_deletes"] == 2
    assert stats["total_updates"] == 3
    assert stats["current_items"] == 3


def test_bulk_stats_count_changed_items_only(letters: dict[int, str]) -> None:
    """Inserts, deletes and updates are all counted in items actually affected."""
    cache = BoundedSelectList(letters)

    # 1 already present: only 4 is added
    cache.insert_items({1: "other", 4: "d"})
    # Identity transform changes nothing
    cache.update_items(lambda m: m)
    # Only 2 changes value
    cache.update_items(lambda m: {**m, 2: "B"})

    stats = cache.get_stats()
    assert stats["total_inserts"] == 1
    assert stats["total_updates"] == 1
