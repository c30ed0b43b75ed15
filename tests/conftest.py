import pytest

from bounded_select_list.ordered_map import OrderedMap


@pytest.fixture
def letters() -> dict[int, str]:
    """Small full item set used by most scenarios."""
    return {1: "a", 2: "b", 3: "c"}


@pytest.fixture
def sparse() -> OrderedMap[int, str]:
    """Full item set with a gap between its two keys."""
    return OrderedMap({1: "a", 9: "b"})
