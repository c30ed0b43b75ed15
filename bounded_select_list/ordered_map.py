import bisect
from typing import Any, Iterable, Iterator, Mapping, Optional, TypeVar, Union

K = TypeVar("K")
V = TypeVar("V")


class OrderedMap(Mapping[K, V]):
    """
    Key-ordered mapping.

    Keys are kept in a sorted list (binary search for neighbour lookups) and
    values in a plain dict. Iteration is always in ascending key order.
    keys(), values() and items() return lists rather than views.
    """

    def __init__(self, items: Optional[Union[Mapping[K, V], Iterable[tuple[K, V]]]] = None) -> None:
        self._keys: list[K] = []
        self._data: dict[K, V] = {}
        if items is None:
            return
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            self._data[key] = value
        self._keys = sorted(self._data)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._keys))

    def __getitem__(self, key: K) -> V:
        return self._data[key]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedMap):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        inner = ", ".join(f"{k!r}: {self._data[k]!r}" for k in self._keys)
        return f"OrderedMap({{{inner}}})"

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        return self._data.get(key, default)

    def keys(self) -> list[K]:
        return list(self._keys)

    def values(self) -> list[V]:
        return [self._data[k] for k in self._keys]

    def items(self) -> list[tuple[K, V]]:
        return [(k, self._data[k]) for k in self._keys]

    def first(self, n: int) -> list[tuple[K, V]]:
        """Return the first n entries in ascending key order."""
        return [(k, self._data[k]) for k in self._keys[: max(0, n)]]

    def lookup_le(self, key: K) -> Optional[tuple[K, V]]:
        """Entry with the greatest key <= key."""
        idx = bisect.bisect_right(self._keys, key)
        if idx == 0:
            return None
        found = self._keys[idx - 1]
        return found, self._data[found]

    def lookup_lt(self, key: K) -> Optional[tuple[K, V]]:
        """Entry with the greatest key < key."""
        idx = bisect.bisect_left(self._keys, key)
        if idx == 0:
            return None
        found = self._keys[idx - 1]
        return found, self._data[found]

    def lookup_gt(self, key: K) -> Optional[tuple[K, V]]:
        """Entry with the least key > key."""
        idx = bisect.bisect_right(self._keys, key)
        if idx == len(self._keys):
            return None
        found = self._keys[idx]
        return found, self._data[found]

    def insert(self, key: K, value: V) -> None:
        """Insert or overwrite key."""
        if key not in self._data:
            bisect.insort(self._keys, key)
        self._data[key] = value

    def delete(self, key: K) -> None:
        """Remove key. Absent keys are silently ignored."""
        if key not in self._data:
            return
        del self._data[key]
        idx = bisect.bisect_left(self._keys, key)
        del self._keys[idx]

    def pop(self, key: K, default: Any = None) -> Any:
        if key not in self._data:
            return default
        value = self._data[key]
        self.delete(key)
        return value

    def copy(self) -> "OrderedMap[K, V]":
        clone: OrderedMap[K, V] = OrderedMap()
        clone._keys = list(self._keys)
        clone._data = dict(self._data)
        return clone

    def to_dict(self) -> dict[K, V]:
        return {k: self._data[k] for k in self._keys}
