import logging
from typing import Any, Callable, Generic, Iterable, Mapping, NamedTuple, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, PositiveInt, ValidationError

from bounded_select_list.ordered_map import OrderedMap

# Define TRACE level (below DEBUG which is 10)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Set up logger for this module
logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")
R = TypeVar("R")

# Maximum number of active items; None means unbounded
Limit = Optional[int]

# Counter value used in lieu of a timestamp for LRU calculations
BornAt = int

ItemsSource = Union[Mapping[K, V], Iterable[tuple[K, V]]]


class ActiveEntry(NamedTuple):
    born_at: BornAt
    value: Any


class BoundedListConfig(BaseModel):
    model_config = ConfigDict(frozen=True)
    limit: Optional[PositiveInt] = None


class AgeCounter:
    """Monotonic logical clock, ticked once per selection change."""

    def __init__(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def tick(self) -> int:
        self._value += 1
        return self._value


def find_nearest(container: OrderedMap[K, V], key: K) -> Optional[tuple[K, V]]:
    """Resolve key to the closest entry: exact match, else predecessor, else successor."""
    found = container.lookup_le(key)
    if found is not None:
        return found
    return container.lookup_gt(key)


def truncate_to_limit(full: OrderedMap[K, V], limit: Limit) -> OrderedMap[K, V]:
    """Keep the first `limit` entries by ascending key (all of them when limit is None)."""
    if limit is None:
        return full.copy()
    return OrderedMap(full.first(limit))


def bounded_insert(
    limit: Limit,
    age: BornAt,
    key: K,
    value: V,
    active: OrderedMap[K, ActiveEntry],
) -> OrderedMap[K, ActiveEntry]:
    """Insert key with the given age, evicting the oldest entry when full.

    Exactly one entry is evicted whenever the map is already at the limit,
    even if key itself is present. Among entries sharing the minimum age
    the one with the smallest key goes first.
    """
    result = active.copy()
    if limit is not None and len(result) >= limit and len(result) > 0:
        # min() keeps the first minimum, and items() is in ascending key order
        oldest_key, _ = min(result.items(), key=lambda kv: kv[1].born_at)
        logger.log(TRACE, f"evicting from active items: key={oldest_key!r}")
        result.delete(oldest_key)
    result.insert(key, ActiveEntry(age, value))
    return result


class BoundedSelectList(Generic[K, V]):
    """
    Bounded set of materialized items with one current selection.

    Holds the full item set plus an age-tagged subset of "active" items whose
    size never exceeds the limit. Selection changes promote the nearest
    matching item into the active subset, evicting the least recently
    promoted one when full.
    """

    def __init__(self, initial_items: Optional[ItemsSource[K, V]] = None, limit: Limit = None) -> None:
        self._config = self._validate_config(limit)
        self._items: OrderedMap[K, V] = OrderedMap(initial_items)
        self._counter = AgeCounter()
        self._selection: Any = None
        self._has_selection = False

        # Initial entries get negative ages, so the smallest key is the newest
        tagged: OrderedMap[K, ActiveEntry] = OrderedMap(
            (k, ActiveEntry(-i, v)) for i, (k, v) in enumerate(self._items.items(), start=1)
        )
        self._active = truncate_to_limit(tagged, self._config.limit)

        self._items_subscribers: list[Callable[[OrderedMap[K, V]], None]] = []
        self._active_subscribers: list[Callable[[OrderedMap[K, V]], None]] = []

        # Initialize statistics counters
        self._stats_selections = 0
        self._stats_promotions = 0
        self._stats_refreshes = 0
        self._stats_evictions = 0
        self._stats_misses = 0
        self._stats_total_inserts = 0
        self._stats_total_deletes = 0
        self._stats_total_updates = 0

    @staticmethod
    def _validate_config(limit: Limit) -> BoundedListConfig:
        try:
            return BoundedListConfig(limit=limit)
        except ValidationError as e:
            raise ValueError(f"Invalid limit {limit!r}: must be a positive integer or None") from e

    @property
    def limit(self) -> Limit:
        return self._config.limit

    @property
    def age(self) -> int:
        return self._counter.value

    @property
    def selection(self) -> Any:
        return self._selection

    @property
    def items(self) -> OrderedMap[K, V]:
        return self._items.copy()

    @property
    def active_items(self) -> OrderedMap[K, V]:
        return OrderedMap((k, entry.value) for k, entry in self._active.items())

    @property
    def active_ages(self) -> dict[K, BornAt]:
        return {k: entry.born_at for k, entry in self._active.items()}

    def subscribe_items(self, callback: Callable[[OrderedMap[K, V]], None]) -> Callable[[], None]:
        """Register a callback fired with the full item set after it changes."""
        return self._subscribe(self._items_subscribers, callback)

    def subscribe_active(self, callback: Callable[[OrderedMap[K, V]], None]) -> Callable[[], None]:
        """Register a callback fired with the active items after they change."""
        return self._subscribe(self._active_subscribers, callback)

    @staticmethod
    def _subscribe(
        subscribers: list[Callable[[OrderedMap[K, V]], None]],
        callback: Callable[[OrderedMap[K, V]], None],
    ) -> Callable[[], None]:
        subscribers.append(callback)

        def unsubscribe() -> None:
            # Calling it again after the first time does nothing
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    def _commit(
        self,
        new_items: Optional[OrderedMap[K, V]] = None,
        new_active: Optional[OrderedMap[K, ActiveEntry]] = None,
    ) -> None:
        """Install new state, then notify subscribers of whatever changed.

        Both maps are assigned before any callback runs, so subscribers
        always see a fully updated cache.
        """
        items_changed = new_items is not None and new_items != self._items
        active_changed = new_active is not None and new_active != self._active
        if new_items is not None:
            self._items = new_items
        if new_active is not None:
            self._active = new_active

        if items_changed:
            snapshot = self.items
            for callback in list(self._items_subscribers):
                callback(snapshot)
        if active_changed:
            active_snapshot = self.active_items
            for callback in list(self._active_subscribers):
                callback(active_snapshot)

    def _apply_transform(self, transform: Callable[[dict[K, V]], Mapping[K, V]]) -> OrderedMap[K, V]:
        result = transform(self._items.to_dict())
        if not isinstance(result, Mapping):
            raise TypeError(f"Transform must return a mapping, got {type(result).__name__}")
        return OrderedMap(result)

    def insert_items(self, batch: ItemsSource[K, V]) -> None:
        """Merge a batch into the full item set. Keys already present keep their value."""
        incoming = OrderedMap(batch)
        logger.log(TRACE, f"insert_items(count={len(incoming)})")
        merged = self._items.copy()
        for key, value in incoming.items():
            if key not in merged:
                merged.insert(key, value)
                self._stats_total_inserts += 1
        self._commit(new_items=merged)

    def delete_items(self, transform: Callable[[dict[K, V]], Mapping[K, V]]) -> None:
        """Apply a key-removing transform to the full item set. Active items are untouched."""
        logger.log(TRACE, "delete_items()")
        new_items = self._apply_transform(transform)
        self._stats_total_deletes += sum(1 for k in self._items if k not in new_items)
        self._commit(new_items=new_items)

    def delete_keys(self, keys: Iterable[K]) -> None:
        """Remove keys from the full item set. Non-existent keys are ignored."""
        doomed = set(keys)
        self.delete_items(lambda m: {k: v for k, v in m.items() if k not in doomed})

    def update_items(self, transform: Callable[[dict[K, V]], Mapping[K, V]]) -> None:
        """Apply a value-updating transform to the full item set.

        Active items whose key survives the transform pick up the new value
        and keep their age.
        """
        logger.log(TRACE, "update_items()")
        new_items = self._apply_transform(transform)
        self._stats_total_updates += sum(
            1 for k, v in new_items.items() if k not in self._items or self._items[k] != v
        )

        refreshed = self._active.copy()
        for key, entry in self._active.items():
            if key in new_items:
                refreshed.insert(key, ActiveEntry(entry.born_at, new_items[key]))
        self._commit(new_items=new_items, new_active=refreshed)

    def current_item(self) -> Optional[tuple[K, V]]:
        """Nearest item in the full set for the current selection, or None."""
        if not self._has_selection:
            return None
        return find_nearest(self._items, self._selection)

    def is_selected(self, key: K) -> bool:
        return self._has_selection and key == self._selection

    def _promote(self, age: BornAt) -> Optional[tuple[K, V]]:
        match = self.current_item()
        if match is None:
            logger.log(TRACE, f"select(key={self._selection!r}): miss (no items)")
            self._stats_misses += 1
            return None

        key, value = match
        already_active = key in self._active
        limit = self._config.limit
        if limit is not None and len(self._active) >= limit:
            self._stats_evictions += 1
        new_active = bounded_insert(limit, age, key, value, self._active)

        if already_active:
            self._stats_refreshes += 1
        else:
            self._stats_promotions += 1

        self._commit(new_active=new_active)
        return match

    def select(self, key: K) -> Optional[tuple[K, V]]:
        """Handle a selection change: tick the age counter and promote the nearest item."""
        logger.log(TRACE, f"select(key={key!r})")
        age = self._counter.tick()
        self._selection = key
        self._has_selection = True
        self._stats_selections += 1
        return self._promote(age)

    def reselect(self) -> Optional[tuple[K, V]]:
        """Re-resolve the current selection against the full set without ticking the counter."""
        logger.log(TRACE, f"reselect(key={self._selection!r})")
        if not self._has_selection:
            return None
        return self._promote(self._counter.value)

    def render(self, render_single: Callable[[K, V, bool], R]) -> OrderedMap[K, R]:
        """Call render_single(key, value, is_selected) for every active item, in key order."""
        return OrderedMap(
            (k, render_single(k, entry.value, self.is_selected(k))) for k, entry in self._active.items()
        )

    def get_stats(self) -> dict[str, int]:
        """Get cache statistics.

        total_inserts, total_deletes and total_updates all count items: keys
        added to the full set, keys removed from it, and keys whose value a
        transform changed or added.
        """
        return {
            "selections": self._stats_selections,
            "promotions": self._stats_promotions,
            "refreshes": self._stats_refreshes,
            "evictions": self._stats_evictions,
            "misses": self._stats_misses,
            "total_inserts": self._stats_total_inserts,
            "total_deletes": self._stats_total_deletes,
            "total_updates": self._stats_total_updates,
            "current_items": len(self._items),
            "current_active_items": len(self._active),
        }
