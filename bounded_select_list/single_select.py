import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from bounded_select_list.bounded_list import TRACE, BoundedSelectList, Limit

logger = logging.getLogger(__name__)

A = TypeVar("A")
K = TypeVar("K")
V = TypeVar("V")


class SingleSelectList(Generic[A, K, V]):
    """
    Keeps only the result for the currently selected item.

    Selections are driven by values of type A; get_key derives the cache key
    from them. When a selection is not materialized yet, fetch is called to
    produce a (key, value) pair, which is fed into the underlying
    BoundedSelectList as a one-item insert. fetch may return None (failure, or
    the result will arrive later through deliver()).
    """

    def __init__(
        self,
        limit: Limit,
        get_key: Callable[[A], K],
        fetch: Callable[[A], Optional[tuple[K, V]]],
        default: Any = None,
        should_refetch: Optional[Callable[[A], Optional[A]]] = None,
    ) -> None:
        self._cache: BoundedSelectList[K, V] = BoundedSelectList(limit=limit)
        self._get_key = get_key
        self._fetch = fetch
        self._default = default
        self._should_refetch = should_refetch
        self._current: Optional[A] = None
        self._has_current = False

    @property
    def cache(self) -> BoundedSelectList[K, V]:
        return self._cache

    def _run_fetch(self, selected: A) -> None:
        result = self._fetch(selected)
        if result is None:
            logger.log(TRACE, f"fetch(key={self._get_key(selected)!r}): no result")
            return
        self.deliver(result)

    def start(self, selected: A) -> None:
        """Initial selection: always fetch, whether or not the key is cached."""
        logger.log(TRACE, f"start(key={self._get_key(selected)!r})")
        self._current = selected
        self._has_current = True
        self._cache.select(self._get_key(selected))
        self._run_fetch(selected)

    def select(self, selected: A) -> None:
        """Change the selection, fetching when the key is not materialized."""
        key = self._get_key(selected)
        logger.log(TRACE, f"select(key={key!r})")
        # Presence is judged against the active items before this selection
        already_cached = key in self._cache.active_items
        self._current = selected
        self._has_current = True
        self._cache.select(key)

        if not already_cached:
            self._run_fetch(selected)
        elif self._should_refetch is not None:
            again = self._should_refetch(selected)
            if again is not None:
                self._run_fetch(again)

    def deliver(self, result: tuple[K, V]) -> None:
        """Feed a fetched (key, value) pair into the cache and materialize it."""
        key, value = result
        logger.log(TRACE, f"deliver(key={key!r})")
        self._cache.insert_items([(key, value)])
        self._cache.reselect()

    def current(self) -> Any:
        """Value cached for the current selection, or the default."""
        if not self._has_current:
            return self._default
        return self._cache.active_items.get(self._get_key(self._current), self._default)
