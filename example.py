"""Example usage of BoundedSelectList."""

from pydantic import BaseModel, ConfigDict

from bounded_select_list.bounded_list import BoundedSelectList
from bounded_select_list.single_select import SingleSelectList


class Document(BaseModel):
    """Example item model."""

    model_config = ConfigDict(frozen=True)
    title: str
    body: str


def main() -> None:
    """Demonstrate bounded list usage."""
    docs = {i: Document(title=f"Doc {i}", body="..." * i) for i in range(1, 6)}

    # Keep at most 2 documents materialized
    cache = BoundedSelectList(docs, limit=2)

    print("=== BoundedSelectList Example ===\n")

    print("1. Initial active items...")
    print(f"   {cache.active_items.keys()}\n")

    print("2. Selecting 3, 4, 3, 5...")
    for key in [3, 4, 3, 5]:
        cache.select(key)
        print(f"   select({key}) -> active {cache.active_items.keys()}")
    print()

    print("3. Deleting 5 and selecting it again...")
    cache.delete_keys([5])
    match = cache.select(5)
    print(f"   resolved to {match[0] if match else None}, active {cache.active_items.keys()}\n")

    print("4. Rendering...")
    rendered = cache.render(lambda k, doc, selected: f"{'*' if selected else ' '} {doc.title}")
    for line in rendered.values():
        print(f"   {line}")
    print()

    print("5. Statistics...")
    stats = cache.get_stats()
    print(f"   Selections: {stats['selections']}, evictions: {stats['evictions']}\n")

    print("6. Single selection wrapper...")
    single = SingleSelectList(
        limit=3,
        get_key=lambda page: page,
        fetch=lambda page: (page, f"rendered page {page}"),
        default="nothing yet",
    )
    single.start(1)
    single.select(7)
    print(f"   current: {single.current()}\n")

    print("=== Example complete ===")


if __name__ == "__main__":
    main()
