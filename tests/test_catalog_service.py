import asyncio
import json
from collections import Counter

import pytest

from plutus.core.exceptions.errors import PayloadEncodingError
from plutus.db.catalog_tables import SEARCH_ORDER
from plutus.services.catalog import CatalogService, pick_positions
from plutus.utils.caching import MenuCache, SearchCache


class FakeStore:
    """Stands in for CatalogStore and counts how often each read runs."""

    def __init__(self, search_counts=None, row_counts=None, extra=None):
        self.search_counts = search_counts or {}
        self.row_counts = row_counts or {}
        self.extra = extra or {}
        self.calls = Counter()

    async def distinct_values(self, table_name, kind):
        self.calls["distinct"] += 1
        return [f"{table_name}:{kind.value}"]

    async def count_rows(self, table_name):
        self.calls["count"] += 1
        return self.row_counts.get(table_name, 0)

    async def fetch_products(self, table_name, columns=None):
        self.calls["fetch"] += 1
        await asyncio.sleep(0)
        return [{"id": i, "table": table_name, "images": []} for i in range(25)]

    async def search_table(self, table_name, query, limit=50):
        self.calls["search"] += 1
        await asyncio.sleep(0)
        count = min(self.search_counts.get(table_name, 0), limit)
        return [
            {"id": f"{table_name}-{i}", **self.extra} for i in range(count)
        ]


def make_service(store, clock):
    return CatalogService(
        store,
        menu_cache=MenuCache(ttl=600, clock=clock),
        search_cache=SearchCache(ttl=300, clock=clock),
    )


def test_pick_positions_skips_out_of_range():
    records = [{"id": i} for i in range(5)]
    assert pick_positions(records, (1, 3, 7, -1)) == [{"id": 1}, {"id": 3}]


async def test_menu_payload_shape(clock):
    service = make_service(FakeStore(), clock)

    menu = json.loads(await service.menu_body())

    assert list(menu) == ["sneaker", "apparel", "watch", "perfume", "accessories"]
    assert [p["id"] for p in menu["sneaker"]["products"]] == [2, 4, 6, 8, 10, 13, 15, 16, 20]
    assert [p["id"] for p in menu["watch"]["products"]] == [1, 2, 3, 4, 5, 6]
    assert set(menu["sneaker"]) == {"brands", "products"}
    assert set(menu["apparel"]) == {"brands", "subcategories", "genders", "products"}
    assert set(menu["watch"]) == {"brands", "genders", "products"}
    assert set(menu["perfume"]) == {"brands", "subcategories", "fragranceFamilies", "products"}
    assert menu["perfume"]["fragranceFamilies"] == ["perfumes:fragrance_family"]


async def test_menu_is_served_from_cache_within_ttl(clock):
    store = FakeStore()
    service = make_service(store, clock)

    first = await service.menu_body()
    loads = store.calls["fetch"]

    clock.advance(599)
    assert await service.menu_body() is first
    assert store.calls["fetch"] == loads

    clock.advance(1)
    await service.menu_body()
    assert store.calls["fetch"] == loads * 2


async def test_search_all_favors_earlier_categories(clock):
    per_table = dict(zip([t.name for t in SEARCH_ORDER], [10, 10, 10, 10, 30]))
    service = make_service(FakeStore(search_counts=per_table), clock)

    products = json.loads(await service.search_body("a", ""))["products"]

    assert len(products) == 50
    expected = [
        f"{t.name}-{i}" for t in SEARCH_ORDER[:4] for i in range(10)
    ] + [f"watches-{i}" for i in range(10)]
    assert [p["id"] for p in products] == expected


async def test_search_single_category(clock):
    store = FakeStore(search_counts={"perfumes": 80, "watches": 5})
    service = make_service(store, clock)

    products = json.loads(await service.search_body("oud", "perfumes"))["products"]

    assert len(products) == 50
    assert all(p["id"].startswith("perfumes-") for p in products)
    assert store.calls["search"] == 1


async def test_search_results_cached_per_query_and_category(clock):
    store = FakeStore(search_counts={"sneakers": 3})
    service = make_service(store, clock)

    first = await service.search_body("nike", "sneakers")
    assert await service.search_body("nike", "sneakers") is first
    assert store.calls["search"] == 1

    await service.search_body("nike", "")
    assert store.calls["search"] == 1 + len(SEARCH_ORDER)

    clock.advance(300)
    await service.search_body("nike", "sneakers")
    assert store.calls["search"] == 2 + len(SEARCH_ORDER)


async def test_default_view_counts_every_category(clock):
    store = FakeStore(row_counts={"sneakers": 25, "watches": 8})
    service = make_service(store, clock)

    payload = json.loads(await service.search_body("", ""))

    assert payload["products"] == []
    assert payload["categoryCounts"] == {
        "sneakers": 25,
        "apparel": 0,
        "accessories": 0,
        "perfumes": 0,
        "watches": 8,
    }
    assert store.calls["search"] == 0
    assert len(service.search_cache) == 0


async def test_unencodable_results_are_not_cached(clock):
    store = FakeStore(search_counts={"watches": 1}, extra={"price": float("nan")})
    service = make_service(store, clock)

    with pytest.raises(PayloadEncodingError) as exc_info:
        await service.search_body("rolex", "watches")

    assert exc_info.value.message == "Failed to marshal search results"
    assert len(service.search_cache) == 0


async def test_concurrent_cold_menu_misses_each_rebuild(clock):
    store = FakeStore()
    service = make_service(store, clock)

    first, second = await asyncio.gather(service.menu_body(), service.menu_body())

    assert first == second
    assert store.calls["fetch"] == 2 * 5
    assert service.menu_cache.get() is not None


async def test_concurrent_cold_search_misses_each_rebuild(clock):
    store = FakeStore(search_counts={"sneakers": 3})
    service = make_service(store, clock)

    first, second = await asyncio.gather(
        service.search_body("nike", "sneakers"),
        service.search_body("nike", "sneakers"),
    )

    assert first == second
    assert store.calls["search"] == 2
    assert len(service.search_cache) == 1
    assert await service.search_body("nike", "sneakers") == first
    assert store.calls["search"] == 2
