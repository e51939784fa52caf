import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence

from fastapi.encoders import jsonable_encoder

from plutus.core.exceptions.errors import PayloadEncodingError
from plutus.db.catalog_tables import MENU_ORDER, SEARCH_ORDER, CatalogTable
from plutus.services.catalog_store import CatalogStore
from plutus.utils.caching import MenuCache, SearchCache
from plutus.utils.logging import get_logger
from plutus.utils.projection import ProductRecord


def encode_payload(payload: Any, error_message: str) -> bytes:
    try:
        return json.dumps(jsonable_encoder(payload), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        get_logger().error(f"{error_message}: {exc}")
        raise PayloadEncodingError(error_message) from exc


def pick_positions(
    records: Sequence[ProductRecord], positions: Sequence[int]
) -> List[ProductRecord]:
    """Select records by literal position, skipping positions out of range."""
    return [records[i] for i in positions if 0 <= i < len(records)]


class CatalogService:
    """Menu and search read paths in front of the catalog store.

    The caches are owned by the instance. Payloads are rebuilt outside any
    lock, and two requests missing at the same time both rebuild.
    """

    def __init__(
        self,
        store: CatalogStore,
        menu_cache: Optional[MenuCache[bytes]] = None,
        search_cache: Optional[SearchCache[bytes]] = None,
        result_limit: int = 50,
    ):
        self.store = store
        self.menu_cache = menu_cache if menu_cache is not None else MenuCache()
        self.search_cache = search_cache if search_cache is not None else SearchCache()
        self.result_limit = result_limit
        self.logger = get_logger()

    # ---- menu ----

    async def _menu_section(self, catalog_table: CatalogTable) -> Dict[str, Any]:
        section: Dict[str, Any] = {}
        for kind in catalog_table.facets:
            section[kind.payload_key] = await self.store.distinct_values(
                catalog_table.name, kind
            )
        products = await self.store.fetch_products(
            catalog_table.name, catalog_table.menu_columns
        )
        section["products"] = pick_positions(products, catalog_table.sample_positions)
        return section

    async def build_menu(self) -> Dict[str, Any]:
        sections = await asyncio.gather(*(self._menu_section(t) for t in MENU_ORDER))
        return {t.menu_key: section for t, section in zip(MENU_ORDER, sections)}

    async def menu_body(self) -> bytes:
        cached = self.menu_cache.get()
        if cached is not None:
            return cached
        self.logger.info("Menu cache miss, rebuilding")
        body = encode_payload(await self.build_menu(), "Failed to marshal menu")
        self.menu_cache.put(body)
        return body

    # ---- search ----

    async def category_counts(self) -> Dict[str, int]:
        counts = await asyncio.gather(
            *(self.store.count_rows(t.name) for t in SEARCH_ORDER)
        )
        return {t.name: count for t, count in zip(SEARCH_ORDER, counts)}

    async def search_category(self, category: str, query: str) -> List[ProductRecord]:
        return await self.store.search_table(category, query, limit=self.result_limit)

    async def search_all(self, query: str) -> List[ProductRecord]:
        per_table = await asyncio.gather(
            *(self.search_category(t.name, query) for t in SEARCH_ORDER)
        )
        combined = [record for records in per_table for record in records]
        # earlier tables in the fixed order win once the cap is reached
        return combined[: self.result_limit]

    async def search_body(self, query: str = "", category: str = "") -> bytes:
        if not query and not category:
            payload = {"products": [], "categoryCounts": await self.category_counts()}
            return encode_payload(payload, "Failed to marshal search results")

        key = SearchCache.make_key(query, category)
        cached = self.search_cache.get(key)
        if cached is not None:
            return cached

        if category:
            products = await self.search_category(category, query)
        else:
            products = await self.search_all(query)
        body = encode_payload({"products": products}, "Failed to marshal search results")
        self.search_cache.put(key, body)
        return body
