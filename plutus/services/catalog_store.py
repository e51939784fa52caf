from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from plutus.db.catalog_tables import CatalogTable, FacetKind, get_catalog_table
from plutus.utils.logging import get_logger
from plutus.utils.projection import ProductRecord, project_rows

# Read failures degrade to empty results instead of reaching the caller
STORE_ERRORS = (SQLAlchemyError, OSError)


class CatalogStore:
    """Read-only queries against the five catalog tables.

    Every read checks out its own pooled connection, so one failing query
    never poisons another request's transaction.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self.logger = get_logger()

    async def _execute(self, statement) -> Tuple[List[str], List[Sequence[Any]]]:
        async with self._engine.connect() as conn:
            result = await conn.execute(statement)
            return list(result.keys()), result.all()

    def _lookup(self, table_name: str) -> Optional[CatalogTable]:
        catalog_table = get_catalog_table(table_name)
        if catalog_table is None:
            self.logger.warning(f"Unknown catalog table requested: {table_name!r}")
        return catalog_table

    async def distinct_values(self, table_name: str, kind: FacetKind) -> List[Any]:
        catalog_table = self._lookup(table_name)
        if catalog_table is None or kind not in catalog_table.facets:
            return []
        clause = catalog_table.clause(kind.value)
        statement = select(clause.c[kind.value]).distinct()
        try:
            _, rows = await self._execute(statement)
        except STORE_ERRORS as exc:
            self.logger.warning(f"Facet query {table_name}.{kind.value} failed: {exc}")
            return []
        return [row[0] for row in rows if row[0] is not None]

    async def count_rows(self, table_name: str) -> int:
        catalog_table = self._lookup(table_name)
        if catalog_table is None:
            return 0
        statement = select(func.count()).select_from(catalog_table.clause())
        try:
            _, rows = await self._execute(statement)
        except STORE_ERRORS as exc:
            self.logger.warning(f"Count query on {table_name} failed: {exc}")
            return 0
        return int(rows[0][0]) if rows else 0

    async def fetch_products(
        self, table_name: str, columns: Optional[Sequence[str]] = None
    ) -> List[ProductRecord]:
        """All rows of a table in store order, projected to product records."""
        catalog_table = self._lookup(table_name)
        if catalog_table is None:
            return []
        clause = catalog_table.clause(*(columns or catalog_table.menu_columns))
        statement = select(*clause.c)
        try:
            keys, rows = await self._execute(statement)
        except STORE_ERRORS as exc:
            self.logger.warning(f"Product query on {table_name} failed: {exc}")
            return []
        return project_rows(keys, rows)

    async def search_table(
        self, table_name: str, query: str, limit: int = 50
    ) -> List[ProductRecord]:
        catalog_table = self._lookup(table_name)
        if catalog_table is None:
            return []
        clause = catalog_table.clause(*catalog_table.search_columns)
        pattern = f"%{query}%"
        statement = (
            select(*clause.c)
            .where(
                or_(
                    clause.c.brand.ilike(pattern),
                    clause.c[catalog_table.name_column].ilike(pattern),
                )
            )
            .limit(limit)
        )
        try:
            keys, rows = await self._execute(statement)
        except STORE_ERRORS as exc:
            self.logger.warning(f"Search on {table_name} failed: {exc}")
            return []
        return project_rows(keys, rows)
