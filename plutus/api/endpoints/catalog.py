from fastapi import APIRouter

from plutus.core.dependencies import CatalogDependency
from plutus.core.responses import json_bytes_response

router = APIRouter(tags=["Catalog"])


@router.get("/menu")
async def menu(catalog: CatalogDependency):
    """Brands, facets and a curated product sample for every category."""
    return json_bytes_response(await catalog.menu_body())


@router.get("/search")
async def search(catalog: CatalogDependency, q: str = "", category: str = ""):
    """Search one category, or all of them when no category is given.

    With neither a query nor a category, only per-category counts are returned.
    """
    return json_bytes_response(await catalog.search_body(q, category))
