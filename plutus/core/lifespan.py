from contextlib import asynccontextmanager
from fastapi import FastAPI
from plutus.core.config import settings
from plutus.core.rate_limiting import setup_rate_limiting
from plutus.db.session import engine, init_db
from plutus.services.catalog import CatalogService
from plutus.services.catalog_store import CatalogStore
from plutus.utils.caching import MenuCache, SearchCache
from plutus.utils.logging import get_logger


def build_catalog_service() -> CatalogService:
    return CatalogService(
        CatalogStore(engine),
        menu_cache=MenuCache(ttl=settings.MENU_CACHE_TTL_SECONDS),
        search_cache=SearchCache(ttl=settings.SEARCH_CACHE_TTL_SECONDS),
        result_limit=settings.SEARCH_RESULT_LIMIT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger = get_logger()
    if settings.using_default_database:
        logger.warning("DATABASE_URL not set, using default development database")
    await init_db()
    app.state.catalog = build_catalog_service()
    setup_rate_limiting(app)
    logger.info(f"Startup: {app.title} v{app.version} starting...")
    logger.info(f"CORS origins: {settings.allowed_origins_list}")
    yield
    # Shutdown
    await engine.dispose()
    logger.info("Shutdown: App shutting down...")
