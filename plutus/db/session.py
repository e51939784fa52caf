from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from plutus.core.config import settings
from plutus.db.base import Base
from plutus.utils.logging import get_logger

CATALOG_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_sneakers_brand ON sneakers(LOWER(brand))",
    "CREATE INDEX IF NOT EXISTS idx_sneakers_brand_product_name "
    "ON sneakers(LOWER(brand), LOWER(product_name))",
    "CREATE INDEX IF NOT EXISTS idx_watches_brand ON watches(LOWER(brand))",
    "CREATE INDEX IF NOT EXISTS idx_perfumes_brand ON perfumes(LOWER(brand))",
    "CREATE INDEX IF NOT EXISTS idx_accessories_brand ON accessories(LOWER(brand))",
    "CREATE INDEX IF NOT EXISTS idx_apparel_brand ON apparel(LOWER(brand))",
)


def build_engine(url: str) -> AsyncEngine:
    # SQLite's pool classes do not take sizing arguments
    if url.startswith("sqlite"):
        return create_async_engine(url)
    return create_async_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
    )


engine: AsyncEngine = build_engine(settings.DATABASE_URL)
SessionLocal = async_sessionmaker(
    autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
)


async def create_catalog_indexes(bind: AsyncEngine) -> int:
    """Create the lower-cased brand indexes; failures are logged and skipped."""
    logger = get_logger()
    created = 0
    for statement in CATALOG_INDEXES:
        try:
            async with bind.begin() as conn:
                await conn.execute(text(statement))
        except SQLAlchemyError as exc:
            logger.warning(f"Failed to create catalog index: {exc}")
        else:
            created += 1
    return created


async def init_db(bind: AsyncEngine | None = None):
    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    created = await create_catalog_indexes(bind)
    get_logger().info(
        f"Account tables ready, {created}/{len(CATALOG_INDEXES)} catalog indexes ensured"
    )
