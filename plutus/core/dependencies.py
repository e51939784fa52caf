from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from plutus.db.session import SessionLocal
from plutus.services.catalog import CatalogService
from plutus.utils.logging import get_logger


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            get_logger().exception(f"Database transaction rolled back: {e}")
            raise


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog


DBDependency = Annotated[AsyncSession, Depends(get_db)]
CatalogDependency = Annotated[CatalogService, Depends(get_catalog_service)]
