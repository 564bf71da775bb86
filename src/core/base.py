from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.utils.logger import get_logger

ModelT = TypeVar("ModelT")


class BaseService:
    """Base service class with database dependency injection."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = get_logger(self.__class__.__name__)

    async def _commit_and_refresh(self, instance: ModelT) -> ModelT:
        await self.db.commit()
        await self.db.refresh(instance)
        return instance
