"""Existence lookups for users and categories."""

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cashflow.models.category import Category
from cashflow.models.user import User


class Directory(Protocol):
    async def user_exists(self, user_id: int) -> bool: ...

    async def category_exists(self, category_id: int) -> bool: ...


class SqlDirectory:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def user_exists(self, user_id: int) -> bool:
        result = await self.db.execute(
            select(User.id).where(User.id == user_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none() is not None

    async def category_exists(self, category_id: int) -> bool:
        result = await self.db.execute(select(Category.id).where(Category.id == category_id))
        return result.scalar_one_or_none() is not None
