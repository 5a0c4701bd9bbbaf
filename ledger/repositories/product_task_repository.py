"""
Product task repository.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.product_task import ProductTask
from ledger.repositories.base import BaseRepository


class ProductTaskRepository(BaseRepository[ProductTask]):
    """Product task repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize product task repository."""
        super().__init__(ProductTask, session)

    async def get_user_tasks(self, user_id: int) -> list[ProductTask]:
        """Tasks of a user, newest first."""
        stmt = (
            select(ProductTask)
            .where(ProductTask.user_id == user_id)
            .order_by(ProductTask.created_at.desc(), ProductTask.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
