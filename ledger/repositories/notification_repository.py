"""
Notification repositories.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.notification import AdminNotification, Notification
from ledger.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """User notification repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize notification repository."""
        super().__init__(Notification, session)

    async def get_user_notifications(
        self, user_id: int, unread_only: bool = False, limit: int | None = None
    ) -> list[Notification]:
        """
        Get notifications of a user, newest first.

        Args:
            user_id: User ID
            unread_only: Only unread notifications
            limit: Max results

        Returns:
            List of notifications
        """
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_as_read(self, notification_id: int) -> bool:
        """Mark one notification read."""
        stmt = (
            update(Notification)
            .where(Notification.id == notification_id)
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1


class AdminNotificationRepository(BaseRepository[AdminNotification]):
    """Admin notification repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize admin notification repository."""
        super().__init__(AdminNotification, session)

    async def get_recent(self, limit: int = 50) -> list[AdminNotification]:
        """Newest admin notifications."""
        stmt = (
            select(AdminNotification)
            .order_by(AdminNotification.created_at.desc(), AdminNotification.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
