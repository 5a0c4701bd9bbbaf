"""
Notification service.

Persists user and admin notifications. Creation methods do not commit;
they run inside the caller's step.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.enums import AdminNotificationType, NotificationType
from ledger.models.notification import AdminNotification, Notification
from ledger.repositories.notification_repository import (
    AdminNotificationRepository,
    NotificationRepository,
)
from ledger.services.base_service import BaseService
from ledger.utils.db_decorators import with_rollback_on_error


class NotificationService(BaseService):
    """User and admin notifications."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize notification service."""
        super().__init__(session)
        self.notification_repo = NotificationRepository(session)
        self.admin_notification_repo = AdminNotificationRepository(session)

    async def notify_user(
        self,
        user_id: int,
        message: str,
        notification_type: NotificationType = NotificationType.SYSTEM,
    ) -> Notification:
        """
        Create a notification for one user.

        Args:
            user_id: Recipient
            message: Text
            notification_type: Category

        Returns:
            Created notification
        """
        return await self.notification_repo.create(
            user_id=user_id,
            message=message,
            type=notification_type.value,
        )

    async def notify_admins(
        self,
        message: str,
        notification_type: AdminNotificationType = AdminNotificationType.SYSTEM,
    ) -> AdminNotification:
        """Create an admin feed entry."""
        return await self.admin_notification_repo.create(
            message=message,
            type=notification_type.value,
        )

    async def get_user_notifications(
        self, user_id: int, unread_only: bool = False, limit: int | None = None
    ) -> list[Notification]:
        """Notifications of a user, newest first; empty on store errors."""
        try:
            return await self.notification_repo.get_user_notifications(
                user_id, unread_only=unread_only, limit=limit
            )
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to load notifications: {}",
                e,
                extra={"user_id": user_id},
                exc_info=True,
            )
            return []

    @with_rollback_on_error
    async def mark_as_read(self, notification_id: int) -> bool:
        """Mark a notification read and commit."""
        updated = await self.notification_repo.mark_as_read(notification_id)
        await self.commit()
        return updated

    async def get_admin_notifications(self, limit: int = 50) -> list[AdminNotification]:
        """Newest admin notifications."""
        return await self.admin_notification_repo.get_recent(limit)
