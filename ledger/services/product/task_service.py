"""
Product task service.

Creates the recurring daily task attached to each purchased plan and
lets users mark tasks done.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config.plans import PlanConfig
from ledger.models.product_task import ProductTask
from ledger.repositories.product_task_repository import ProductTaskRepository
from ledger.services.base_service import BaseService, ServiceResult
from ledger.services.product.payout_rules import task_daily_reward
from ledger.utils.datetime_utils import utc_now
from ledger.utils.db_decorators import with_rollback_on_error


class ProductTaskService(BaseService):
    """Daily task hook for purchased products."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize task service."""
        super().__init__(session)
        self.task_repo = ProductTaskRepository(session)

    async def create_for_product(
        self, user_id: int, product_id: int, plan: PlanConfig
    ) -> ProductTask:
        """
        Create the daily task for a new product. Does not commit.

        Args:
            user_id: Owner
            product_id: Purchased product ID
            plan: Plan that was bought

        Returns:
            Created task
        """
        return await self.task_repo.create(
            user_id=user_id,
            product_id=product_id,
            plan_id=plan.id,
            title=f"Daily task for {plan.name}",
            daily_reward=task_daily_reward(plan.total_return, plan.cycle_days),
            cycle_days=plan.cycle_days,
        )

    async def get_user_tasks(self, user_id: int) -> list[ProductTask]:
        """Tasks of a user, newest first."""
        return await self.task_repo.get_user_tasks(user_id)

    @with_rollback_on_error
    async def complete_task(self, user_id: int, task_id: int) -> ServiceResult:
        """
        Mark a task completed.

        Args:
            user_id: Requesting user
            task_id: Task ID

        Returns:
            ServiceResult
        """
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            return ServiceResult.fail("Task not found")
        if task.user_id != user_id:
            return ServiceResult.fail("Unauthorized access")
        if task.completed:
            return ServiceResult.fail("Task already completed")

        await self.task_repo.update(task_id, completed=True, completed_at=utc_now())
        await self.commit()
        return ServiceResult.ok("Task completed", data=task_id)
