"""
Per-step failure policy.

Multi-step ledger operations (purchase, referral bonus, registration
bonus) run each step under an explicit policy instead of ad-hoc
try/except blocks:

- ``STRICT``: the step is rolled back and the error propagates; the
  caller decides whether to compensate or to record the failure.
- ``BEST_EFFORT``: the step is rolled back, the error is logged and the
  operation continues. The outcome is returned so callers can surface a
  warning.

Each step commits on success, so a later failure never undoes an
earlier successful step.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession


class FailurePolicy(StrEnum):
    """How a failed step affects the enclosing operation."""

    STRICT = "strict"
    BEST_EFFORT = "best_effort"


@dataclass
class StepOutcome:
    """Result of one step run under a failure policy."""

    name: str
    ok: bool
    value: Any = None
    error: Exception | None = None

    @property
    def warning(self) -> str | None:
        """Human-readable warning for failed best-effort steps."""
        if self.ok:
            return None
        return f"{self.name} failed: {self.error}"


async def run_step(
    session: AsyncSession,
    name: str,
    policy: FailurePolicy,
    operation: Callable[[], Awaitable[Any]],
    *,
    commit: bool = True,
    context: dict[str, Any] | None = None,
) -> StepOutcome:
    """
    Run one step of a multi-step operation under ``policy``.

    ORM instances loaded before a failed step are expired by the rollback;
    callers must capture the plain values they need (ids, amounts) first.

    Args:
        session: Session the step writes through
        name: Step name for logs and warnings
        policy: STRICT or BEST_EFFORT
        operation: Zero-argument coroutine factory performing the step
        commit: Commit the session after a successful step
        context: Extra structured log fields

    Returns:
        StepOutcome describing the step

    Raises:
        Exception: The step's error, when policy is STRICT
    """
    log_extra = {"step": name, "policy": policy.value, **(context or {})}

    try:
        value = await operation()
        if commit:
            await session.commit()
        return StepOutcome(name=name, ok=True, value=value)
    except Exception as e:
        try:
            await session.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error(
                "Failed to rollback step {}: {}",
                name,
                rollback_error,
                extra=log_extra,
                exc_info=True,
            )

        if policy is FailurePolicy.STRICT:
            logger.error(
                "Step {} failed: {}",
                name,
                e,
                extra=log_extra,
                exc_info=True,
            )
            raise

        logger.warning(
            "Best-effort step {} failed: {}",
            name,
            e,
            extra=log_extra,
        )
        return StepOutcome(name=name, ok=False, error=e)
