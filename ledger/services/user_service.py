"""
User service.

Registration with referral codes, deposit confirmation (which triggers
the first-deposit referral bonus), daily check-in and admin balance
adjustments.
"""

import secrets
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config.business_constants import (
    CHECK_IN_BONUS,
    CHECK_IN_INTERVAL,
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    REFERRAL_CODE_MAX_ATTEMPTS,
)
from ledger.config.settings import settings
from ledger.models.enums import AdminNotificationType, TransactionType
from ledger.models.user import User
from ledger.repositories.user_repository import UserRepository
from ledger.services.base_service import BaseService, ServiceResult, transaction
from ledger.services.ledger.balance_ledger import BalanceLedger
from ledger.services.notification_service import NotificationService
from ledger.services.referral.bonus_processor import ReferralBonusProcessor
from ledger.utils.datetime_utils import ensure_aware, utc_now
from ledger.utils.exceptions import InsufficientBalanceError
from ledger.utils.failure_policy import FailurePolicy, run_step
from ledger.utils.money import to_decimal


def generate_referral_code(length: int = REFERRAL_CODE_LENGTH) -> str:
    """Random upper-case alphanumeric referral code."""
    return "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(length))


class UserService(BaseService):
    """User accounts and balance entry points."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize user service.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.balance_ledger = BalanceLedger(session)
        self.notification_service = NotificationService(session)
        self.bonus_processor = ReferralBonusProcessor(session)

    async def get_user(self, user_id: int) -> User | None:
        """Load a user, bypassing the identity map."""
        return await self.user_repo.get_by_id(user_id, fresh=True)

    async def get_user_by_referral_code(self, referral_code: str) -> User | None:
        """Look up a user by referral code (case-insensitive)."""
        return await self.user_repo.get_by_referral_code(referral_code.strip().upper())

    async def _unique_referral_code(self) -> str:
        for _ in range(REFERRAL_CODE_MAX_ATTEMPTS):
            code = generate_referral_code()
            if not await self.user_repo.referral_code_exists(code):
                return code
        raise RuntimeError("Could not generate a unique referral code")

    async def register_user(
        self,
        email: str,
        phone: str | None = None,
        referral_code: str | None = None,
    ) -> ServiceResult:
        """
        Register a user.

        An unknown referral code does not block registration; the user
        is simply created without a referrer.

        Args:
            email: Email address
            phone: Optional phone number
            referral_code: Optional code of the referring user

        Returns:
            ServiceResult with the new user ID in ``data``
        """
        email = email.strip().lower()
        if await self.user_repo.get_by_email(email):
            return ServiceResult.fail("Email already registered")

        referrer_id: int | None = None
        if referral_code:
            referrer = await self.get_user_by_referral_code(referral_code)
            if referrer is None:
                self.logger.warning(
                    "Unknown referral code at registration",
                    extra={"email": email, "referral_code": referral_code},
                )
            else:
                referrer_id = referrer.id

        user_id: int | None = None
        for attempt in range(REFERRAL_CODE_MAX_ATTEMPTS):
            code = await self._unique_referral_code()
            try:
                user = await self.user_repo.create(
                    email=email,
                    phone=phone,
                    referral_code=code,
                    referred_by=referrer_id,
                )
                user_id = user.id
                if referrer_id is not None:
                    await self.user_repo.increment_total_referrals(referrer_id)
                await self.commit()
                break
            except IntegrityError:
                await self.rollback()
                if await self.user_repo.get_by_email(email):
                    return ServiceResult.fail("Email already registered")
                self.logger.debug(
                    "Referral code collision, retrying",
                    extra={"attempt": attempt + 1},
                )

        if user_id is None:
            raise RuntimeError("Could not register user with a unique referral code")

        self.logger.info(
            "User registered",
            extra={"user_id": user_id, "referred_by": referrer_id},
        )

        if referrer_id is not None and settings.legacy_registration_bonus_enabled:
            await self.bonus_processor.process_referral_bonus(user_id, referrer_id)

        return ServiceResult.ok("Registration successful", data=user_id)

    async def ensure_referral_codes(self) -> int:
        """
        Give every user without a referral code a fresh one.

        Returns:
            Number of users updated
        """
        users = await self.user_repo.find_without_referral_code()
        updated = 0
        for user in users:
            user.referral_code = await self._unique_referral_code()
            await self.session.flush()
            updated += 1
        await self.commit()

        if updated:
            self.logger.info("Referral codes back-filled", extra={"updated": updated})
        return updated

    async def confirm_deposit(
        self,
        user_id: int,
        amount: Decimal | int,
        now: datetime | None = None,
    ) -> ServiceResult:
        """
        Credit a confirmed deposit.

        The first deposit flips ``has_deposited`` through a guarded
        update; only the caller that flips it triggers the referral bonus.

        Args:
            user_id: Depositing user
            amount: Deposit amount
            now: Confirmation time (defaults to current UTC time)

        Returns:
            ServiceResult with ``first_deposit`` and the referral
            ``BonusResult`` (or None) in ``data``
        """
        now = ensure_aware(now) if now else utc_now()
        amount = to_decimal(amount)
        if amount <= 0:
            return ServiceResult.fail("Invalid deposit amount")

        if await self.user_repo.get_balance(user_id) is None:
            return ServiceResult.fail("User not found")

        async def credit_deposit() -> bool:
            await self.balance_ledger.credit(
                user_id,
                amount,
                TransactionType.DEPOSIT,
                "Deposit confirmed",
                counters={"total_deposits": amount},
            )
            return await self.user_repo.mark_first_deposit(user_id, now)

        outcome = await run_step(
            self.session,
            "deposit_credit",
            FailurePolicy.STRICT,
            credit_deposit,
            context={"user_id": user_id, "amount": str(amount)},
        )
        first_deposit: bool = outcome.value

        await run_step(
            self.session,
            "deposit_admin_notification",
            FailurePolicy.BEST_EFFORT,
            lambda: self.notification_service.notify_admins(
                f"Deposit of {amount:,.0f} confirmed for user {user_id}",
                AdminNotificationType.DEPOSIT,
            ),
        )

        bonus = None
        if first_deposit:
            bonus = await self.bonus_processor.process_deposit_referral_bonus(
                user_id, amount
            )

        self.logger.info(
            "Deposit confirmed",
            extra={
                "user_id": user_id,
                "amount": str(amount),
                "first_deposit": first_deposit,
            },
        )
        return ServiceResult.ok(
            "Deposit confirmed",
            data={"first_deposit": first_deposit, "referral_bonus": bonus},
        )

    async def check_in(
        self, user_id: int, now: datetime | None = None
    ) -> ServiceResult:
        """
        Daily check-in bonus.

        Args:
            user_id: User checking in
            now: Check-in time (defaults to current UTC time)

        Returns:
            ServiceResult with the bonus in ``data``
        """
        now = ensure_aware(now) if now else utc_now()

        user = await self.get_user(user_id)
        if user is None:
            return ServiceResult.fail("User not found")
        if not user.has_deposited:
            return ServiceResult.fail("Deposit required")

        try:
            if not await self.user_repo.try_check_in(
                user_id, now, now - CHECK_IN_INTERVAL
            ):
                await self.rollback()
                return ServiceResult.fail("Already checked in")

            await self.balance_ledger.credit(
                user_id,
                CHECK_IN_BONUS,
                TransactionType.INVESTMENT,
                "Daily check-in bonus",
            )
            await self.commit()
        except Exception:
            await self.rollback()
            self.logger.error(
                "Check-in failed", extra={"user_id": user_id}, exc_info=True
            )
            raise

        self.logger.info("User checked in", extra={"user_id": user_id})
        return ServiceResult.ok(
            f"Check-in successful! You earned {CHECK_IN_BONUS:,.0f}.",
            data=CHECK_IN_BONUS,
        )

    @transaction
    async def admin_add_funds(
        self, user_id: int, amount: Decimal | int, reason: str | None = None
    ) -> ServiceResult:
        """
        Credit a user on behalf of an admin.

        Args:
            user_id: Target user
            amount: Positive amount
            reason: Optional reason stored in the description

        Returns:
            ServiceResult
        """
        amount = to_decimal(amount)
        if amount <= 0:
            return ServiceResult.fail("Invalid amount")
        if await self.user_repo.get_balance(user_id) is None:
            return ServiceResult.fail("User not found")

        await self.balance_ledger.credit(
            user_id,
            amount,
            TransactionType.ADMIN_ADD,
            reason or "Funds added by admin",
        )
        await self.notification_service.notify_admins(
            f"Added {amount:,.0f} to user {user_id}",
            AdminNotificationType.FUND_ADJUSTMENT,
        )
        return ServiceResult.ok("Funds added", data=amount)

    @transaction
    async def admin_deduct_funds(
        self, user_id: int, amount: Decimal | int, reason: str | None = None
    ) -> ServiceResult:
        """
        Debit a user on behalf of an admin.

        Args:
            user_id: Target user
            amount: Positive amount
            reason: Optional reason stored in the description

        Returns:
            ServiceResult
        """
        amount = to_decimal(amount)
        if amount <= 0:
            return ServiceResult.fail("Invalid amount")
        if await self.user_repo.get_balance(user_id) is None:
            return ServiceResult.fail("User not found")

        try:
            await self.balance_ledger.debit(
                user_id,
                amount,
                TransactionType.ADMIN_DEDUCT,
                reason or "Funds deducted by admin",
            )
        except InsufficientBalanceError:
            return ServiceResult.fail("Insufficient balance")

        await self.notification_service.notify_admins(
            f"Deducted {amount:,.0f} from user {user_id}",
            AdminNotificationType.FUND_ADJUSTMENT,
        )
        return ServiceResult.ok("Funds deducted", data=amount)
