"""
Integration tests for the referral graph and bonus engine.

Tests cover:
- Three-level first-deposit bonuses
- At most one bonus per (referrer, referred user), also under concurrent calls
- Per-level failure isolation
- Cycle-safe chain walk
- Legacy registration bonus
- Referral tree and details queries
"""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError

from ledger.models import Notification, Transaction, User
from ledger.models.enums import TransactionType
from ledger.services.ledger.balance_ledger import BalanceLedger
from ledger.services.referral.bonus_processor import ReferralBonusProcessor
from ledger.services.referral.chain_manager import ReferralChainManager
from ledger.services.referral.query_manager import ReferralQueryManager


async def _chain(make_user, length):
    """Users u0 <- u1 <- ... where each user refers the next."""
    ids = [await make_user()]
    for _ in range(length - 1):
        ids.append(await make_user(referred_by=ids[-1]))
    return ids


async def _referral_bonuses(session, referrer_id):
    result = await session.execute(
        select(Transaction.amount, Transaction.referral_user_id, Transaction.description)
        .where(
            Transaction.user_id == referrer_id,
            Transaction.type == TransactionType.REFERRAL_BONUS.value,
        )
        .order_by(Transaction.id)
    )
    return [tuple(row) for row in result.all()]


async def _referral_earnings(session, user_id):
    result = await session.execute(
        select(User.referral_earnings).where(User.id == user_id)
    )
    return result.scalar_one()


class TestChainWalk:
    """Test ancestry resolution."""

    @pytest.mark.asyncio
    async def test_chain_stops_at_depth(self, session, make_user):
        """Only three ancestors are returned from a longer chain."""
        a, b, c, d, e = await _chain(make_user, 5)

        chain = await ReferralChainManager(session).get_ancestor_ids(e)

        assert chain == [(1, d), (2, c), (3, b)]

    @pytest.mark.asyncio
    async def test_chain_stops_at_root(self, session, make_user):
        """A user without referrer has an empty chain."""
        root = await make_user()
        assert await ReferralChainManager(session).get_ancestor_ids(root) == []

    @pytest.mark.asyncio
    async def test_cycle_is_cut(self, session, make_user):
        """A referral loop never revisits a user."""
        a, b = await _chain(make_user, 2)
        await session.execute(update(User).where(User.id == a).values(referred_by=b))
        await session.commit()

        chain = await ReferralChainManager(session).get_ancestor_ids(b)

        assert chain == [(1, a)]

    @pytest.mark.asyncio
    async def test_referral_chain_users(self, session, make_user):
        """get_referral_chain returns user rows by level."""
        a, b, c = await _chain(make_user, 3)

        users = await ReferralChainManager(session).get_referral_chain(c)

        assert [user.id for user in users] == [b, a]


class TestDepositBonus:
    """Test first-deposit multi-level bonuses."""

    @pytest.mark.asyncio
    async def test_three_levels_paid(self, session, make_user, balance_of):
        """A 10,000 deposit pays 1,900, 200 and 100 up the chain."""
        a, b, c, d = await _chain(make_user, 4)

        result = await ReferralBonusProcessor(session).process_deposit_referral_bonus(
            d, Decimal("10000")
        )

        assert result.success is True
        assert result.rewards_count == 3
        assert result.total_rewards == Decimal("2200")
        assert await balance_of(c) == Decimal("1900")
        assert await balance_of(b) == Decimal("200")
        assert await balance_of(a) == Decimal("100")
        assert await _referral_bonuses(session, c) == [
            (Decimal("1900"), d, "Level 1 referral bonus for first deposit"),
        ]
        assert await _referral_earnings(session, a) == Decimal("100")

    @pytest.mark.asyncio
    async def test_paid_once_per_pair(self, session, make_user, balance_of):
        """Processing the same user twice pays nothing the second time."""
        a, b = await _chain(make_user, 2)
        processor = ReferralBonusProcessor(session)

        await processor.process_deposit_referral_bonus(b, Decimal("1000"))
        second = await processor.process_deposit_referral_bonus(b, Decimal("1000"))

        assert second.skipped_reason == "already_paid"
        assert await balance_of(a) == Decimal("190")
        assert len(await _referral_bonuses(session, a)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_pay_once(
        self, session, session_maker, make_user, balance_of
    ):
        """Two overlapping calls for one deposit credit each level once."""
        a, b, c = await _chain(make_user, 3)

        async def process():
            async with session_maker() as call_session:
                return await ReferralBonusProcessor(
                    call_session
                ).process_deposit_referral_bonus(c, Decimal("10000"))

        results = await asyncio.gather(process(), process())

        assert sum(result.rewards_count for result in results) == 2
        assert all(not result.failed_levels for result in results)
        assert await balance_of(b) == Decimal("1900")
        assert await balance_of(a) == Decimal("200")
        assert len(await _referral_bonuses(session, b)) == 1
        assert len(await _referral_bonuses(session, a)) == 1

    @pytest.mark.asyncio
    async def test_store_rejects_duplicate_bonus(self, session, make_user, balance_of):
        """A second Referral_Bonus row for the same pair violates the index."""
        a, b = await _chain(make_user, 2)
        ledger = BalanceLedger(session)
        await ledger.credit(
            a, Decimal("190"), TransactionType.REFERRAL_BONUS, "first", referral_user_id=b
        )
        await session.commit()

        with pytest.raises(IntegrityError):
            await ledger.credit(
                a,
                Decimal("190"),
                TransactionType.REFERRAL_BONUS,
                "second",
                referral_user_id=b,
            )
        await session.rollback()

        assert await balance_of(a) == Decimal("190")

    @pytest.mark.asyncio
    async def test_no_referrer(self, session, make_user):
        """Users without a referrer are skipped."""
        user_id = await make_user()

        result = await ReferralBonusProcessor(session).process_deposit_referral_bonus(
            user_id, Decimal("1000")
        )

        assert result.success is True
        assert result.skipped_reason == "no_referrer"

    @pytest.mark.asyncio
    async def test_programming_error_propagates(
        self, session, make_user, balance_of, monkeypatch
    ):
        """Non-store errors propagate after earlier levels were committed."""
        a, b, c, d = await _chain(make_user, 4)
        original_credit = BalanceLedger.credit

        async def credit_failing_for_b(self, user_id, *args, **kwargs):
            if user_id == b:
                raise ValueError("unexpected")
            return await original_credit(self, user_id, *args, **kwargs)

        monkeypatch.setattr(BalanceLedger, "credit", credit_failing_for_b)

        with pytest.raises(ValueError):
            await ReferralBonusProcessor(session).process_deposit_referral_bonus(
                d, Decimal("10000")
            )

        assert await balance_of(c) == Decimal("1900")
        assert await balance_of(b) == Decimal("0")

    @pytest.mark.asyncio
    async def test_store_failure_recorded_per_level(
        self, session, make_user, balance_of, monkeypatch
    ):
        """A store failure on level 2 is reported; levels 1 and 3 are paid."""
        a, b, c, d = await _chain(make_user, 4)
        original_credit = BalanceLedger.credit

        async def credit_failing_for_b(self, user_id, *args, **kwargs):
            if user_id == b:
                raise OperationalError("UPDATE users", {}, Exception("locked"))
            return await original_credit(self, user_id, *args, **kwargs)

        monkeypatch.setattr(BalanceLedger, "credit", credit_failing_for_b)

        result = await ReferralBonusProcessor(session).process_deposit_referral_bonus(
            d, Decimal("10000")
        )

        assert result.success is False
        assert result.failed_levels == [2]
        assert await balance_of(c) == Decimal("1900")
        assert await balance_of(b) == Decimal("0")
        assert await balance_of(a) == Decimal("100")

    @pytest.mark.asyncio
    async def test_referrer_notified(self, session, make_user):
        """Each paid referrer gets a referral notification."""
        a, b = await _chain(make_user, 2)

        await ReferralBonusProcessor(session).process_deposit_referral_bonus(
            b, Decimal("10000")
        )

        messages = (
            await session.execute(
                select(Notification.message).where(Notification.user_id == a)
            )
        ).scalars().all()
        assert messages == [
            "You earned 1,900 Level 1 referral bonus! "
            "Your referred user made their first deposit."
        ]


class TestLegacyBonus:
    """Test the registration-time flat bonus."""

    @pytest.mark.asyncio
    async def test_legacy_bonus_paid_once(self, session, make_user, balance_of):
        """72 is credited once per referred user."""
        referrer = await make_user()
        new_user = await make_user(referred_by=referrer)
        processor = ReferralBonusProcessor(session)

        first = await processor.process_referral_bonus(new_user, referrer)
        second = await processor.process_referral_bonus(new_user, referrer)

        assert first.total_rewards == Decimal("72")
        assert second.skipped_reason == "already_paid"
        assert await balance_of(referrer) == Decimal("72")
        assert await _referral_earnings(session, referrer) == Decimal("72")

    @pytest.mark.asyncio
    async def test_legacy_bonus_failure_is_swallowed(
        self, session, make_user, balance_of, monkeypatch
    ):
        """A failed credit is reported, never raised."""
        referrer = await make_user()
        new_user = await make_user(referred_by=referrer)

        async def broken_credit(self, *args, **kwargs):
            raise OperationalError("UPDATE users", {}, Exception("locked"))

        monkeypatch.setattr(BalanceLedger, "credit", broken_credit)

        result = await ReferralBonusProcessor(session).process_referral_bonus(
            new_user, referrer
        )

        assert result.success is False
        assert await balance_of(referrer) == Decimal("0")

    @pytest.mark.asyncio
    async def test_missing_referrer(self, session, make_user):
        """An unknown referrer is skipped."""
        new_user = await make_user()

        result = await ReferralBonusProcessor(session).process_referral_bonus(
            new_user, 999
        )

        assert result.skipped_reason == "no_referrer"


class TestReferralQueries:
    """Test read-only referral views."""

    @pytest.mark.asyncio
    async def test_referral_tree(self, session, make_user):
        """Referrals grouped by level below a root."""
        root = await make_user()
        left = await make_user(referred_by=root)
        right = await make_user(referred_by=root)
        grandchild = await make_user(referred_by=left)

        tree = await ReferralQueryManager(session).get_referral_tree(root)

        assert sorted(user.id for user in tree[1]) == sorted([left, right])
        assert [user.id for user in tree[2]] == [grandchild]
        assert tree[3] == []

    @pytest.mark.asyncio
    async def test_referral_details(self, session, make_user):
        """Details count deposits and sum earned bonuses."""
        root = await make_user()
        depositor = await make_user(referred_by=root, has_deposited=True)
        await make_user(referred_by=root)
        await ReferralBonusProcessor(session).process_deposit_referral_bonus(
            depositor, Decimal("1000")
        )

        details = await ReferralQueryManager(session).get_referral_details(root)

        assert details.total_referrals == 2
        assert details.referrals_with_deposits == 1
        assert details.referrals_without_deposits == 1
        assert details.total_earnings == Decimal("190")
