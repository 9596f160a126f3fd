"""Free-tier quota: how many graded attempts a learner may submit per day."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.config import settings
from dictee.database import dialect_insert
from dictee.enums import SubscriptionStatus
from dictee.errors import ValidationError
from dictee.models import DailyUsage, Subscription, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaStatus:
    can_use: bool
    is_premium: bool
    attempts_remaining: Optional[int]
    subscription_status: SubscriptionStatus
    attempts_used: Optional[int] = None
    daily_limit: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "can_use": self.can_use,
            "is_premium": self.is_premium,
            "attempts_remaining": self.attempts_remaining,
            "subscription_status": self.subscription_status.value,
        }
        if not self.is_premium:
            data["attempts_used"] = self.attempts_used
            data["daily_limit"] = self.daily_limit
        return data


def usage_date(now: dt.datetime | None = None, tz: str | None = None) -> dt.date:
    """Today's calendar date in the server timezone."""
    zone = ZoneInfo(tz or settings.timezone)
    if now is None:
        return dt.datetime.now(zone).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    return now.astimezone(zone).date()


def is_premium(subscription: Subscription | None, now: dt.datetime | None = None) -> bool:
    """
    Active paid period or unexpired trial.

    past_due, canceled, inactive and an expired period all fall back
    to the metered free tier.
    """
    if subscription is None:
        return False
    now = now or utcnow()
    if subscription.status == SubscriptionStatus.ACTIVE:
        return subscription.current_period_end is not None and subscription.current_period_end > now
    if subscription.status == SubscriptionStatus.TRIALING:
        return subscription.trial_end_date is not None and subscription.trial_end_date > now
    return False


async def check_quota(
    db: AsyncSession,
    user_id: str,
    daily_limit: int | None = None,
    now: dt.datetime | None = None,
) -> QuotaStatus:
    """Decide whether *user_id* may submit another graded attempt today."""
    if not user_id:
        raise ValidationError("user_id is required")
    if daily_limit is None:
        daily_limit = settings.free_tier_daily_limit
    now = now or utcnow()

    result = await db.execute(select(Subscription).where(Subscription.user_id == user_id))
    subscription = result.scalar_one_or_none()
    status = subscription.status if subscription else SubscriptionStatus.INACTIVE

    if is_premium(subscription, now):
        return QuotaStatus(
            can_use=True,
            is_premium=True,
            attempts_remaining=None,
            subscription_status=status,
        )

    result = await db.execute(
        select(DailyUsage.attempt_count).where(
            DailyUsage.user_id == user_id,
            DailyUsage.usage_date == usage_date(now),
        )
    )
    used = result.scalar_one_or_none() or 0
    remaining = max(0, daily_limit - used)

    return QuotaStatus(
        can_use=remaining > 0,
        is_premium=False,
        attempts_remaining=remaining,
        subscription_status=status,
        attempts_used=used,
        daily_limit=daily_limit,
    )


async def record_usage(
    db: AsyncSession,
    user_id: str,
    now: dt.datetime | None = None,
) -> None:
    """Count one graded attempt against today's row.

    A single INSERT ... ON CONFLICT DO UPDATE, so two concurrent
    submissions both land instead of racing on a read-then-write.
    """
    if not user_id:
        raise ValidationError("user_id is required")

    today = usage_date(now)
    stmt = dialect_insert(db, DailyUsage).values(
        user_id=user_id, usage_date=today, attempt_count=1
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[DailyUsage.user_id, DailyUsage.usage_date],
        set_={"attempt_count": DailyUsage.attempt_count + 1},
    )

    try:
        await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to record usage for user=%s on %s", user_id, today)
        raise
