"""Per-learner word-count goals for the session, weekly and all-time windows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.config import settings
from dictee.database import dialect_insert
from dictee.errors import ValidationError
from dictee.models import UserGoals, utcnow
from dictee.services.word_stats import WindowStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalSettings:
    session_goal: int
    weekly_goal: int
    alltime_goal: int

    def to_dict(self) -> dict:
        return {
            "session_goal": self.session_goal,
            "weekly_goal": self.weekly_goal,
            "alltime_goal": self.alltime_goal,
        }


@dataclass(frozen=True)
class GoalProgress:
    total_words: int
    goal: int
    percent: float
    goal_met: bool

    def to_dict(self) -> dict:
        return {
            "total_words": self.total_words,
            "goal": self.goal,
            "percent": self.percent,
            "goal_met": self.goal_met,
        }


def default_goals() -> GoalSettings:
    return GoalSettings(
        session_goal=settings.default_session_goal,
        weekly_goal=settings.default_weekly_goal,
        alltime_goal=settings.default_alltime_goal,
    )


async def get_goals(db: AsyncSession, user_id: str) -> GoalSettings:
    """Stored goals for *user_id*, or the defaults when none were saved."""
    if not user_id:
        raise ValidationError("user_id is required")

    result = await db.execute(select(UserGoals).where(UserGoals.user_id == user_id))
    row = result.scalar_one_or_none()
    if row is None:
        return default_goals()
    return GoalSettings(
        session_goal=row.session_goal,
        weekly_goal=row.weekly_goal,
        alltime_goal=row.alltime_goal,
    )


def _validate_goal(name: str, value) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be a whole number")
    if value <= 0:
        raise ValidationError(f"{name} must be greater than 0")


async def set_goals(
    db: AsyncSession,
    user_id: str,
    session_goal: int | None = None,
    weekly_goal: int | None = None,
    alltime_goal: int | None = None,
) -> GoalSettings:
    """
    Upsert the learner's goals.

    Every provided value is validated before anything is written; a
    field left out is reset to its default rather than kept.
    """
    if not user_id:
        raise ValidationError("user_id is required")
    _validate_goal("session_goal", session_goal)
    _validate_goal("weekly_goal", weekly_goal)
    _validate_goal("alltime_goal", alltime_goal)

    defaults = default_goals()
    goals = GoalSettings(
        session_goal=session_goal or defaults.session_goal,
        weekly_goal=weekly_goal or defaults.weekly_goal,
        alltime_goal=alltime_goal or defaults.alltime_goal,
    )

    stmt = dialect_insert(db, UserGoals).values(user_id=user_id, updated_at=utcnow(), **goals.to_dict())
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserGoals.user_id],
        set_={
            "session_goal": stmt.excluded.session_goal,
            "weekly_goal": stmt.excluded.weekly_goal,
            "alltime_goal": stmt.excluded.alltime_goal,
            "updated_at": stmt.excluded.updated_at,
        },
    )

    try:
        await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to save goals for user=%s", user_id)
        raise

    logger.info("Goals updated for user=%s: %s", user_id, goals.to_dict())
    return goals


def goal_progress(stats: WindowStats, goal: int) -> GoalProgress:
    """How far the words in one window get towards *goal* (percent capped at 100)."""
    total = stats.total_words
    percent = min(total / goal * 100, 100.0) if goal > 0 else 0.0
    return GoalProgress(
        total_words=total,
        goal=goal,
        percent=round(percent, 1),
        goal_met=total >= goal,
    )
