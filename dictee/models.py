"""SQLAlchemy ORM models for the dictation tutor."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dictee.database import Base
from dictee.enums import ActionType, CefrLevel, SubscriptionStatus, Theme


def _enum_column(enum_cls, name: str) -> Enum:
    # Store the enum *values* ("read_aloud"), not member names, with a CHECK constraint.
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=20,
        values_callable=lambda e: [m.value for m in e],
    )


def utcnow() -> dt.datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Reference sentences
# ---------------------------------------------------------------------------


class Sentence(Base):
    __tablename__ = "sentences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    translation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    difficulty: Mapped[CefrLevel] = mapped_column(_enum_column(CefrLevel, "cefr_level"))
    theme: Mapped[Theme] = mapped_column(_enum_column(Theme, "sentence_theme"))
    audio_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    source: Mapped[str] = mapped_column(String(20), default="manual")  # generated | seed | manual
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)

    attempts: Mapped[list["Attempt"]] = relationship(back_populates="sentence")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "translation": self.translation,
            "difficulty": self.difficulty.value,
            "theme": self.theme.value,
            "audio_url": self.audio_url,
        }


# ---------------------------------------------------------------------------
# Graded attempts
# ---------------------------------------------------------------------------


class Attempt(Base):
    __tablename__ = "attempts"
    __table_args__ = (
        CheckConstraint("score BETWEEN 0 AND 100", name="ck_attempts_score_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sentence_id: Mapped[int] = mapped_column(Integer, ForeignKey("sentences.id"))
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    attempt_text: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    diff_json: Mapped[str] = mapped_column(Text, nullable=False)  # [{"char", "correct"}, ...]
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)

    sentence: Mapped["Sentence"] = relationship(back_populates="attempts")


# ---------------------------------------------------------------------------
# Word tracking (append-only event log)
# ---------------------------------------------------------------------------


class WordEvent(Base):
    __tablename__ = "word_events"
    __table_args__ = (
        Index("idx_word_events_user_created", "user_id", "created_at"),
        Index("idx_word_events_user_session", "user_id", "session_id"),
        CheckConstraint("repeat_count >= 1", name="ck_word_events_repeat_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False)  # browser session, opaque
    word: Mapped[str] = mapped_column(String(100), nullable=False)
    action_type: Mapped[ActionType] = mapped_column(_enum_column(ActionType, "action_type"))
    sentence_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("sentences.id"), nullable=True
    )
    repeat_count: Mapped[int] = mapped_column(Integer, default=1)  # only meaningful for "heard"
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


# ---------------------------------------------------------------------------
# Free-tier usage & subscriptions
# ---------------------------------------------------------------------------


class DailyUsage(Base):
    __tablename__ = "daily_usage"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    usage_date: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    attempt_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")


class Subscription(Base):
    """Materialised billing state. Written by the billing webhook, read here."""

    __tablename__ = "subscriptions"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[SubscriptionStatus] = mapped_column(
        _enum_column(SubscriptionStatus, "subscription_status"),
        default=SubscriptionStatus.INACTIVE,
    )
    trial_end_date: Mapped[Optional[dt.datetime]] = mapped_column(DateTime, nullable=True)
    current_period_end: Mapped[Optional[dt.datetime]] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


class UserGoals(Base):
    __tablename__ = "user_goals"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    session_goal: Mapped[int] = mapped_column(Integer, nullable=False)
    weekly_goal: Mapped[int] = mapped_column(Integer, nullable=False)
    alltime_goal: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
