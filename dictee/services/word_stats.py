"""Word statistics computed from the word event log.

Every query re-reads the learner's events and folds them into fresh,
immutable results.  Per-learner volumes are small (vocabulary size
times practice frequency), so there is no materialised summary table
that could drift out of step with the log.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import unicodedata
from dataclasses import dataclass, field
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.config import settings
from dictee.enums import ActionType, SortKey, parse_enum
from dictee.errors import ValidationError
from dictee.models import WordEvent, utcnow

logger = logging.getLogger(__name__)

# WordStat attribute holding the count for each action type.
ACTION_FIELDS: dict[ActionType, str] = {
    ActionType.HEARD: "times_heard",
    ActionType.TYPED: "times_typed",
    ActionType.SPOKEN: "times_spoken",
    ActionType.READ_ALOUD: "times_read_aloud",
    ActionType.READ_SILENT: "times_read_silent",
}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WordStat:
    word: str
    times_heard: int
    times_typed: int
    times_spoken: int
    times_read_aloud: int
    times_read_silent: int
    last_seen: dt.datetime

    @property
    def total_interactions(self) -> int:
        return (
            self.times_heard
            + self.times_typed
            + self.times_spoken
            + self.times_read_aloud
            + self.times_read_silent
        )

    def count_for(self, action: ActionType) -> int:
        return getattr(self, ACTION_FIELDS[action])

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "times_heard": self.times_heard,
            "times_typed": self.times_typed,
            "times_spoken": self.times_spoken,
            "times_read_aloud": self.times_read_aloud,
            "times_read_silent": self.times_read_silent,
            "total_interactions": self.total_interactions,
            "last_seen": self.last_seen.isoformat(),
        }


@dataclass(frozen=True)
class ActionTotals:
    total: int = 0
    distinct: int = 0


@dataclass(frozen=True)
class WindowStats:
    """Per action type: total count and number of distinct words."""

    actions: dict[ActionType, ActionTotals] = field(default_factory=dict)

    def get(self, action: ActionType) -> ActionTotals:
        return self.actions.get(action, ActionTotals())

    @property
    def total_words(self) -> int:
        return sum(self.get(a).total for a in ActionType)

    def to_dict(self) -> dict:
        return {
            a.value: {"total": self.get(a).total, "distinct": self.get(a).distinct}
            for a in ActionType
        }


@dataclass(frozen=True)
class WindowedStats:
    all_time: WindowStats
    weekly: WindowStats
    session: Optional[WindowStats] = None

    def to_dict(self) -> dict:
        return {
            "session": self.session.to_dict() if self.session is not None else None,
            "weekly": self.weekly.to_dict(),
            "all_time": self.all_time.to_dict(),
        }


@dataclass(frozen=True)
class Pagination:
    current_page: int
    page_size: int
    total_words: int
    total_pages: int

    def to_dict(self) -> dict:
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "total_words": self.total_words,
            "total_pages": self.total_pages,
        }


@dataclass(frozen=True)
class WordHistoryPage:
    words: list[WordStat]
    pagination: Pagination

    def to_dict(self) -> dict:
        return {
            "words": [w.to_dict() for w in self.words],
            "pagination": self.pagination.to_dict(),
        }


# ---------------------------------------------------------------------------
# Pure folds
# ---------------------------------------------------------------------------


def _event_weight(event) -> int:
    """A "heard" event stands for every replay in one listening pass."""
    if event.action_type == ActionType.HEARD:
        return event.repeat_count or 1
    return 1


def fold_word_stats(events: Iterable) -> list[WordStat]:
    """
    Fold events into one WordStat per word.

    Words come out in the order they are first met in *events*; callers
    pass events newest first so ties in later sorts favour recent words.
    """
    counts: dict[str, dict[ActionType, int]] = {}
    last_seen: dict[str, dt.datetime] = {}

    for event in events:
        per_word = counts.setdefault(event.word, dict.fromkeys(ActionType, 0))
        per_word[event.action_type] += _event_weight(event)
        seen = last_seen.get(event.word)
        if seen is None or event.created_at > seen:
            last_seen[event.word] = event.created_at

    return [
        WordStat(
            word=word,
            times_heard=per_word[ActionType.HEARD],
            times_typed=per_word[ActionType.TYPED],
            times_spoken=per_word[ActionType.SPOKEN],
            times_read_aloud=per_word[ActionType.READ_ALOUD],
            times_read_silent=per_word[ActionType.READ_SILENT],
            last_seen=last_seen[word],
        )
        for word, per_word in counts.items()
    ]


def summarize_window(events: Iterable) -> WindowStats:
    """Reduce events to per-action totals and distinct-word counts."""
    totals = dict.fromkeys(ActionType, 0)
    distinct: dict[ActionType, set[str]] = {a: set() for a in ActionType}

    for event in events:
        totals[event.action_type] += _event_weight(event)
        distinct[event.action_type].add(event.word)

    return WindowStats(actions={
        a: ActionTotals(total=totals[a], distinct=len(distinct[a])) for a in ActionType
    })


def week_start(now: dt.datetime | None = None, tz: str | None = None) -> dt.datetime:
    """
    Monday 00:00 of the current week in the server timezone, as naive UTC.

    isoweekday() numbers Sunday as 7, so a Sunday still belongs to the
    week that started the previous Monday.
    """
    zone = ZoneInfo(tz or settings.timezone)
    if now is None:
        now = dt.datetime.now(dt.timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)

    local = now.astimezone(zone)
    monday = (local - dt.timedelta(days=local.isoweekday() - 1)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return monday.astimezone(dt.timezone.utc).replace(tzinfo=None)


def collation_key(word: str) -> tuple[str, str]:
    """Sort key approximating French dictionary order.

    Accents are ignored at the first level ("école" sorts with "ecole",
    before "élève"), then broken by the exact spelling.
    """
    decomposed = unicodedata.normalize("NFKD", word)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), word


def _sort_words(words: list[WordStat], sort_by: SortKey) -> list[WordStat]:
    if sort_by == SortKey.ALPHABETICAL:
        return sorted(words, key=lambda w: collation_key(w.word))
    if sort_by == SortKey.LAST_SEEN:
        return sorted(words, key=lambda w: w.last_seen, reverse=True)
    if sort_by == SortKey.TOTAL_INTERACTIONS:
        return sorted(words, key=lambda w: w.total_interactions, reverse=True)
    # Remaining keys are named after the WordStat count attribute.
    return sorted(words, key=lambda w: getattr(w, sort_by.value), reverse=True)


def filter_and_sort(
    words: list[WordStat],
    sort_by: SortKey,
    filter_by: Optional[ActionType] = None,
    search_query: Optional[str] = None,
) -> list[WordStat]:
    if search_query and search_query.strip():
        query = search_query.strip().lower()
        words = [w for w in words if query in w.word.lower()]

    if filter_by is not None:
        words = [w for w in words if w.count_for(filter_by) > 0]

    return _sort_words(words, sort_by)


def paginate(words: list[WordStat], page: int, page_size: int) -> WordHistoryPage:
    total_words = len(words)
    start = (page - 1) * page_size
    return WordHistoryPage(
        words=words[start:start + page_size],
        pagination=Pagination(
            current_page=page,
            page_size=page_size,
            total_words=total_words,
            total_pages=math.ceil(total_words / page_size),
        ),
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def _load_events(
    db: AsyncSession,
    user_id: str,
    session_id: str | None = None,
    since: dt.datetime | None = None,
) -> list[WordEvent]:
    stmt = select(WordEvent).where(WordEvent.user_id == user_id)
    if session_id is not None:
        stmt = stmt.where(WordEvent.session_id == session_id)
    if since is not None:
        stmt = stmt.where(WordEvent.created_at >= since)
    stmt = stmt.order_by(WordEvent.created_at.desc(), WordEvent.id.desc())

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def windowed_stats(
    db: AsyncSession,
    user_id: str,
    session_id: str | None = None,
    now: dt.datetime | None = None,
) -> WindowedStats:
    """All-time, current-week and (optionally) current-session summaries."""
    if not user_id:
        raise ValidationError("user_id is required")

    since = week_start(now)
    all_time = summarize_window(await _load_events(db, user_id))
    weekly = summarize_window(await _load_events(db, user_id, since=since))
    session = None
    if session_id:
        session = summarize_window(await _load_events(db, user_id, session_id=session_id))

    logger.debug(
        "Word stats for user=%s: all_time=%d weekly=%d (since %s)",
        user_id, all_time.total_words, weekly.total_words, since,
    )
    return WindowedStats(all_time=all_time, weekly=weekly, session=session)


def _validate_page(page, page_size) -> tuple[int, int]:
    for name, value in (("page", page), ("page_size", page_size)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer")
    if page < 1:
        raise ValidationError("page must be at least 1")
    if not 1 <= page_size <= settings.word_history_max_page_size:
        raise ValidationError(
            f"page_size must be between 1 and {settings.word_history_max_page_size}"
        )
    return page, page_size


async def word_history(
    db: AsyncSession,
    user_id: str,
    sort_by: SortKey | str = SortKey.TIMES_HEARD,
    filter_by: ActionType | str | None = None,
    search_query: str | None = None,
    page: int = 1,
    page_size: int | None = None,
) -> WordHistoryPage:
    """Searchable, sortable, paginated per-word history for one learner."""
    if not user_id:
        raise ValidationError("user_id is required")

    sort_key = parse_enum(SortKey, sort_by or SortKey.TIMES_HEARD, "sort_by")
    action_filter = parse_enum(ActionType, filter_by, "filter_by") if filter_by else None
    if page_size is None:
        page_size = settings.word_history_page_size
    page, page_size = _validate_page(page, page_size)
    if search_query is not None and not isinstance(search_query, str):
        raise ValidationError("search_query must be a string")

    words = fold_word_stats(await _load_events(db, user_id))
    words = filter_and_sort(words, sort_key, action_filter, search_query)
    return paginate(words, page, page_size)
