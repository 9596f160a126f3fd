"""
Tests for word statistics: folds, week boundaries, windowed summaries
and the word history listing
"""

import datetime as dt
from types import SimpleNamespace

import pytest

from dictee.enums import ActionType, SortKey
from dictee.errors import ValidationError
from dictee.services.word_stats import (
    collation_key,
    fold_word_stats,
    summarize_window,
    week_start,
    windowed_stats,
    word_history,
)
from dictee.services.word_tracking import track_words

T0 = dt.datetime(2026, 10, 14, 9, 0)  # a Wednesday


def _event(word, action, minutes=0, repeat_count=1):
    return SimpleNamespace(
        word=word,
        action_type=action,
        repeat_count=repeat_count,
        created_at=T0 + dt.timedelta(minutes=minutes),
    )


class TestFoldWordStats:
    """Test the per-word fold"""

    def test_heard_counts_repeats(self):
        """One heard event with 5 replays plus two typed events"""
        events = [
            _event("chat", ActionType.HEARD, minutes=0, repeat_count=5),
            _event("chat", ActionType.TYPED, minutes=1),
            _event("chat", ActionType.TYPED, minutes=2),
        ]
        [stat] = fold_word_stats(events)

        assert stat.word == "chat"
        assert stat.times_heard == 5
        assert stat.times_typed == 2
        assert stat.total_interactions == 7
        assert stat.last_seen == T0 + dt.timedelta(minutes=2)

    def test_repeat_count_ignored_for_other_actions(self):
        [stat] = fold_word_stats([_event("chien", ActionType.SPOKEN, repeat_count=4)])
        assert stat.times_spoken == 1

    def test_all_action_types(self):
        events = [_event("mot", action) for action in ActionType]
        [stat] = fold_word_stats(events)
        assert stat.times_read_aloud == 1
        assert stat.times_read_silent == 1
        assert stat.total_interactions == 5

    def test_first_encounter_order(self):
        events = [_event("b", ActionType.TYPED), _event("a", ActionType.TYPED), _event("b", ActionType.TYPED)]
        assert [s.word for s in fold_word_stats(events)] == ["b", "a"]

    def test_empty(self):
        assert fold_word_stats([]) == []


class TestSummarizeWindow:
    """Test the per-action window reduction"""

    def test_totals_and_distinct(self):
        events = [
            _event("chat", ActionType.HEARD, repeat_count=3),
            _event("chat", ActionType.HEARD, repeat_count=2),
            _event("chien", ActionType.HEARD),
            _event("chat", ActionType.TYPED),
        ]
        stats = summarize_window(events)

        assert stats.get(ActionType.HEARD).total == 6
        assert stats.get(ActionType.HEARD).distinct == 2
        assert stats.get(ActionType.TYPED).total == 1
        assert stats.get(ActionType.TYPED).distinct == 1
        assert stats.get(ActionType.SPOKEN).total == 0
        assert stats.total_words == 7

    def test_to_dict_lists_every_action(self):
        data = summarize_window([]).to_dict()
        assert set(data) == {"heard", "typed", "spoken", "read_aloud", "read_silent"}
        assert data["heard"] == {"total": 0, "distinct": 0}


class TestWeekStart:
    """Test the Monday-based week boundary"""

    @pytest.mark.parametrize(
        "now, expected",
        [
            (dt.datetime(2026, 10, 14, 15, 0), dt.datetime(2026, 10, 12)),  # Wednesday
            (dt.datetime(2026, 10, 12, 0, 30), dt.datetime(2026, 10, 12)),  # Monday
            (dt.datetime(2026, 10, 18, 23, 59), dt.datetime(2026, 10, 12)),  # Sunday
            (dt.datetime(2026, 10, 19, 0, 0), dt.datetime(2026, 10, 19)),  # next Monday
        ],
    )
    def test_utc(self, now, expected):
        assert week_start(now, tz="UTC") == expected

    def test_local_timezone(self):
        """Sunday 23:30 UTC is already Monday in Paris (UTC+2 in October)"""
        now = dt.datetime(2026, 10, 18, 23, 30, tzinfo=dt.timezone.utc)
        assert week_start(now, tz="Europe/Paris") == dt.datetime(2026, 10, 18, 22, 0)


class TestCollationKey:
    """Test the alphabetical sort key"""

    def test_accents_sort_with_base_letter(self):
        words = ["zèbre", "élève", "avion", "ecole", "été"]
        assert sorted(words, key=collation_key) == ["avion", "ecole", "élève", "été", "zèbre"]


class TestWindowedStats:
    """Test windowed_stats against the database"""

    @pytest.mark.asyncio
    async def test_windows(self, db, add_event):
        now = dt.datetime(2026, 10, 14, 12, 0)  # Wednesday, week starts 2026-10-12
        await add_event("chat", ActionType.HEARD, dt.datetime(2026, 10, 5, 10, 0), repeat_count=5)
        await add_event("chat", ActionType.TYPED, dt.datetime(2026, 10, 13, 10, 0))
        await add_event("chien", ActionType.TYPED, dt.datetime(2026, 10, 14, 11, 0), session_id="session-2")
        await add_event("chat", ActionType.HEARD, dt.datetime(2026, 10, 14, 11, 0), user_id="user-2")

        stats = await windowed_stats(db, "user-1", session_id="session-2", now=now)

        assert stats.all_time.get(ActionType.HEARD).total == 5
        assert stats.all_time.get(ActionType.TYPED).total == 2
        assert stats.all_time.get(ActionType.TYPED).distinct == 2

        assert stats.weekly.get(ActionType.HEARD).total == 0
        assert stats.weekly.get(ActionType.TYPED).total == 2

        assert stats.session.get(ActionType.TYPED).total == 1
        assert stats.session.get(ActionType.TYPED).distinct == 1

    @pytest.mark.asyncio
    async def test_no_session(self, db):
        stats = await windowed_stats(db, "user-1")
        assert stats.session is None
        assert stats.to_dict()["session"] is None

    @pytest.mark.asyncio
    async def test_user_required(self, db):
        with pytest.raises(ValidationError):
            await windowed_stats(db, "")


class TestWordHistory:
    """Test word_history filtering, sorting and pagination"""

    @pytest.mark.asyncio
    async def test_pagination(self, db):
        """120 distinct words in pages of 50"""
        text = " ".join(f"mot{i}" for i in range(120))
        await track_words(db, "user-1", "session-1", text, "typed")

        first = await word_history(db, "user-1", sort_by="times_typed", page=1, page_size=50)
        last = await word_history(db, "user-1", sort_by="times_typed", page=3, page_size=50)
        beyond = await word_history(db, "user-1", sort_by="times_typed", page=4, page_size=50)

        assert first.pagination.total_pages == 3
        assert first.pagination.total_words == 120
        assert len(first.words) == 50
        assert len(last.words) == 20
        assert beyond.words == []

    @pytest.mark.asyncio
    async def test_sort_by_counts_descending(self, db, add_event):
        await add_event("un", ActionType.TYPED, T0)
        await add_event("deux", ActionType.TYPED, T0)
        await add_event("deux", ActionType.TYPED, T0)
        await add_event("trois", ActionType.HEARD, T0, repeat_count=9)

        by_typed = await word_history(db, "user-1", sort_by=SortKey.TIMES_TYPED)
        by_total = await word_history(db, "user-1", sort_by=SortKey.TOTAL_INTERACTIONS)

        assert [w.word for w in by_typed.words][:2] == ["deux", "un"]
        assert [w.word for w in by_total.words] == ["trois", "deux", "un"]

    @pytest.mark.asyncio
    async def test_sort_alphabetical_and_last_seen(self, db, add_event):
        await add_event("élève", ActionType.READ_ALOUD, T0 + dt.timedelta(hours=2))
        await add_event("avion", ActionType.READ_ALOUD, T0)
        await add_event("ecole", ActionType.READ_ALOUD, T0 + dt.timedelta(hours=1))

        alpha = await word_history(db, "user-1", sort_by="alphabetical")
        recent = await word_history(db, "user-1", sort_by="last_seen")

        assert [w.word for w in alpha.words] == ["avion", "ecole", "élève"]
        assert [w.word for w in recent.words] == ["élève", "ecole", "avion"]

    @pytest.mark.asyncio
    async def test_search_and_filter(self, db, add_event):
        await add_event("chat", ActionType.TYPED, T0)
        await add_event("chien", ActionType.HEARD, T0)
        await add_event("maison", ActionType.TYPED, T0)

        searched = await word_history(db, "user-1", search_query="  CH ")
        filtered = await word_history(db, "user-1", filter_by="typed")
        both = await word_history(db, "user-1", filter_by="typed", search_query="ch")

        assert {w.word for w in searched.words} == {"chat", "chien"}
        assert {w.word for w in filtered.words} == {"chat", "maison"}
        assert [w.word for w in both.words] == ["chat"]
        assert both.pagination.total_words == 1

    @pytest.mark.asyncio
    async def test_defaults_to_times_heard(self, db, add_event):
        await add_event("peu", ActionType.HEARD, T0, repeat_count=1)
        await add_event("beaucoup", ActionType.HEARD, T0, repeat_count=4)

        page = await word_history(db, "user-1", sort_by=None)
        assert [w.word for w in page.words] == ["beaucoup", "peu"]
        assert page.pagination.page_size == 50

    @pytest.mark.asyncio
    async def test_empty_history(self, db):
        page = await word_history(db, "nobody")
        assert page.words == []
        assert page.pagination.total_pages == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sort_by": "popularity"},
            {"filter_by": "read"},
            {"page": 0},
            {"page_size": 0},
            {"page_size": 10_000},
            {"page": "2"},
        ],
    )
    async def test_invalid_arguments(self, db, kwargs):
        with pytest.raises(ValidationError):
            await word_history(db, "user-1", **kwargs)
