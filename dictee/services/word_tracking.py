"""Record which words a learner heard, typed, spoke or read."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.enums import ActionType, parse_enum
from dictee.errors import ValidationError
from dictee.models import WordEvent, utcnow
from dictee.services.sentences import get_sentence
from dictee.services.word_parser import parse_words, unique_words

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackResult:
    words_tracked: int
    unique_words: int


def _validate_repeat_count(repeat_count) -> int:
    if repeat_count is None:
        return 1
    if isinstance(repeat_count, bool) or not isinstance(repeat_count, int):
        raise ValidationError("repeat_count must be an integer")
    if repeat_count < 1:
        raise ValidationError("repeat_count must be at least 1")
    return repeat_count


async def track_words(
    db: AsyncSession,
    user_id: str,
    session_id: str,
    text: str,
    action_type: ActionType | str,
    sentence_id: int | None = None,
    repeat_count: int = 1,
) -> TrackResult:
    """
    Append one WordEvent per word of *text*.

    All rows share the action type, repeat count, sentence and timestamp,
    and go in as a single transaction: either the whole batch is visible
    to readers or none of it is.
    """
    if not user_id or not session_id or not text or not action_type:
        raise ValidationError("user_id, session_id, text, and action_type are required")

    action = parse_enum(ActionType, action_type, "action_type")
    repeat_count = _validate_repeat_count(repeat_count)
    if sentence_id is not None and (isinstance(sentence_id, bool) or not isinstance(sentence_id, int)):
        raise ValidationError("sentence_id must be an integer")

    words = parse_words(text)
    if not words:
        raise ValidationError("No valid words found in text")
    if sentence_id is not None:
        await get_sentence(db, sentence_id)

    created_at = utcnow()
    db.add_all([
        WordEvent(
            user_id=user_id,
            session_id=session_id,
            word=word,
            action_type=action,
            sentence_id=sentence_id,
            repeat_count=repeat_count,
            created_at=created_at,
        )
        for word in words
    ])

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(
            "Failed to track %d words for user=%s session=%s", len(words), user_id, session_id
        )
        raise

    result = TrackResult(words_tracked=len(words), unique_words=len(unique_words(text)))
    logger.debug(
        "Tracked %d words (%d unique) as %s for user=%s",
        result.words_tracked, result.unique_words, action.value, user_id,
    )
    return result
