"""Grade a written or spoken attempt against its reference sentence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.errors import QuotaExceededError, ValidationError
from dictee.models import Attempt
from dictee.services.scoring import ScoreResult, calculate_diff
from dictee.services.sentences import get_sentence
from dictee.services.usage import check_quota, record_usage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradeResult:
    result: ScoreResult
    reference_text: str
    attempt_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "diff": self.result.diff_dicts(),
            "score": self.result.score,
            "reference_text": self.reference_text,
        }


async def grade_attempt(
    db: AsyncSession,
    sentence_id: int,
    attempt_text: str,
    user_id: str | None = None,
) -> GradeResult:
    """
    Score *attempt_text* against the stored sentence.

    Anonymous attempts are scored but not stored.  For a signed-in
    learner the Quota Gate runs first, the attempt is stored on a
    best-effort basis and, on the free tier, the attempt is counted.
    Neither write can fail the request once the score exists.
    """
    if not sentence_id or attempt_text is None:
        raise ValidationError("sentence_id and attempt_text are required")
    if isinstance(sentence_id, bool) or not isinstance(sentence_id, int):
        raise ValidationError("sentence_id must be an integer")
    if not isinstance(attempt_text, str):
        raise ValidationError("attempt_text must be a string")

    sentence = await get_sentence(db, sentence_id)
    reference_text = sentence.text

    quota = None
    if user_id:
        quota = await check_quota(db, user_id)
        if not quota.can_use:
            raise QuotaExceededError("Daily attempt limit reached", quota=quota)

    result = calculate_diff(reference_text, attempt_text)
    logger.debug(
        "Graded sentence=%s: %d/%d chars correct, score=%d",
        sentence_id, result.correct_chars, result.total_chars, result.score,
    )

    attempt_id = None
    if user_id:
        attempt_id = await _store_attempt(db, sentence_id, user_id, attempt_text, result)
        if not quota.is_premium:
            await _count_usage(db, user_id, sentence_id)

    return GradeResult(
        result=result,
        reference_text=reference_text,
        attempt_id=attempt_id,
    )


async def _store_attempt(
    db: AsyncSession,
    sentence_id: int,
    user_id: str,
    attempt_text: str,
    result: ScoreResult,
) -> int | None:
    # The score is already computed; losing the record must not fail the request.
    try:
        attempt = Attempt(
            sentence_id=sentence_id,
            user_id=user_id,
            attempt_text=attempt_text,
            score=result.score,
            diff_json=json.dumps(result.diff_dicts(), ensure_ascii=False),
        )
        db.add(attempt)
        await db.commit()
        return attempt.id
    except Exception:
        await db.rollback()
        logger.exception(
            "Failed to store attempt: user=%s sentence=%s score=%d",
            user_id, sentence_id, result.score,
        )
        return None


async def _count_usage(db: AsyncSession, user_id: str, sentence_id: int) -> None:
    # Counting happens after grading; a failed count must not cost the learner the score.
    try:
        await record_usage(db, user_id)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(
            "Failed to record usage for graded attempt: user=%s sentence=%s",
            user_id, sentence_id,
        )


def check_transcription(reference_text: str, transcription: str) -> ScoreResult:
    """Score an already-transcribed spoken attempt against a literal reference."""
    if not reference_text or not isinstance(reference_text, str):
        raise ValidationError("reference_text is required")
    if transcription is None or not isinstance(transcription, str):
        raise ValidationError("transcription is required")
    return calculate_diff(reference_text, transcription.strip())
