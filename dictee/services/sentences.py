"""Reference sentence catalogue."""

from __future__ import annotations

import logging
import random

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.config import settings
from dictee.enums import CefrLevel, Theme, parse_enum
from dictee.errors import NotFoundError, ValidationError
from dictee.models import Sentence

logger = logging.getLogger(__name__)


async def get_sentence(db: AsyncSession, sentence_id: int) -> Sentence:
    if sentence_id is None:
        raise ValidationError("sentence_id is required")
    result = await db.execute(select(Sentence).where(Sentence.id == sentence_id))
    sentence = result.scalar_one_or_none()
    if sentence is None:
        raise NotFoundError("Sentence not found")
    return sentence


async def list_sentences(db: AsyncSession, limit: int | None = None) -> list[Sentence]:
    """Most recently created sentences first."""
    result = await db.execute(
        select(Sentence)
        .order_by(Sentence.created_at.desc(), Sentence.id.desc())
        .limit(limit or settings.sentence_list_limit)
    )
    return list(result.scalars().all())


async def random_sentence(db: AsyncSession) -> Sentence | None:
    """A random sentence that already has dictation audio, or None."""
    result = await db.execute(select(Sentence).where(Sentence.audio_url.isnot(None)))
    candidates = result.scalars().all()
    if not candidates:
        logger.info("No sentences with audio found")
        return None
    return random.choice(candidates)


async def create_sentence(
    db: AsyncSession,
    text: str,
    difficulty: CefrLevel | str,
    theme: Theme | str,
    translation: str | None = None,
    source: str = "manual",
) -> Sentence:
    if not text or not isinstance(text, str) or not text.strip():
        raise ValidationError("text is required")
    if not difficulty or not theme:
        raise ValidationError("difficulty and theme are required")

    sentence = Sentence(
        text=text.strip(),
        translation=translation,
        difficulty=parse_enum(CefrLevel, difficulty, "difficulty"),
        theme=parse_enum(Theme, theme, "theme"),
        source=source,
    )
    db.add(sentence)
    await db.commit()
    logger.info("Created sentence id=%s (%s, %s)", sentence.id, sentence.difficulty.value, sentence.theme.value)
    return sentence


async def attach_audio(db: AsyncSession, sentence_id: int, audio_url: str) -> Sentence:
    """Store the dictation audio URL; the only field a sentence may change."""
    if not audio_url or not isinstance(audio_url, str):
        raise ValidationError("audio_url is required")
    sentence = await get_sentence(db, sentence_id)
    sentence.audio_url = audio_url
    await db.commit()
    return sentence
