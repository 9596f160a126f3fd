"""Seed the database with a starter set of dictation sentences."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.enums import CefrLevel, Theme
from dictee.models import Sentence

logger = logging.getLogger(__name__)

DEFAULT_SENTENCES: list[dict] = [
    {
        "text": "Bonjour, je m'appelle Marie.",
        "translation": "Hello, my name is Marie.",
        "difficulty": CefrLevel.A1,
        "theme": Theme.GENERAL,
    },
    {
        "text": "Le train pour Lyon part à huit heures.",
        "translation": "The train to Lyon leaves at eight o'clock.",
        "difficulty": CefrLevel.A2,
        "theme": Theme.TRAVEL,
    },
    {
        "text": "Nous avons mangé une tarte aux pommes délicieuse.",
        "translation": "We ate a delicious apple tart.",
        "difficulty": CefrLevel.A2,
        "theme": Theme.FOOD,
    },
    {
        "text": "Aujourd'hui, je travaille à la maison parce qu'il pleut.",
        "translation": "Today I am working from home because it is raining.",
        "difficulty": CefrLevel.B1,
        "theme": Theme.DAILY_LIFE,
    },
]


async def seed_default_sentences(db: AsyncSession) -> None:
    """Insert the starter sentences if the catalogue is empty."""
    result = await db.execute(select(func.count()).select_from(Sentence))
    if result.scalar_one() > 0:
        return

    db.add_all(Sentence(source="seed", **data) for data in DEFAULT_SENTENCES)
    await db.commit()
    logger.info("Seeded %d default sentences", len(DEFAULT_SENTENCES))
