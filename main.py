"""Dictée Tutor – FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dictee.config import settings
from dictee.database import async_session, init_db
from dictee.seed import seed_default_sentences

# --- Configure logging so dictee.* loggers are visible alongside uvicorn ---
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(levelname)s:    %(name)s - %(message)s",
    stream=sys.stdout,
    force=True,  # override uvicorn's config
)

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    await init_db()
    if settings.seed_sentences:
        async with async_session() as db:
            await seed_default_sentences(db)
    log.info("Database ready (%s)", settings.database_url.split("://", 1)[0])

    yield


app = FastAPI(title="Dictée Tutor", version="0.1.0", lifespan=lifespan)


@app.get("/health")
async def health():
    return {"status": "ok"}


# --- Register routers ---
from dictee.routes.attempts import router as attempts_router  # noqa: E402
from dictee.routes.sentences import router as sentences_router  # noqa: E402
from dictee.routes.usage import router as usage_router  # noqa: E402
from dictee.routes.words import router as words_router  # noqa: E402

app.include_router(attempts_router, prefix="/api")
app.include_router(sentences_router, prefix="/api")
app.include_router(usage_router, prefix="/api")
app.include_router(words_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
