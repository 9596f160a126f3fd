"""Reference sentence APIs."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.database import get_db
from dictee.errors import DicteeError
from dictee.routes.common import error_response, read_json
from dictee.services.sentences import (
    attach_audio,
    create_sentence,
    get_sentence,
    list_sentences,
    random_sentence,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/sentences")
async def api_list_sentences(db: AsyncSession = Depends(get_db)):
    sentences = await list_sentences(db)
    return JSONResponse({"sentences": [s.to_dict() for s in sentences]})


@router.get("/sentences/random")
async def api_random_sentence(db: AsyncSession = Depends(get_db)):
    """A random sentence with audio; {"sentence": null} when there is none."""
    sentence = await random_sentence(db)
    return JSONResponse({"sentence": sentence.to_dict() if sentence else None})


@router.get("/sentences/{sentence_id}")
async def api_get_sentence(sentence_id: int, db: AsyncSession = Depends(get_db)):
    try:
        sentence = await get_sentence(db, sentence_id)
    except DicteeError as e:
        return error_response(e)
    return JSONResponse({"sentence": sentence.to_dict()})


@router.post("/sentences")
async def api_create_sentence(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Body: {text, difficulty, theme, translation?}."""
    try:
        body = await read_json(request)
        sentence = await create_sentence(
            db,
            text=body.get("text"),
            difficulty=body.get("difficulty"),
            theme=body.get("theme"),
            translation=body.get("translation"),
        )
    except DicteeError as e:
        return error_response(e)
    return JSONResponse({"sentence": sentence.to_dict()}, status_code=201)


@router.post("/sentences/{sentence_id}/audio")
async def api_attach_audio(
    sentence_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Attach the generated dictation audio. Body: {audio_url}."""
    try:
        body = await read_json(request)
        sentence = await attach_audio(db, sentence_id, body.get("audio_url"))
    except DicteeError as e:
        return error_response(e)

    logger.info("Attached audio to sentence id=%s", sentence_id)
    return JSONResponse({"sentence": sentence.to_dict()})
