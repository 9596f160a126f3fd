"""Attempt grading APIs (typed dictation and transcribed speech)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.database import get_db
from dictee.errors import DicteeError, QuotaExceededError
from dictee.routes.common import error_response, read_json
from dictee.services.grading import check_transcription, grade_attempt

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/grade-attempt")
async def api_grade_attempt(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Grade a typed attempt. Body: {sentence_id, attempt_text, user_id?}."""
    try:
        body = await read_json(request)
        graded = await grade_attempt(
            db,
            sentence_id=body.get("sentence_id"),
            attempt_text=body.get("attempt_text"),
            user_id=body.get("user_id"),
        )
    except QuotaExceededError as e:
        payload = {"error": str(e)}
        if e.quota is not None:
            payload["usage"] = e.quota.to_dict()
        return JSONResponse(payload, status_code=e.status_code)
    except DicteeError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error grading attempt")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    return JSONResponse(graded.to_dict())


@router.post("/check-pronunciation")
async def api_check_pronunciation(request: Request):
    """Score a transcribed spoken attempt. Body: {reference_text, transcription}."""
    try:
        body = await read_json(request)
        result = check_transcription(body.get("reference_text"), body.get("transcription"))
    except DicteeError as e:
        return error_response(e)

    return JSONResponse({
        "transcription": body["transcription"].strip(),
        "diff": result.diff_dicts(),
        "score": result.score,
        "reference_text": body.get("reference_text"),
    })
