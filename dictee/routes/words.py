"""Word tracking and word statistics APIs."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.database import get_db
from dictee.errors import DicteeError
from dictee.routes.common import error_response, read_json
from dictee.services.goals import get_goals, goal_progress
from dictee.services.word_stats import windowed_stats, word_history
from dictee.services.word_tracking import track_words

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/track-words")
async def api_track_words(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Body: {user_id, session_id, text, action_type, sentence_id?, repeat_count?}."""
    try:
        body = await read_json(request)
        result = await track_words(
            db,
            user_id=body.get("user_id"),
            session_id=body.get("session_id"),
            text=body.get("text"),
            action_type=body.get("action_type"),
            sentence_id=body.get("sentence_id"),
            repeat_count=body.get("repeat_count", 1),
        )
    except DicteeError as e:
        return error_response(e)
    except SQLAlchemyError:
        return JSONResponse({"error": "Failed to track words"}, status_code=500)

    return JSONResponse({
        "success": True,
        "words_tracked": result.words_tracked,
        "unique_words": result.unique_words,
    })


@router.post("/word-stats")
async def api_word_stats(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Session / weekly / all-time summaries plus progress towards goals.

    Body: {user_id, session_id?}.
    """
    try:
        body = await read_json(request)
        user_id = body.get("user_id")
        stats = await windowed_stats(db, user_id, session_id=body.get("session_id"))
        goals = await get_goals(db, user_id)
    except DicteeError as e:
        return error_response(e)
    except SQLAlchemyError:
        logger.exception("Error fetching word stats")
        return JSONResponse({"error": "Failed to fetch word stats"}, status_code=500)

    progress = {
        "weekly": goal_progress(stats.weekly, goals.weekly_goal).to_dict(),
        "all_time": goal_progress(stats.all_time, goals.alltime_goal).to_dict(),
        "session": (
            goal_progress(stats.session, goals.session_goal).to_dict()
            if stats.session is not None
            else None
        ),
    }
    return JSONResponse({
        **stats.to_dict(),
        "goals": goals.to_dict(),
        "progress": progress,
    })


@router.post("/word-history")
async def api_word_history(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Body: {user_id, sort_by?, filter_by?, search_query?, page?, page_size?}."""
    try:
        body = await read_json(request)
        page = await word_history(
            db,
            user_id=body.get("user_id"),
            sort_by=body.get("sort_by"),
            filter_by=body.get("filter_by"),
            search_query=body.get("search_query"),
            page=body.get("page", 1),
            page_size=body.get("page_size"),
        )
    except DicteeError as e:
        return error_response(e)
    except SQLAlchemyError:
        logger.exception("Error fetching word history")
        return JSONResponse({"error": "Failed to fetch word history"}, status_code=500)

    return JSONResponse(page.to_dict())
