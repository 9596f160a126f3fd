"""Free-tier usage and learner goal APIs."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dictee.database import get_db
from dictee.errors import DicteeError
from dictee.routes.common import error_response, read_json
from dictee.services.goals import get_goals, set_goals
from dictee.services.usage import check_quota, record_usage

logger = logging.getLogger(__name__)

router = APIRouter()


# ---- Quota ----


@router.post("/check-usage")
async def api_check_usage(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Body: {user_id}."""
    try:
        body = await read_json(request)
        quota = await check_quota(db, body.get("user_id"))
    except DicteeError as e:
        return error_response(e)
    except SQLAlchemyError:
        logger.exception("Error checking usage")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    return JSONResponse(quota.to_dict())


@router.post("/record-usage")
async def api_record_usage(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Body: {user_id}."""
    try:
        body = await read_json(request)
        await record_usage(db, body.get("user_id"))
    except DicteeError as e:
        return error_response(e)
    except SQLAlchemyError:
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    return JSONResponse({"success": True})


# ---- Goals ----


@router.get("/user-goals")
async def api_get_goals(
    user_id: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    try:
        goals = await get_goals(db, user_id)
    except DicteeError as e:
        return error_response(e)
    except SQLAlchemyError:
        logger.exception("Error fetching user goals")
        return JSONResponse({"error": "Failed to fetch user goals"}, status_code=500)

    return JSONResponse(goals.to_dict())


@router.post("/user-goals")
async def api_set_goals(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Body: {user_id, session_goal?, weekly_goal?, alltime_goal?}."""
    try:
        body = await read_json(request)
        goals = await set_goals(
            db,
            body.get("user_id"),
            session_goal=body.get("session_goal"),
            weekly_goal=body.get("weekly_goal"),
            alltime_goal=body.get("alltime_goal"),
        )
    except DicteeError as e:
        return error_response(e)
    except SQLAlchemyError:
        return JSONResponse({"error": "Failed to update user goals"}, status_code=500)

    return JSONResponse(goals.to_dict())
