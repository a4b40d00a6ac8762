# pvtracker/api/weekly_plan.py

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from pvtracker.core.dependencies import get_store
from pvtracker.core.exceptions import PlanValidationError
from pvtracker.services.store import PoleVaultStore
from pvtracker.services.weekly_plan import WEEKDAYS, day_plan, parse_plan_file, plan_to_document, today_name

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/plan", tags=["Weekly Plan"])


def _plan_json(plan) -> dict:
    return {day: day_plan(plan, day).to_json_dict() for day in WEEKDAYS}


@router.get("")
def get_weekly_plan(store: PoleVaultStore = Depends(get_store)):
    return {
        "planOverridden": store.settings.plan_overridden,
        "days": _plan_json(store.weekly_plan),
    }


@router.get("/today")
def get_todays_plan(store: PoleVaultStore = Depends(get_store)):
    day = today_name()
    return {"day": day, **day_plan(store.weekly_plan, day).to_json_dict()}


@router.get("/export")
def export_weekly_plan(store: PoleVaultStore = Depends(get_store)):
    """The current plan in the upload file format."""
    return plan_to_document(store.weekly_plan)


@router.post("/upload")
async def upload_weekly_plan(request: Request, store: PoleVaultStore = Depends(get_store)):
    """
    Replace the weekly plan with an uploaded plan file.

    The request body is the raw file content. Anything malformed is rejected
    with a 400 and the current plan stays in place.
    """
    content = await request.body()
    try:
        plan = parse_plan_file(content)
    except PlanValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "message": "Practice plan uploaded!", "days": _plan_json(store.set_weekly_plan(plan))}


@router.post("/reset")
def reset_weekly_plan(store: PoleVaultStore = Depends(get_store)):
    return {"success": True, "message": "Weekly plan restored", "days": _plan_json(store.reset_weekly_plan())}
