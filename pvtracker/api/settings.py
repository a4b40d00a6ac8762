# pvtracker/api/settings.py

import logging
from fastapi import APIRouter, Depends, HTTPException

from pvtracker.core.dependencies import get_store
from pvtracker.models.requests import AthleteUpdate, UnitsUpdate, WatermarkUpdate
from pvtracker.services.store import PoleVaultStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("")
def get_settings(store: PoleVaultStore = Depends(get_store)):
    return store.settings.to_json_dict()


@router.put("/units")
def update_units(data: UnitsUpdate, store: PoleVaultStore = Depends(get_store)):
    logger.info(f"Switching units to {data.units}")
    return store.set_units(data.units).to_json_dict()


@router.patch("/athlete")
def update_athlete(data: AthleteUpdate, store: PoleVaultStore = Depends(get_store)):
    """Update only the athlete fields present in the request body."""
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No athlete fields to update")

    athlete = store.settings.athlete
    for field, value in changes.items():
        try:
            athlete = store.set_athlete_field(field, "" if value is None else value)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return athlete.to_json_dict()


@router.put("/watermark")
def update_watermark(data: WatermarkUpdate, store: PoleVaultStore = Depends(get_store)):
    return store.set_watermark_uri(data.uri).to_json_dict()
