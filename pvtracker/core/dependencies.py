# pvtracker/core/dependencies.py

import logging
from fastapi import HTTPException, Request, status

from pvtracker.services.store import PoleVaultStore

logger = logging.getLogger(__name__)


def get_store(request: Request) -> PoleVaultStore:
    """FastAPI dependency: the store loaded at startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        logger.error("Store requested before startup finished loading it")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tracker is still starting up",
        )
    return store
