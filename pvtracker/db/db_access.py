# pvtracker/db/db_access.py

import json
import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from pvtracker.core.database import get_db_session
from .models import StoreEntry, DBVersion

logger = logging.getLogger(__name__)


class DBResult:
    """Standardized result object for database operations."""

    def __init__(self, success: bool, message: str, data: Optional[Any] = None):
        self.success = success
        self.message = message
        self.data = data

    def __bool__(self) -> bool:
        return self.success


# ------------------------------------------------------------------
# STORE BLOB
# ------------------------------------------------------------------

def get_store_version(factory: Optional[sessionmaker] = None) -> Optional[int]:
    """Version the stored blob was written at, or None for an empty database."""
    with get_db_session(factory) as db:
        row = db.query(DBVersion).filter(DBVersion.id == 1).first()
        return row.version if row else None


def load_store_blob(factory: Optional[sessionmaker] = None) -> DBResult:
    """
    Read every store entry.

    `data` is {"version": int | None, "state": dict | None}; state is None
    when nothing was ever written. Entries that are not valid JSON are
    skipped and logged, so the migration step backfills them.
    """
    with get_db_session(factory) as db:
        try:
            rows = db.query(StoreEntry).all()
            version_row = db.query(DBVersion).filter(DBVersion.id == 1).first()
        except SQLAlchemyError as e:
            logger.error(f"Error loading store: {e}")
            return DBResult(False, f"Error loading store: {e}")

        if not rows:
            return DBResult(True, "Store is empty", {"version": None, "state": None})

        state: Dict[str, Any] = {}
        for row in rows:
            try:
                state[row.key] = json.loads(row.value)
            except ValueError:
                logger.error(f"Store entry '{row.key}' is not valid JSON; ignoring it")

        version = version_row.version if version_row else None
        return DBResult(True, "Store loaded", {"version": version, "state": state})


def save_store_blob(state: Dict[str, Any], version: int, factory: Optional[sessionmaker] = None) -> DBResult:
    """Write every top-level key of `state` and stamp the version, in one transaction."""
    with get_db_session(factory) as db:
        try:
            existing = {row.key: row for row in db.query(StoreEntry).all()}
            for key, value in state.items():
                payload = json.dumps(value, ensure_ascii=False)
                if key in existing:
                    existing[key].value = payload
                else:
                    db.add(StoreEntry(key=key, value=payload))

            version_row = db.query(DBVersion).filter(DBVersion.id == 1).first()
            now = datetime.now(timezone.utc)
            if version_row:
                version_row.version = version
                version_row.updated_at = now
            else:
                db.add(DBVersion(id=1, version=version, updated_at=now))

            db.commit()
            return DBResult(True, "Store saved")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error saving store: {e}")
            return DBResult(False, f"Error saving store: {e}")
