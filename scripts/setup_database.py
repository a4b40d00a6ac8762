# scripts/setup_database.py
#!/usr/bin/env python
"""
Simple database setup script for a fresh database
Run this to create the store tables and seed the default store
"""
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from pvtracker.core.database import DATABASE_URL, SessionLocal, create_tables
from pvtracker.db.db_access import get_store_version
from pvtracker.services.migrations import STORE_VERSION
from pvtracker.services.store import PoleVaultStore
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def main():
    """Create all tables and write the default store if the database is empty"""
    try:
        logger.info(f"Creating database tables on {DATABASE_URL.split('@')[-1]}...")
        create_tables()
        logger.info("Database tables created successfully!")

        version = get_store_version(SessionLocal)
        if version is None:
            logger.info("Seeding default store...")
        elif version != STORE_VERSION:
            logger.info(f"Upgrading store from version {version} to {STORE_VERSION}...")
        else:
            logger.info(f"Store already at version {STORE_VERSION}")

        # load() migrates and writes back whenever the stored version is old or missing
        store = PoleVaultStore.load(SessionLocal)
        logger.info(f"Store holds {len(store.sessions)} sessions")

        logger.info("\n✅ Database setup complete!")
        logger.info("You can now start the application with: uvicorn pvtracker.main:app --reload")

    except Exception as e:
        logger.error(f"❌ Error setting up database: {str(e)}")
        sys.exit(1)

if __name__ == "__main__":
    main()
