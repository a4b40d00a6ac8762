# db/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.sql import func
from pvtracker.core.database import Base


# Persisted store: one row per top-level key of the state blob
class StoreEntry(Base):
    __tablename__ = 'store_entries'

    key        = Column(String(64), primary_key=True)   # 'settings', 'sessions', 'weeklyPlan', 'attemptVideos'
    value      = Column(Text, nullable=False)           # JSON document
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Database version tracking
class DBVersion(Base):
    __tablename__ = 'db_version'

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint('id = 1', name='single_row_constraint'),
    )
