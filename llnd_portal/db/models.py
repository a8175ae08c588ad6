from sqlalchemy import Column, String, DateTime, JSON
from llnd_portal.db.base import Base
import uuid
from datetime import datetime, timezone


def utcnow():
    """Function to return current UTC time with timezone info"""
    return datetime.now(timezone.utc)


def new_id():
    return str(uuid.uuid4())


class FlowDraft(Base):
    """An in-progress quiz attempt or enrollment wizard, stored between requests."""

    __tablename__ = "flow_drafts"
    # String ids keep the table portable between SQLite and PostgreSQL
    id = Column(String(36), primary_key=True, default=new_id)
    kind = Column(String(20), nullable=False, index=True)
    owner_id = Column(String(64), nullable=True, index=True)
    state = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="in_progress")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
