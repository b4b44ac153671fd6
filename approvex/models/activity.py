from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from approvex.database import Base


class ActivityLog(Base):
    """Append-only record of request lifecycle events."""
    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String, nullable=False)  # submitted, auto-approved, approved, rejected, paid
    request_type = Column(String, nullable=False, index=True)
    request_id = Column(Integer, nullable=False)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    decision_summary = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
