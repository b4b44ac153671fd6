from sqlalchemy import Column, Integer, String, Numeric, Boolean, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from approvex.database import Base
from approvex.models.common import RequestStatus, Urgency


class AssetRequest(Base):
    __tablename__ = "asset_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    asset_type = Column(String, nullable=False)
    category = Column(String, nullable=False)
    reason = Column(Text, nullable=True)
    estimated_cost = Column(Numeric(12, 2), nullable=True)
    urgency = Column(String, default=Urgency.NORMAL.value, nullable=False)
    status = Column(String, default=RequestStatus.PENDING.value, nullable=False, index=True)
    auto_approved = Column(Boolean, default=False, nullable=False)
    manager_comment = Column(Text, nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    requester = relationship("User", foreign_keys=[requester_id])
