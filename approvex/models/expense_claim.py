import enum
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from approvex.database import Base
from approvex.models.common import RequestStatus, Urgency


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class ExpenseClaim(Base):
    __tablename__ = "expense_claims"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False)
    status = Column(String, default=RequestStatus.PENDING.value, nullable=False, index=True)
    payment_status = Column(String, default=PaymentStatus.UNPAID.value, nullable=False)
    payment_reference = Column(String, nullable=True)
    policy_warning = Column(String, nullable=True)  # advisory only, never blocks
    urgency = Column(String, default=Urgency.NORMAL.value, nullable=False)
    manager_comment = Column(Text, nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    requester = relationship("User", foreign_keys=[requester_id])
