from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from approvex.database import Base


class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("requester_id", "leave_type", name="uq_leave_balance_requester_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    leave_type = Column(String, nullable=False)
    total_days = Column(Integer, nullable=False, default=0)
    used_days = Column(Integer, nullable=False, default=0)
    monthly_used_days = Column(Integer, nullable=False, default=0)
    yearly_used_days = Column(Integer, nullable=False, default=0)
    monthly_limit = Column(Integer, nullable=False, default=5)
    yearly_limit = Column(Integer, nullable=False, default=60)
    last_month_reset = Column(Date, nullable=False)
    last_year_reset = Column(Date, nullable=False)

    requester = relationship("User", back_populates="leave_balances")

    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days
