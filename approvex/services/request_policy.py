"""Expense limit and asset auto-approval rules."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from approvex.core.config import settings
from approvex.models.common import RequestStatus


@dataclass(frozen=True)
class ExpenseEvaluation:
    limit: Decimal
    policy_warning: Optional[str] = None


@dataclass(frozen=True)
class AssetEvaluation:
    status: RequestStatus
    action: str

    @property
    def auto_approved(self) -> bool:
        return self.status == RequestStatus.APPROVED


def expense_limit_for(category: str, limits: Optional[Dict[str, Decimal]] = None) -> Decimal:
    limits = settings.policy.expense_limits if limits is None else limits
    return limits.get(category, settings.policy.default_expense_limit)


def _format_money(value: Decimal) -> str:
    # "$500" for whole amounts, "$99.50" otherwise
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return f"{value:.2f}"


def evaluate_expense(category: str, amount: Decimal, limits: Optional[Dict[str, Decimal]] = None) -> ExpenseEvaluation:
    """Flag, never block, a claim above its category limit."""
    limit = expense_limit_for(category, limits)
    warning = None
    if Decimal(amount) > limit:
        warning = f"Amount exceeds {category} limit of ${_format_money(limit)}"
    return ExpenseEvaluation(limit=limit, policy_warning=warning)


def evaluate_asset(estimated_cost: Optional[Decimal], threshold: Optional[Decimal] = None) -> AssetEvaluation:
    threshold = settings.policy.asset_auto_approve_limit if threshold is None else threshold
    if estimated_cost is not None and Decimal(estimated_cost) <= threshold:
        return AssetEvaluation(status=RequestStatus.APPROVED, action="auto-approved")
    return AssetEvaluation(status=RequestStatus.PENDING, action="submitted")
