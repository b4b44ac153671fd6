from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from approvex.database import get_db
from approvex.models.common import RequestStatus
from approvex.models.user import User
from approvex.routers.auth_deps import get_authorization, get_current_user
from approvex.schemas.expense import ExpenseClaimCreate, ExpenseClaimResponse, ExpensePaymentRequest
from approvex.services.authorization import AuthorizationContext
from approvex.services.request_service import ExpenseClaimService

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("/", response_model=ExpenseClaimResponse, status_code=status.HTTP_201_CREATED)
def submit_expense_claim(
    claim: ExpenseClaimCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ExpenseClaimService(db).submit(
        current_user,
        title=claim.title,
        amount=claim.amount,
        category=claim.category,
        description=claim.description,
        urgency=claim.urgency.value,
    )


@router.get("/", response_model=List[ExpenseClaimResponse])
def list_expense_claims(
    status: Optional[RequestStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    authz: AuthorizationContext = Depends(get_authorization),
):
    return ExpenseClaimService(db).list(current_user, authz, status.value if status else None)


@router.post("/{claim_id}/pay", response_model=ExpenseClaimResponse)
def mark_expense_paid(
    claim_id: int,
    payment: ExpensePaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    authz: AuthorizationContext = Depends(get_authorization),
):
    return ExpenseClaimService(db).mark_paid(claim_id, current_user, authz, payment.payment_reference)
