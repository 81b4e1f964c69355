from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.payments import PaymentStatus
from schemas.payments import ApprovalResponse
from services.approval import approve_payment
from utils.security import CurrentUser, require_role

router = APIRouter(prefix="/api/v1/cashier", tags=["Cashier"])


@router.post("/payments/{payment_id}/approve", response_model=ApprovalResponse)
def cashier_approve_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role("cashier", "admin")),
):
    result = approve_payment(db, payment_id)

    if result.status == PaymentStatus.PAID:
        message = "payment fully approved"
    else:
        message = "payment approved & installments updated"

    return ApprovalResponse(
        message=message,
        payment_id=result.payment_id,
        status=result.status,
        installments_created=result.installments_created,
        installment_paid=result.installment_paid,
    )
