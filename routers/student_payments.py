"""
Student Payment Router - bill payment, down-payment and installment schedule.
Every endpoint is scoped to the authenticated student's own payments.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.students import Student
from schemas.payments import PaymentSubmit, PaymentSubmitResponse, InstallmentSummary
from services import ledger
from services.installments import installment_summary
from utils.security import CurrentUser, require_role

router = APIRouter(prefix="/api/v1/student/payments", tags=["Student Payments"])


def get_current_student(
    user: CurrentUser = Depends(require_role("student")),
    db: Session = Depends(get_db),
) -> Student:
    return ledger.get_student(db, user.subject)


def _submitted(payment, message: str) -> PaymentSubmitResponse:
    return PaymentSubmitResponse(
        message=message,
        payment_id=payment.id,
        total_amount=payment.total_amount,
        amount_paid=payment.amount_paid,
        remaining=ledger.remaining_balance(payment),
        status=payment.status,
    )


# 1. PAY BILL (pending cashier approval)
@router.post("/{payment_id}/pay", response_model=PaymentSubmitResponse)
def pay_bill(
    payment_id: int,
    data: PaymentSubmit,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    payment = ledger.submit_payment(db, student, payment_id, data.amount, data.payment_method)
    return _submitted(payment, "payment submitted, waiting for cashier approval")


# 2. DOWN-PAYMENT (pending cashier approval)
@router.post("/{payment_id}/downpayment", response_model=PaymentSubmitResponse)
def pay_downpayment(
    payment_id: int,
    data: PaymentSubmit,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    payment = ledger.submit_downpayment(db, student, payment_id, data.amount, data.payment_method)
    return _submitted(payment, "downpayment submitted, waiting for cashier approval")


# 3. INSTALLMENT SCHEDULE
@router.get("/{payment_id}/installments", response_model=InstallmentSummary)
def get_installments(
    payment_id: int,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    payment = ledger.get_payment(db, payment_id, student=student)
    return installment_summary(db, payment)
