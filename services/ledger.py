"""
Payment ledger - owns total_amount / amount_paid / status of one assessment.

State machine: unpaid -> pending -> {paid, partial}; a partial ledger goes back
to pending on every new submission and is settled again by the cashier.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from database import transaction
from models.payments import StudentPayment, PaymentStatus
from models.students import Student
from services.errors import NotFoundError, InvalidStateError

logger = logging.getLogger(__name__)


def get_payment(
    db: Session,
    payment_id: int,
    student: Optional[Student] = None,
    status: Optional[PaymentStatus] = None,
    lock: bool = False,
) -> StudentPayment:
    """
    Load one ledger row.
    - student: restrict to payments owned by this student
    - status: restrict to payments currently in this status
    - lock: SELECT ... FOR UPDATE for the rest of the transaction
    """
    query = db.query(StudentPayment).filter(StudentPayment.id == payment_id)
    if student is not None:
        query = query.filter(StudentPayment.student_id == student.id)
    if status is not None:
        query = query.filter(StudentPayment.status == status)
    if lock:
        query = query.with_for_update()

    payment = query.first()
    if payment is None:
        if status is not None:
            raise NotFoundError(f"{status.value} payment not found")
        raise NotFoundError("payment not found")
    return payment


def get_student(db: Session, student_number: str) -> Student:
    student = db.query(Student).filter(Student.student_id == student_number).first()
    if student is None:
        raise NotFoundError("student not found")
    return student


def remaining_balance(payment: StudentPayment) -> float:
    return (payment.total_amount or 0) - (payment.amount_paid or 0)


def settle(payment: StudentPayment) -> PaymentStatus:
    """Full/partial rule applied on every cashier approval."""
    if (payment.amount_paid or 0) >= (payment.total_amount or 0):
        payment.status = PaymentStatus.PAID
    else:
        payment.status = PaymentStatus.PARTIAL
    return payment.status


def _validate_submission(amount: float, payment_method: str):
    if amount is None or amount <= 0:
        raise InvalidStateError("invalid amount")
    if round(amount, 2) != amount:
        raise InvalidStateError("amount must not have more than 2 decimal places")
    if not (payment_method or "").strip():
        raise InvalidStateError("payment_method required")


def _propose(payment: StudentPayment, amount: float, payment_method: str):
    payment.amount_paid = round((payment.amount_paid or 0) + amount, 2)
    payment.payment_method = payment_method.strip()
    payment.status = PaymentStatus.PENDING


def submit_payment(db: Session, student: Student, payment_id: int, amount: float, payment_method: str) -> StudentPayment:
    """Student pays (part of) the bill; the amount waits for cashier approval."""
    _validate_submission(amount, payment_method)

    with transaction(db):
        payment = get_payment(db, payment_id, student=student, lock=True)

        if payment.status == PaymentStatus.PAID:
            raise InvalidStateError("payment already settled")
        if (payment.amount_paid or 0) + amount > (payment.total_amount or 0):
            raise InvalidStateError("payment exceeds remaining balance")

        _propose(payment, amount, payment_method)

    logger.info("Payment %s: %.2f submitted by %s, amount_paid=%.2f (pending)",
                payment.id, amount, student.student_id, payment.amount_paid)
    return payment


def submit_downpayment(db: Session, student: Student, payment_id: int, amount: float, payment_method: str) -> StudentPayment:
    """First payment on an assessment; recorded so installments never count it."""
    _validate_submission(amount, payment_method)

    with transaction(db):
        payment = get_payment(db, payment_id, student=student, lock=True)

        if (payment.amount_paid or 0) > 0:
            raise InvalidStateError("payment already made")
        if amount >= (payment.total_amount or 0):
            raise InvalidStateError("downpayment must be less than total amount")

        _propose(payment, amount, payment_method)
        payment.downpayment_amount = amount

    logger.info("Payment %s: downpayment %.2f submitted by %s (pending)",
                payment.id, amount, student.student_id)
    return payment
