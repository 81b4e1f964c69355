"""
Registrar and cashier approval workflows.

Each workflow is one transaction: either every write lands or none does.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from database import transaction
from models.payments import StudentPayment, PaymentFee, PaymentStatus, Term
from models.students import Student
from schemas.payments import FeeItem
from services import installments as planner
from services.ledger import get_payment, get_student, remaining_balance, settle
from services.tuition import assessment_total, compute_tuition, other_fees_total, valid_fees

logger = logging.getLogger(__name__)


@dataclass
class AssessmentResult:
    payment_id: int
    student_id: str
    student_name: str
    student_email: Optional[str]
    semester: str
    school_year: str
    total_units: int
    tuition: int
    other_fees: List[FeeItem]
    other_fees_total: int
    total_amount: int
    amount_paid: float = 0
    status: PaymentStatus = PaymentStatus.UNPAID


@dataclass
class ApprovalResult:
    payment_id: int
    status: PaymentStatus
    installments_created: List[Term] = field(default_factory=list)
    installment_paid: Optional[Term] = None


def create_assessment(
    db: Session,
    student_number: str,
    semester: str,
    school_year: str,
    other_fees: List[FeeItem],
) -> AssessmentResult:
    """Registrar approves an enrollment and bills the student for the period."""
    with transaction(db):
        student = get_student(db, student_number)

        academic = student.academic
        total_units = (academic.total_units or 0) if academic else 0
        scholarship_status = academic.scholarship_status if academic else None

        tuition = compute_tuition(total_units, scholarship_status)

        payment = StudentPayment(
            student_id=student.id,
            semester=semester,
            school_year=school_year,
            tuition=tuition,
            total_amount=0,
            amount_paid=0,
            status=PaymentStatus.UNPAID,
        )
        db.add(payment)
        db.flush()

        fees = list(valid_fees(other_fees))
        for fee in fees:
            db.add(PaymentFee(payment_id=payment.id, fee_name=fee.fee_name, amount=fee.amount))
        other_total = other_fees_total(fees)

        payment.total_amount = assessment_total(tuition, fees)
        student.status = "approved"
        db.flush()

        result = AssessmentResult(
            payment_id=payment.id,
            student_id=student.student_id,
            student_name=student.full_name,
            student_email=student.email,
            semester=semester,
            school_year=school_year,
            total_units=total_units,
            tuition=tuition,
            other_fees=fees,
            other_fees_total=other_total,
            total_amount=payment.total_amount,
        )

    logger.info("Assessment %s created for %s: tuition=%d, other_fees=%d, total=%d",
                result.payment_id, result.student_id, result.tuition,
                result.other_fees_total, result.total_amount)
    return result


def _record_downpayment(payment: StudentPayment):
    # Everything credited before the first split is the down-payment, whatever route it came in by
    payment.downpayment_amount = payment.amount_paid or 0


def approve_payment(db: Session, payment_id: int) -> ApprovalResult:
    """
    Cashier approves a pending payment.

    Full:    status -> paid.
    Partial: status -> partial, missing installments are created from the
             remaining balance, and when installments already existed the new
             increment is matched to one of them.
    """
    with transaction(db):
        payment = get_payment(db, payment_id, status=PaymentStatus.PENDING, lock=True)

        if settle(payment) == PaymentStatus.PAID:
            result = ApprovalResult(payment_id=payment.id, status=PaymentStatus.PAID)
        else:
            had_installments = len(planner.get_installments(db, payment)) > 0
            if not had_installments:
                _record_downpayment(payment)

            created = planner.plan_installments(db, payment, remaining_balance(payment))

            matched = None
            if had_installments:
                matched = planner.reconcile_installments(db, payment, payment.amount_paid or 0)

            result = ApprovalResult(
                payment_id=payment.id,
                status=PaymentStatus.PARTIAL,
                installments_created=[inst.term for inst in created],
                installment_paid=matched.term if matched else None,
            )

    logger.info("Payment %s approved as %s", result.payment_id, result.status.value)
    return result
