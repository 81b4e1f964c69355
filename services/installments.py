"""
Installment planning and reconciliation.

Once a payment is approved as partial, whatever is still owed is split across
prelim / midterm / finals. Every later approved payment is matched against
those rows to decide which term it paid off.
"""
import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from config import Config
from models.payments import StudentPayment, StudentInstallment, InstallmentStatus, TERM_ORDER
from schemas.payments import FeeItem, InstallmentOut, InstallmentSummary
from services.ledger import remaining_balance

logger = logging.getLogger(__name__)


def _term_index(installment: StudentInstallment) -> int:
    return TERM_ORDER.index(installment.term)


def get_installments(db: Session, payment: StudentPayment) -> List[StudentInstallment]:
    """All installment rows of a payment in canonical term order."""
    rows = db.query(StudentInstallment).filter(StudentInstallment.payment_id == payment.id).all()
    return sorted(rows, key=_term_index)


def split_amounts(remaining: float, count: int) -> List[float]:
    """
    Split `remaining` into `count` cent-rounded parts that add up to it.
    Every part but the last is remaining / count; the last takes the remainder.
    """
    if count <= 0:
        return []
    remaining = round(remaining, 2)
    base = round(remaining / count, 2)
    amounts = [base] * (count - 1)
    amounts.append(round(remaining - sum(amounts), 2))
    return amounts


def plan_installments(db: Session, payment: StudentPayment, remaining: float) -> List[StudentInstallment]:
    """
    Create installment rows for the terms this payment does not have yet.
    Safe to call repeatedly: terms that already exist are never recreated.
    """
    existing_terms = {inst.term for inst in get_installments(db, payment)}
    missing_terms = [term for term in TERM_ORDER if term not in existing_terms]

    if not missing_terms:
        return []

    created = []
    for term, amount in zip(missing_terms, split_amounts(remaining, len(missing_terms))):
        installment = StudentInstallment(
            payment_id=payment.id,
            term=term,
            amount=amount,
            status=InstallmentStatus.UNPAID,
        )
        db.add(installment)
        created.append(installment)
    db.flush()

    logger.info("Payment %s: created installments %s for remaining %.2f",
                payment.id, ", ".join(t.value for t in missing_terms), remaining)
    return created


def _mark_paid(installment: StudentInstallment):
    installment.status = InstallmentStatus.PAID
    installment.paid_at = datetime.datetime.utcnow()


def reconcile_installments(
    db: Session,
    payment: StudentPayment,
    cumulative_amount_paid: float,
    tolerance: Optional[float] = None,
) -> Optional[StudentInstallment]:
    """
    Attribute the newest increment of amount_paid to one unpaid installment.

    increment = cumulative paid - down-payment - installments already paid.
    An installment within `tolerance` of the increment wins; otherwise the first
    unpaid installment the increment covers. At most one row is marked per call.
    Returns the installment marked paid, or None.
    """
    if tolerance is None:
        tolerance = Config.INSTALLMENT_TOLERANCE

    downpayment = payment.downpayment_amount
    if downpayment is None:
        logger.warning("Payment %s: downpayment_amount not recorded, treating as 0", payment.id)
        downpayment = 0.0

    installments = get_installments(db, payment)
    if not installments:
        return None

    already_paid_total = sum(inst.amount for inst in installments if inst.status == InstallmentStatus.PAID)
    increment = cumulative_amount_paid - downpayment - already_paid_total

    if increment <= 0:
        logger.info("Payment %s: no new increment to reconcile", payment.id)
        return None

    logger.info("Payment %s: amount_paid=%.2f, downpayment=%.2f, already_paid=%.2f, increment=%.2f",
                payment.id, cumulative_amount_paid, downpayment, already_paid_total, increment)

    unpaid = [inst for inst in installments if inst.status == InstallmentStatus.UNPAID]

    # Exact match first
    for inst in unpaid:
        if abs(increment - inst.amount) <= tolerance:
            _mark_paid(inst)
            db.flush()
            logger.info("Payment %s: marked %s (%.2f) as paid", payment.id, inst.term.value, inst.amount)
            return inst

    # Fallback: first term the increment covers
    for inst in unpaid:
        if increment >= inst.amount - tolerance:
            _mark_paid(inst)
            db.flush()
            logger.info("Payment %s: marked %s (%.2f) as paid via fallback", payment.id, inst.term.value, inst.amount)
            return inst

    logger.info("Payment %s: no installment matched increment %.2f", payment.id, increment)
    return None


def installment_summary(db: Session, payment: StudentPayment) -> InstallmentSummary:
    return InstallmentSummary(
        payment_id=payment.id,
        semester=payment.semester,
        school_year=payment.school_year,
        total_amount=payment.total_amount,
        amount_paid=payment.amount_paid or 0,
        downpayment_amount=payment.downpayment_amount,
        remaining=remaining_balance(payment),
        status=payment.status,
        other_fees=[FeeItem.model_validate(fee) for fee in payment.fees],
        installments=[InstallmentOut.model_validate(inst) for inst in get_installments(db, payment)],
    )
