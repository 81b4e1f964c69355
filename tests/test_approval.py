from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from models.payments import StudentPayment, PaymentFee, StudentInstallment, PaymentStatus, InstallmentStatus, Term
from models.students import Student
from schemas.payments import FeeItem
from services.approval import approve_payment, create_assessment
from services.errors import NotFoundError, InvalidStateError
from services.ledger import submit_downpayment, submit_payment


def _refresh(db, obj):
    db.expire_all()
    return db.get(type(obj), obj.id)


# --- registrar assessment ---

def test_assessment_for_30_unit_non_scholar(db, student):
    result = create_assessment(db, "2025-0001", "1st", "2025-2026", [])

    assert result.tuition == 24000
    assert result.total_amount == 24000
    assert result.status == PaymentStatus.UNPAID

    payment = db.get(StudentPayment, result.payment_id)
    assert payment.amount_paid == 0
    assert payment.status == PaymentStatus.UNPAID
    assert _refresh(db, student).status == "approved"


def test_assessment_adds_positive_fees_only(db, make_student):
    make_student(student_id="2025-0002", total_units=20, scholarship_status="Scholar")
    fees = [
        FeeItem(fee_name="Library", amount=500),
        FeeItem(fee_name="Empty", amount=0),
        FeeItem(fee_name="Lab", amount=1200),
    ]

    result = create_assessment(db, "2025-0002", "2nd", "2025-2026", fees)

    assert result.tuition == 10000
    assert result.other_fees_total == 1700
    assert result.total_amount == 11700
    stored = db.query(PaymentFee).filter_by(payment_id=result.payment_id).order_by(PaymentFee.id).all()
    assert [(f.fee_name, f.amount) for f in stored] == [("Library", 500), ("Lab", 1200)]


def test_assessment_without_academic_record_bills_zero_units(db):
    db.add(Student(student_id="2025-0009", first_name="No", last_name="Units"))
    db.commit()

    result = create_assessment(db, "2025-0009", "1st", "2025-2026", [FeeItem(fee_name="ID", amount=150)])

    assert result.total_units == 0
    assert result.total_amount == 150


def test_assessment_unknown_student(db):
    with pytest.raises(NotFoundError):
        create_assessment(db, "nope", "1st", "2025-2026", [])
    assert db.query(StudentPayment).count() == 0


def test_assessment_failure_rolls_back_everything(db, student):
    # A fee row that violates NOT NULL fails after the payment row was flushed
    fees = [SimpleNamespace(fee_name=None, amount=100)]

    with pytest.raises(IntegrityError):
        create_assessment(db, "2025-0001", "1st", "2025-2026", fees)

    assert db.query(StudentPayment).count() == 0
    assert db.query(PaymentFee).count() == 0
    assert db.get(Student, student.id).status == "pending"


# --- cashier approval ---

def test_full_payment_is_marked_paid(db, student, make_payment):
    payment = make_payment(student, total_amount=24000, amount_paid=24000, status=PaymentStatus.PENDING)

    result = approve_payment(db, payment.id)

    assert result.status == PaymentStatus.PAID
    assert _refresh(db, payment).status == PaymentStatus.PAID
    assert db.query(StudentInstallment).count() == 0


def test_downpayment_approval_creates_installments_without_marking(db, student, make_payment):
    payment = make_payment(student)
    submit_downpayment(db, student, payment.id, 8000, "gcash")

    result = approve_payment(db, payment.id)

    assert result.status == PaymentStatus.PARTIAL
    assert result.installments_created == [Term.PRELIM, Term.MIDTERM, Term.FINALS]
    assert result.installment_paid is None
    rows = db.query(StudentInstallment).filter_by(payment_id=payment.id).order_by(StudentInstallment.id).all()
    assert [r.amount for r in rows] == [5333.33, 5333.33, 5333.34]
    assert all(r.status == InstallmentStatus.UNPAID for r in rows)


def test_large_downpayment_does_not_pay_a_term(db, student, make_payment):
    payment = make_payment(student)
    submit_downpayment(db, student, payment.id, 20000, "cash")

    result = approve_payment(db, payment.id)

    assert result.installment_paid is None
    assert db.query(StudentInstallment).filter_by(status=InstallmentStatus.PAID).count() == 0


def test_first_partial_via_regular_payment_records_downpayment(db, student, make_payment):
    payment = make_payment(student)
    submit_payment(db, student, payment.id, 8000, "cash")
    approve_payment(db, payment.id)

    assert _refresh(db, payment).downpayment_amount == 8000

    submit_payment(db, student, payment.id, 5333, "cash")
    result = approve_payment(db, payment.id)

    assert result.installment_paid == Term.PRELIM


def test_approving_non_pending_payment_is_rejected(db, student, make_payment):
    payment = make_payment(student, amount_paid=24000, status=PaymentStatus.PAID)

    with pytest.raises(NotFoundError):
        approve_payment(db, payment.id)

    assert _refresh(db, payment).status == PaymentStatus.PAID


def test_approving_twice_is_rejected(db, student, make_payment):
    payment = make_payment(student)
    submit_downpayment(db, student, payment.id, 8000, "cash")
    approve_payment(db, payment.id)

    with pytest.raises(NotFoundError):
        approve_payment(db, payment.id)
    assert db.query(StudentInstallment).count() == 3


# --- student submissions ---

def test_submission_exceeding_balance_writes_nothing(db, student, make_payment):
    payment = make_payment(student, total_amount=24000, amount_paid=20000, status=PaymentStatus.PARTIAL)

    with pytest.raises(InvalidStateError):
        submit_payment(db, student, payment.id, 4001, "cash")

    payment = _refresh(db, payment)
    assert payment.amount_paid == 20000
    assert payment.status == PaymentStatus.PARTIAL


@pytest.mark.parametrize("amount, method", [(0, "cash"), (-5, "cash"), (100.005, "cash"), (999.999, "cash"), (100, ""), (100, "   ")])
def test_invalid_submission(db, student, make_payment, amount, method):
    payment = make_payment(student)

    with pytest.raises(InvalidStateError):
        submit_payment(db, student, payment.id, amount, method)


def test_second_downpayment_rejected(db, student, make_payment):
    payment = make_payment(student)
    submit_downpayment(db, student, payment.id, 5000, "cash")

    with pytest.raises(InvalidStateError, match="already made"):
        submit_downpayment(db, student, payment.id, 1000, "cash")


def test_downpayment_must_be_less_than_total(db, student, make_payment):
    payment = make_payment(student, total_amount=24000)

    with pytest.raises(InvalidStateError):
        submit_downpayment(db, student, payment.id, 24000, "cash")


def test_cannot_pay_someone_elses_bill(db, student, make_student, make_payment):
    other = make_student(student_id="2025-0002", email="maria@example.com")
    payment = make_payment(other)

    with pytest.raises(NotFoundError):
        submit_payment(db, student, payment.id, 1000, "cash")


def test_payment_added_before_first_approval_counts_as_downpayment(db, student, make_payment):
    payment = make_payment(student)
    submit_downpayment(db, student, payment.id, 8000, "cash")
    submit_payment(db, student, payment.id, 2000, "cash")

    approve_payment(db, payment.id)

    payment = _refresh(db, payment)
    assert payment.downpayment_amount == 10000
    rows = db.query(StudentInstallment).filter_by(payment_id=payment.id).order_by(StudentInstallment.id).all()
    assert [r.amount for r in rows] == [4666.67, 4666.67, 4666.66]

    submit_payment(db, student, payment.id, 4666.67, "cash")
    assert approve_payment(db, payment.id).installment_paid == Term.PRELIM

    # Well short of midterm: nothing may be marked
    submit_payment(db, student, payment.id, 2700, "cash")
    assert approve_payment(db, payment.id).installment_paid is None
    assert db.query(StudentInstallment).filter_by(status=InstallmentStatus.PAID).count() == 1
