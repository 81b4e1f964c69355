"""
Tuition billing models - one assessment (payment ledger row) per student per
enrollment period, its itemized fees, and the prelim/midterm/finals installments
carved out of the balance left after the down-payment.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint, Enum
from sqlalchemy.orm import relationship
from database import Base
import datetime
import enum


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class InstallmentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class Term(str, enum.Enum):
    PRELIM = "prelim"
    MIDTERM = "midterm"
    FINALS = "finals"


# Canonical order: processing order for reconciliation, last one absorbs rounding
TERM_ORDER = (Term.PRELIM, Term.MIDTERM, Term.FINALS)


def _enum_column(enum_cls, **kwargs):
    # Stored as the lowercase value, checked by SQLAlchemy instead of a native DB enum
    return Column(
        Enum(enum_cls, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        **kwargs,
    )


# 1. STUDENT PAYMENT - the assessment / payment ledger (CORE TABLE)
class StudentPayment(Base):
    __tablename__ = "student_payments"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)

    # Enrollment period
    semester = Column(String(20))
    school_year = Column(String(20))

    # Amount details
    tuition = Column(Integer, default=0)
    total_amount = Column(Integer, default=0)         # tuition + other fees, fixed at assessment
    amount_paid = Column(Float, default=0.0)          # cumulative, includes a pending proposal
    downpayment_amount = Column(Float, nullable=True)  # excluded from installment matching

    payment_method = Column(String(50), nullable=True)
    status = _enum_column(PaymentStatus, default=PaymentStatus.UNPAID, nullable=False)

    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    student = relationship("Student", back_populates="payments")
    fees = relationship("PaymentFee", back_populates="payment", order_by="PaymentFee.id",
                        cascade="all, delete-orphan")
    installments = relationship("StudentInstallment", back_populates="payment",
                                cascade="all, delete-orphan")


# 2. PAYMENT FEES - additional line items of an assessment
class PaymentFee(Base):
    __tablename__ = "payment_fees"

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(Integer, ForeignKey("student_payments.id"), nullable=False, index=True)
    fee_name = Column(String(100), nullable=False)
    amount = Column(Integer, nullable=False)

    payment = relationship("StudentPayment", back_populates="fees")


# 3. STUDENT INSTALLMENTS - one row per term, created when a payment goes partial
class StudentInstallment(Base):
    __tablename__ = "student_installments"

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(Integer, ForeignKey("student_payments.id"), nullable=False, index=True)
    term = _enum_column(Term, nullable=False)
    amount = Column(Float, nullable=False)
    status = _enum_column(InstallmentStatus, default=InstallmentStatus.UNPAID, nullable=False)
    paid_at = Column(DateTime, nullable=True)

    # One installment per term per payment
    __table_args__ = (
        UniqueConstraint('payment_id', 'term', name='uq_installment_payment_term'),
    )

    payment = relationship("StudentPayment", back_populates="installments")
