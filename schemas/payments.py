from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import List, Optional

from models.payments import PaymentStatus, InstallmentStatus, Term


# 1. Registrar se assessment banane ke liye
class FeeItem(BaseModel):
    fee_name: str
    amount: int

    class Config:
        from_attributes = True


class AssessmentCreate(BaseModel):
    student_id: str  # public student number
    semester: str
    school_year: str
    other_fees: List[FeeItem] = []


class AssessmentResponse(BaseModel):
    message: str = "Student approved with assessment"
    payment_id: int
    student_id: str
    semester: str
    school_year: str
    total_units: int
    tuition: int
    other_fees: List[FeeItem]
    other_fees_total: int
    total_amount: int
    amount_paid: float
    status: PaymentStatus


# 2. Student payment submission (full payment ya down-payment)
class PaymentSubmit(BaseModel):
    amount: float
    payment_method: str

    @field_validator("amount")
    @classmethod
    def whole_cents(cls, v):
        if round(v, 2) != v:
            raise ValueError("amount must not have more than 2 decimal places")
        return v


class PaymentSubmitResponse(BaseModel):
    message: str
    payment_id: int
    total_amount: int
    amount_paid: float
    remaining: float
    status: PaymentStatus


# 3. Cashier approval
class ApprovalResponse(BaseModel):
    message: str
    payment_id: int
    status: PaymentStatus
    installments_created: List[Term] = []
    installment_paid: Optional[Term] = None


# 4. Installment schedule
class InstallmentOut(BaseModel):
    term: Term
    amount: float
    status: InstallmentStatus
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InstallmentSummary(BaseModel):
    payment_id: int
    semester: Optional[str] = None
    school_year: Optional[str] = None
    total_amount: int
    amount_paid: float
    downpayment_amount: Optional[float] = None
    remaining: float
    status: PaymentStatus
    other_fees: List[FeeItem] = []
    installments: List[InstallmentOut] = []
