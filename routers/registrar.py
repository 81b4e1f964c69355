"""
Registrar Router - enrollment approval with tuition assessment
"""
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.payments import AssessmentCreate, AssessmentResponse
from services.approval import create_assessment
from utils.mailer import send_billing_statement
from utils.security import CurrentUser, require_role

router = APIRouter(prefix="/api/v1/registrar", tags=["Registrar"])


@router.post("/assessments", response_model=AssessmentResponse)
def approve_with_assessment(
    data: AssessmentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role("registrar", "admin")),
):
    """
    Approve a student's enrollment and create the billing record:
    tuition from units and scholarship status, plus any additional fees.
    """
    result = create_assessment(
        db,
        student_number=data.student_id.strip(),
        semester=data.semester,
        school_year=data.school_year,
        other_fees=data.other_fees,
    )

    # Sent only after the assessment is committed
    background_tasks.add_task(send_billing_statement, result)

    return AssessmentResponse(
        payment_id=result.payment_id,
        student_id=result.student_id,
        semester=result.semester,
        school_year=result.school_year,
        total_units=result.total_units,
        tuition=result.tuition,
        other_fees=result.other_fees,
        other_fees_total=result.other_fees_total,
        total_amount=result.total_amount,
        amount_paid=result.amount_paid,
        status=result.status,
    )
