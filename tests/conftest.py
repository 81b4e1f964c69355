import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.payments import StudentPayment, StudentInstallment, PaymentStatus
from models.students import Student, StudentAcademic
from utils.security import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_student(db):
    def _make(student_id="2025-0001", total_units=30, scholarship_status="", email="juan@example.com"):
        student = Student(
            student_id=student_id,
            first_name="Juan",
            last_name="Dela Cruz",
            email=email,
            status="pending",
        )
        db.add(student)
        db.flush()
        db.add(StudentAcademic(
            student_id=student.id,
            total_units=total_units,
            scholarship_status=scholarship_status,
        ))
        db.commit()
        return student

    return _make


@pytest.fixture
def student(make_student):
    return make_student()


@pytest.fixture
def make_payment(db):
    def _make(student, total_amount=24000, amount_paid=0, status=PaymentStatus.UNPAID,
              downpayment_amount=None, installments=None):
        payment = StudentPayment(
            student_id=student.id,
            semester="1st",
            school_year="2025-2026",
            tuition=total_amount,
            total_amount=total_amount,
            amount_paid=amount_paid,
            downpayment_amount=downpayment_amount,
            status=status,
        )
        db.add(payment)
        db.flush()
        for term, amount, inst_status in installments or []:
            db.add(StudentInstallment(payment_id=payment.id, term=term, amount=amount, status=inst_status))
        db.commit()
        return payment

    return _make


@pytest.fixture
def auth_header():
    def _header(role, subject):
        return {"Authorization": f"Bearer {create_access_token(subject, role)}"}

    return _header


@pytest.fixture
def registrar_headers(auth_header):
    return auth_header("registrar", "registrar1")


@pytest.fixture
def cashier_headers(auth_header):
    return auth_header("cashier", "cashier1")


@pytest.fixture
def student_headers(auth_header, student):
    return auth_header("student", student.student_id)
