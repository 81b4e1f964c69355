from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
import datetime


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    # Public student number (e.g. "2024-00123"), also the JWT subject
    student_id = Column(String(50), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)

    # --- ENROLLMENT ---
    status = Column(String(20), default="pending")  # pending, approved, rejected
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    academic = relationship("StudentAcademic", back_populates="student", uselist=False)
    payments = relationship("StudentPayment", back_populates="student")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class StudentAcademic(Base):
    __tablename__ = "student_academic"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, unique=True)

    course = Column(String(100), nullable=True)
    year_level = Column(String(20), nullable=True)
    semester = Column(String(20), nullable=True)
    total_units = Column(Integer, default=0)
    scholarship_status = Column(String(50), nullable=True)  # "scholar" gets the reduced unit rate

    student = relationship("Student", back_populates="academic")
