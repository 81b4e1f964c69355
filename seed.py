from database import SessionLocal, engine, Base
from models.students import Student, StudentAcademic
from models.payments import StudentPayment, PaymentFee, StudentInstallment  # noqa: F401 - registers tables
from utils.security import create_access_token

# --- MAGICAL LINE (Ye Tables bana degi agar missing hain) ---
Base.metadata.create_all(bind=engine)

DEMO_STUDENTS = [
    {"student_id": "2025-0001", "first_name": "Juan", "last_name": "Dela Cruz", "email": "juan@example.com",
     "course": "BSIT", "year_level": "1", "semester": "1st", "total_units": 30, "scholarship_status": ""},
    {"student_id": "2025-0002", "first_name": "Maria", "last_name": "Santos", "email": "maria@example.com",
     "course": "BSED", "year_level": "2", "semester": "1st", "total_units": 24, "scholarship_status": "scholar"},
]


def seed_data():
    db = SessionLocal()
    print("🌱 Seeding demo students...")
    try:
        for s in DEMO_STUDENTS:
            exists = db.query(Student).filter_by(student_id=s["student_id"]).first()
            if exists:
                print(f"ℹ️  Exists: {s['student_id']}")
                continue

            student = Student(
                student_id=s["student_id"],
                first_name=s["first_name"],
                last_name=s["last_name"],
                email=s["email"],
                status="pending",
            )
            db.add(student)
            db.flush()
            db.add(StudentAcademic(
                student_id=student.id,
                course=s["course"],
                year_level=s["year_level"],
                semester=s["semester"],
                total_units=s["total_units"],
                scholarship_status=s["scholarship_status"],
            ))
            print(f"✅ Added: {s['student_id']} ({s['total_units']} units)")
        db.commit()
    finally:
        db.close()

    # Handy tokens for trying the API locally
    print("\n🔑 Demo tokens:")
    print("registrar:", create_access_token("registrar1", "registrar"))
    print("cashier:  ", create_access_token("cashier1", "cashier"))
    for s in DEMO_STUDENTS:
        print(f"{s['student_id']}:", create_access_token(s["student_id"], "student"))


if __name__ == "__main__":
    seed_data()
