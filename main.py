import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import Config
from database import engine, Base, SessionLocal

# --- IMPORT ROUTERS (APIs) ---
from routers import registrar, student_payments, cashier

# --- IMPORT MODELS (registers the tables on Base) ---
from models.students import Student, StudentAcademic
from models.payments import StudentPayment, PaymentFee, StudentInstallment
from services.errors import BillingError

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# --- AUTO MIGRATION: Add late columns to existing tables ---
def run_migrations():
    """
    Create missing tables, then add columns that older deployments lack.
    Runs on every start; each statement is safe to repeat.
    """
    Base.metadata.create_all(bind=engine)

    if engine.dialect.name != "postgresql":
        logger.info("%s detected - skipping column migrations", engine.dialect.name)
        return

    migrations = [
        # student_payments: down-payment is excluded from installment matching
        "ALTER TABLE student_payments ADD COLUMN IF NOT EXISTS downpayment_amount DOUBLE PRECISION",
        "ALTER TABLE student_payments ADD COLUMN IF NOT EXISTS tuition INTEGER DEFAULT 0",
        "ALTER TABLE student_payments ADD COLUMN IF NOT EXISTS updated_at TIMESTAMP",
        # student_installments
        "ALTER TABLE student_installments ADD COLUMN IF NOT EXISTS paid_at TIMESTAMP",
    ]

    db = SessionLocal()
    try:
        for sql in migrations:
            db.execute(text(sql))
        db.commit()
        logger.info("Database migrations completed")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database migration failed")
        raise
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    run_migrations()
    yield


app = FastAPI(title="Student Portal Billing", lifespan=lifespan)


# ==========================================
# ERROR HANDLERS
# ==========================================
@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # The transaction was already rolled back by the service
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "internal error"})


# ==========================================
# CORS MIDDLEWARE
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- REGISTER ROUTERS ---
app.include_router(registrar.router)
app.include_router(student_payments.router)
app.include_router(cashier.router)


@app.get("/health")
def health():
    return {"status": "ok"}
