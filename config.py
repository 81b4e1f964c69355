import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() not in ("0", "false", "no", "")


class Config:
    # --------------------------
    # Database
    # --------------------------
    DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./student_portal.db")

    # --------------------------
    # JWT (tokens are issued by the portal login service)
    # --------------------------
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me-in-production")
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    # --------------------------
    # Tuition policy
    # --------------------------
    REGULAR_UNIT_RATE = int(os.environ.get("REGULAR_UNIT_RATE", "800"))
    SCHOLAR_UNIT_RATE = int(os.environ.get("SCHOLAR_UNIT_RATE", "500"))
    # Slack used when matching a payment increment to an installment
    INSTALLMENT_TOLERANCE = float(os.environ.get("INSTALLMENT_TOLERANCE", "1.0"))

    # --------------------------
    # Outbound mail (billing statements)
    # --------------------------
    SMTP_HOST = os.environ.get("SMTP_HOST", "").strip()
    SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
    SMTP_USER = os.environ.get("SMTP_USER", "").strip()
    SMTP_PASS = os.environ.get("SMTP_PASS", "").strip()
    SMTP_USE_TLS = _flag("SMTP_USE_TLS", "1")
    MAIL_FROM = os.environ.get("MAIL_FROM", SMTP_USER)

    # --------------------------
    # HTTP
    # --------------------------
    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
