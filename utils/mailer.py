import logging
import os
import smtplib
from email.message import EmailMessage

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import Config

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")

templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def render_billing_statement(**context) -> str:
    return templates.get_template("billing_statement.html").render(**context)


def send_email(to: str, subject: str, html_body: str) -> bool:
    """Send one HTML mail. Returns False when mail is disabled or delivery failed."""
    if not to:
        logger.info("Mail skipped (%s): recipient has no e-mail address", subject)
        return False
    if not Config.SMTP_HOST:
        logger.info("Mail disabled, would send '%s' to %s", subject, to)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = Config.MAIL_FROM or Config.SMTP_USER
    msg["To"] = to
    msg.set_content("This message requires an HTML-capable mail client.")
    msg.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(Config.SMTP_HOST, Config.SMTP_PORT, timeout=20) as smtp:
            if Config.SMTP_USE_TLS:
                smtp.starttls()
            if Config.SMTP_USER:
                smtp.login(Config.SMTP_USER, Config.SMTP_PASS)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError):
        # Fire-and-forget: the assessment is already committed
        logger.exception("Failed to send '%s' to %s", subject, to)
        return False

    logger.info("Sent '%s' to %s", subject, to)
    return True


def send_billing_statement(result) -> bool:
    """Mail the tuition breakdown of a freshly created assessment (AssessmentResult)."""
    body = render_billing_statement(
        student_name=result.student_name,
        semester=result.semester,
        school_year=result.school_year,
        total_units=result.total_units,
        tuition=result.tuition,
        other_fees=result.other_fees,
        other_fees_total=result.other_fees_total,
        total_amount=result.total_amount,
        status=result.status.value.upper(),
    )
    return send_email(result.student_email, "Student Billing Statement", body)
