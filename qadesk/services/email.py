import enum
import html
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from qadesk.core.config import settings

logger = logging.getLogger(__name__)

APP_NAME = "QA Desk"


class EmailType(str, enum.Enum):
    QUESTION_POSTED = "QUESTION_POSTED"
    ANSWER_POSTED = "ANSWER_POSTED"
    COMMENT_POSTED = "COMMENT_POSTED"
    QUESTION_RESOLVED = "QUESTION_RESOLVED"
    QUESTION_REJECTED = "QUESTION_REJECTED"


def _frontend_base() -> str:
    return (settings.frontend_url or "http://localhost:3000").rstrip("/")


async def send_email(to: str, subject: str, html: str, text: str) -> None:
    """
    Send a multipart (plain text + html) email.

    Raises:
        ValueError: If SMTP is not configured.
        aiosmtplib.SMTPException: If the SMTP server rejects the message.
    """
    if not all([
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_user,
        settings.smtp_password,
        settings.smtp_from_email,
    ]):
        logger.warning("SMTP not configured - cannot send '%s' to %s", subject, to)
        raise ValueError("SMTP is not configured. Please configure SMTP settings in .env file.")

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = settings.smtp_from_email
    message["To"] = to
    message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))

    send_kwargs = {
        "hostname": settings.smtp_host,
        "port": settings.smtp_port,
        "username": settings.smtp_user,
        "password": settings.smtp_password,
    }

    # Port 587 uses STARTTLS, port 465 uses direct TLS
    if settings.smtp_use_tls:
        if settings.smtp_port == 465:
            send_kwargs["use_tls"] = True
        else:
            send_kwargs["start_tls"] = True

    await aiosmtplib.send(message, **send_kwargs)
    logger.info("Sent email '%s' to %s", subject, to)


async def send_password_reset_email(email: str, reset_token: str) -> None:
    """
    Send password reset email to user.

    Args:
        email: User's email address
        reset_token: 32-character reset token
    """
    hours = settings.password_reset_token_expire_hours
    reset_link = f"{_frontend_base()}/reset-password?token={reset_token}"
    subject = f"[{APP_NAME}] Password reset instructions"
    text = f"""
A password reset was requested for your {APP_NAME} account.

Please open the following link to choose a new password:
{reset_link}

This link will expire in {hours} hours.

If you did not request this, please ignore this email.
    """
    html_body = f"""
<html>
  <body>
    <h2>Password reset instructions</h2>
    <p>A password reset was requested for your {APP_NAME} account.</p>
    <p>Please open the following link to choose a new password:</p>
    <p><a href="{reset_link}">{reset_link}</a></p>
    <p>This link will expire in {hours} hours.</p>
    <p>If you did not request this, please ignore this email.</p>
  </body>
</html>
    """
    await send_email(email, subject, html_body, text)


_NOTIFICATION_SUBJECTS = {
    EmailType.QUESTION_POSTED: "New question posted",
    EmailType.ANSWER_POSTED: "Your question has a new answer",
    EmailType.COMMENT_POSTED: "New comment on your question",
    EmailType.QUESTION_RESOLVED: "Your question was resolved",
    EmailType.QUESTION_REJECTED: "Your question was rejected",
}

_NOTIFICATION_LINES = {
    EmailType.QUESTION_POSTED: "{actor} posted a new question.",
    EmailType.ANSWER_POSTED: "{actor} answered your question.",
    EmailType.COMMENT_POSTED: "{actor} commented on your question.",
    EmailType.QUESTION_RESOLVED: "{actor} marked your question as resolved.",
    EmailType.QUESTION_REJECTED: (
        "{actor} rejected your question. Please review its content and post a new "
        "question if needed."
    ),
}


def build_notification(
    email_type: EmailType, question_id: int, question_title: str, actor: str
) -> tuple[str, str, str]:
    """Return (subject, html, text) for a question notification."""
    question_url = f"{_frontend_base()}/questions/{question_id}"
    subject = f"[{APP_NAME}] {_NOTIFICATION_SUBJECTS[email_type]}: {question_title}"
    line = _NOTIFICATION_LINES[email_type].format(actor=actor)
    text = f"""
{line}

Question: {question_title}

Open the question:
{question_url}

---
This email was sent automatically by {APP_NAME}. Please do not reply.
    """
    html_body = f"""
<html>
  <body>
    <p>{html.escape(line)}</p>
    <p><strong>Question:</strong> {html.escape(question_title)}</p>
    <p><a href="{question_url}">Open the question</a></p>
    <hr/>
    <p>This email was sent automatically by {APP_NAME}. Please do not reply.</p>
  </body>
</html>
    """
    return subject, html_body, text


async def send_notification_email(
    email_type: EmailType,
    to: str,
    question_id: int,
    question_title: str,
    actor: str,
) -> None:
    subject, html_body, text = build_notification(email_type, question_id, question_title, actor)
    await send_email(to, subject, html_body, text)
