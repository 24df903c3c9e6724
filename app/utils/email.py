"""
Email Utility

Helper functions for sending emails.
"""

import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from typing import List, Optional
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def is_smtp_configured() -> bool:
    """True when enough SMTP settings exist to attempt a send."""
    return bool(settings.SMTP_SERVER and settings.SMTP_EMAIL)


def send_email(
    recipients: List[str],
    subject: str,
    content: str,
    content_type: str = "plain",
    plain_alternative: Optional[str] = None,
) -> bool:
    """
    Send an email using SMTP settings from config.

    Blocking; call it from a worker thread inside async code.

    Args:
        recipients: List of email addresses
        subject: Email subject
        content: Email body
        content_type: "plain" or "html"
        plain_alternative: Plain-text part sent alongside an HTML body

    Returns:
        True if successful, False otherwise
    """
    if not is_smtp_configured():
        logger.warning("SMTP settings not configured. Email not sent.")
        return False

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((settings.MAIL_FROM_NAME, str(settings.SMTP_EMAIL)))
        msg["To"] = ", ".join(recipients)

        if plain_alternative:
            msg.attach(MIMEText(plain_alternative, "plain"))
        msg.attach(MIMEText(content, content_type))

        port = int(settings.SMTP_PORT) if settings.SMTP_PORT else 587

        with smtplib.SMTP(settings.SMTP_SERVER, port, timeout=settings.NOTIFIER_TIMEOUT_SECONDS) as server:
            server.starttls()
            if settings.SMTP_PASSWORD:
                server.login(str(settings.SMTP_EMAIL), settings.SMTP_PASSWORD)
            server.send_message(msg)

        logger.info(f"Email sent to {recipients}")
        return True

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email: {str(e)}")
        return False


def send_password_reset_code(email: str, code: str, expires_in_minutes: int = 5) -> bool:
    """
    Send a password reset code email.

    Args:
        email: User email address
        code: 6-digit reset code
        expires_in_minutes: Code expiration time in minutes

    Returns:
        True if email sent successfully, False otherwise
    """
    subject = f"Password Reset Code - {settings.PROJECT_NAME}"

    html_content = f"""
    <!DOCTYPE html>
    <html lang="en">
    <body style="margin: 0; padding: 32px; background-color: #141414;
                 font-family: Helvetica, Arial, sans-serif; color: #e5e5e5;">
      <div style="max-width: 480px; margin: 0 auto; background-color: #1f1f1f;
                  border-radius: 12px; padding: 32px;">
        <h1 style="margin-top: 0; font-size: 22px; color: #e50914;">{settings.PROJECT_NAME}</h1>
        <p style="font-size: 15px;">Use this code to reset your password:</p>
        <div style="margin: 24px 0; padding: 16px; text-align: center;
                    border: 2px dashed #e50914; border-radius: 8px;
                    font-size: 34px; font-weight: 700; letter-spacing: 10px;
                    font-family: 'Courier New', Courier, monospace;">
          {code}
        </div>
        <p style="font-size: 14px;">This code expires in <strong>{expires_in_minutes} minutes</strong>
           and can be used once.</p>
        <p style="font-size: 13px; color: #9ca3af;">
          If you didn't request this, you can ignore this email.
        </p>
      </div>
    </body>
    </html>
    """

    plain_content = (
        f"{settings.PROJECT_NAME} - Password Reset\n\n"
        f"Your password reset code is: {code}\n"
        f"It expires in {expires_in_minutes} minutes and can be used once.\n\n"
        "If you did not request this, ignore this email.\n"
    )

    # Single send so delivery fits inside NOTIFIER_TIMEOUT_SECONDS
    return send_email([email], subject, html_content, "html", plain_alternative=plain_content)
