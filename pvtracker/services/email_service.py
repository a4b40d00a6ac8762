# services/email_service.py
import os
import html
import logging
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To

logger = logging.getLogger(__name__)

DEFAULT_FROM_EMAIL = "results@polevaulttracker.app"


def summary_html(summary_text: str) -> str:
    # <pre> keeps the attempt columns aligned
    return (
        '<html><body style="font-family: Arial, sans-serif; padding: 20px;">'
        '<pre style="font-family: Menlo, Consolas, monospace; font-size: 14px;">'
        f"{html.escape(summary_text)}"
        "</pre></body></html>"
    )


def send_session_summary_email(recipient_email: str, subject: str, summary_text: str) -> bool:
    """
    Email a session summary through SendGrid.

    The plain-text body is the share text itself; the HTML part is the same
    text in a monospace block. Returns False (and logs) when SENDGRID_API_KEY
    is missing or SendGrid rejects the message; nothing is retried.
    """
    api_key = os.getenv("SENDGRID_API_KEY")
    if not api_key:
        logger.error("SENDGRID_API_KEY not found in environment variables")
        return False

    message = Mail(
        from_email=Email(os.getenv("SHARE_FROM_EMAIL", DEFAULT_FROM_EMAIL)),
        to_emails=To(recipient_email),
        subject=subject,
        plain_text_content=summary_text,
        html_content=summary_html(summary_text),
    )

    try:
        response = SendGridAPIClient(api_key).send(message)
    except Exception as e:
        logger.error(f"Failed to send session summary to {recipient_email}: {str(e)}")
        return False

    logger.info(f"Session summary sent to {recipient_email}. Status code: {response.status_code}")
    return True
