"""Email integration utilities for candidate notifications."""

import asyncio
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, List
import logging

from core.config import settings
from database.security import mask_email

logger = logging.getLogger(__name__)


class EmailService:
    """Email service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
    ):
        """
        Initialize email service. Unset arguments fall back to settings.

        Args:
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
            from_email: Default sender email
            from_name: Default sender name
        """
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user or settings.smtp_user
        self.smtp_password = smtp_password or settings.smtp_password
        self.from_email = from_email or settings.from_email
        self.from_name = from_name or settings.from_name

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host)

    def send_email(
        self,
        to_email: str | List[str],
        subject: str,
        body: str,
        html: bool = False,
        reply_to: Optional[str] = None,
    ) -> bool:
        """
        Send an email.

        Args:
            to_email: Recipient email address(es)
            subject: Email subject
            body: Email body
            html: Whether body is HTML
            reply_to: Reply-to email address

        Returns:
            True if email sent successfully
        """
        recipients = to_email if isinstance(to_email, list) else [to_email]
        masked = ", ".join(mask_email(r) for r in recipients)

        if not self.is_configured:
            logger.info(f"SMTP not configured, skipping email to {masked}: {subject}")
            return True

        msg = MIMEMultipart()
        msg['From'] = f"{self.from_name} <{self.from_email}>"
        msg['To'] = ", ".join(recipients)
        msg['Subject'] = subject
        if reply_to:
            msg['Reply-To'] = reply_to
        msg.attach(MIMEText(body, 'html' if html else 'plain'))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg, from_addr=self.from_email, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {masked}: {e}")
            return False

        logger.info(f"Email sent to {masked}")
        return True

    async def send_email_async(self, *args, **kwargs) -> bool:
        """Run ``send_email`` in a worker thread so SMTP never blocks the loop."""
        return await asyncio.to_thread(self.send_email, *args, **kwargs)


def render_status_email(
    candidate_name: Optional[str],
    interview_name: str,
    new_status: str,
    template: Optional[str] = None,
) -> tuple[str, str]:
    """
    Build the subject and body of a candidate status notification.

    Returns:
        (subject, body)
    """
    readable_status = new_status.replace("_", " ")
    subject = f"Update on your application for {interview_name}"
    message = template or f"Your application status has been updated to {readable_status}."
    body = (
        f"Hi {candidate_name or 'there'},\n\n"
        f"{message}\n\n"
        f"Interview: {interview_name}\n\n"
        f"Best regards,\n{settings.from_name}"
    )
    return subject, body
