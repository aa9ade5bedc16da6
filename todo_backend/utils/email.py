import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

import aiosmtplib

from todo_backend.config import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when the SMTP server rejects or cannot receive a message."""


def verification_email(otp: int) -> tuple[str, str]:
    subject = f"Your Verification Code: {otp}"
    html = f"<h2>Code: {otp}</h2>"
    return subject, html


def password_reset_email(otp: int) -> tuple[str, str]:
    subject = "Password Reset Verification Code"
    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: auto; border: 1px solid #ddd; padding: 20px;">
            <h2 style="color: #1976d2;">Reset Your Password</h2>
            <p>We received a request to reset your password. Use the code below to proceed:</p>
            <div style="background: #f4f4f4; padding: 10px; text-align: center; font-size: 24px; font-weight: bold; letter-spacing: 5px;">
                {otp}
            </div>
            <p>This code is valid for a limited time. If you didn't request this, please ignore this email.</p>
        </div>
    """
    return subject, html


class Mailer:
    """
    Sends HTML mail through one SMTP account using aiosmtplib.
    Built once at startup and handed to routes through a dependency.
    """

    def __init__(self, settings: Settings):
        self.host = settings.EMAIL_HOST
        self.port = settings.EMAIL_PORT
        self.use_tls = settings.EMAIL_USE_TLS
        self.username = settings.EMAIL_USER
        self.password = settings.EMAIL_PASS
        self.timeout = settings.EMAIL_TIMEOUT

    def build_message(self, to_email: str, subject: str, html: str, sender_name: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = f'"{sender_name}" <{self.username or ""}>'
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))
        return msg

    async def send(self, to_email: str, subject: str, html: str, sender_name: str) -> None:
        if not self.host or not self.username:
            logger.warning("[EMAIL SKIPPED] SMTP not configured - %s", subject[:50])
            return

        msg = self.build_message(to_email, subject, html, sender_name)
        try:
            # Port 465 speaks TLS from the first byte; 587 upgrades with STARTTLS
            await aiosmtplib.send(
                msg,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_tls,
                start_tls=None if self.use_tls else True,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("[EMAIL FAILED] %s - to %s", e, to_email)
            raise MailDeliveryError(str(e)) from e
        logger.info("[EMAIL SENT] To %s", to_email)

    async def send_verification_code(self, to_email: str, otp: int) -> None:
        subject, html = verification_email(otp)
        await self.send(to_email, subject, html, sender_name="Verification Team")

    async def send_password_reset_code(self, to_email: str, otp: int) -> None:
        subject, html = password_reset_email(otp)
        await self.send(to_email, subject, html, sender_name="Security Team")
