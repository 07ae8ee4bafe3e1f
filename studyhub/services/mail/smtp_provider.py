"""
SMTP email provider (aiosmtplib).

Sends multipart (plain text + HTML) UTF-8 messages.
"""
import asyncio
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from ...core.config import (
    MAIL_FROM_EMAIL,
    MAIL_FROM_NAME,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_TIMEOUT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
)
from ...core.logging_config import get_logger
from .base import EmailProvider, EmailSendResult

logger = get_logger(__name__)


class SMTPEmailProvider(EmailProvider):
    """SMTP email provider for production email delivery."""

    name = "smtp"

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        username: Optional[str] = SMTP_USERNAME,
        password: Optional[str] = SMTP_PASSWORD,
        use_tls: bool = SMTP_USE_TLS,
        timeout: float = SMTP_TIMEOUT,
        from_email: str = MAIL_FROM_EMAIL,
        from_name: str = MAIL_FROM_NAME,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.from_email = from_email
        self.from_name = from_name

    def _build_message(self, to: str, subject: str, html_content: str, text_content: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text_content, charset="utf-8")
        msg.add_alternative(html_content, subtype="html", charset="utf-8")
        return msg

    async def send_email(self, to: str, subject: str, html_content: str, text_content: str) -> EmailSendResult:
        msg = self._build_message(to, subject, html_content, text_content)

        try:
            async with aiosmtplib.SMTP(
                hostname=self.host,
                port=self.port,
                start_tls=self.use_tls,
                timeout=self.timeout,
            ) as smtp:
                if self.username and self.password:
                    await smtp.login(self.username, self.password)
                errors, response = await smtp.send_message(msg)
        except aiosmtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {e}")
            return EmailSendResult(success=False, error_message=f"SMTP authentication failed: {e}")
        except (aiosmtplib.SMTPConnectError, aiosmtplib.SMTPServerDisconnected, asyncio.TimeoutError) as e:
            logger.error(f"SMTP connection to {self.host}:{self.port} failed: {e}")
            return EmailSendResult(success=False, error_message=f"SMTP connection failed: {e}", retryable=True)
        except aiosmtplib.SMTPException as e:
            logger.error(f"SMTP send to {to} failed: {e}")
            return EmailSendResult(success=False, error_message=f"SMTP error: {e}")

        if errors:
            details = "; ".join(f"{addr}: {err}" for addr, err in errors.items())
            logger.error(f"SMTP partial send failure to {to}: {details}")
            return EmailSendResult(success=False, error_message=f"Partial send failure: {details}")

        logger.info(f"Email sent to {to} via SMTP ({response})")
        return EmailSendResult(success=True)
