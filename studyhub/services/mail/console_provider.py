"""
Console email provider - logs emails instead of sending them (development).
"""
from ...core.logging_config import get_logger
from .base import EmailProvider, EmailSendResult

logger = get_logger(__name__)


class ConsoleEmailProvider(EmailProvider):

    name = "console"

    async def send_email(self, to: str, subject: str, html_content: str, text_content: str) -> EmailSendResult:
        logger.info(f"[console mail] to={to} subject={subject!r}\n{text_content}")
        return EmailSendResult(success=True)
