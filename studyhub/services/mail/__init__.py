"""
Email delivery: template rendering and providers.
"""
from .base import EmailProvider, EmailSendResult, RenderedEmail
from .console_provider import ConsoleEmailProvider
from .smtp_provider import SMTPEmailProvider
from .template_renderer import JinjaTemplateRenderer
from ...core.config import SMTP_USERNAME
from ...core.logging_config import get_logger

logger = get_logger(__name__)


def create_email_provider() -> EmailProvider:
    """SMTP when credentials are configured, otherwise log to the console."""
    if SMTP_USERNAME:
        return SMTPEmailProvider()
    logger.warning("SMTP credentials not configured, emails will be logged only")
    return ConsoleEmailProvider()


__all__ = [
    "EmailProvider",
    "EmailSendResult",
    "RenderedEmail",
    "ConsoleEmailProvider",
    "SMTPEmailProvider",
    "JinjaTemplateRenderer",
    "create_email_provider",
]
