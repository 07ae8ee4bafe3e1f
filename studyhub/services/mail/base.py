"""
Email provider interface.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class EmailSendResult:
    success: bool
    error_message: Optional[str] = None
    # True when the failure is worth another attempt (connection, timeout)
    retryable: bool = False


@dataclass
class RenderedEmail:
    html_content: str
    text_content: str


class EmailProvider(ABC):
    """Delivers one rendered email to one recipient."""

    name = "base"

    @abstractmethod
    async def send_email(self, to: str, subject: str, html_content: str, text_content: str) -> EmailSendResult:
        pass
