"""
Base Text Extractor Interface.

All text extractors must inherit from this base class and implement
the extract() method.
"""
from abc import ABC, abstractmethod
from pathlib import Path

from ...core.exceptions import EmptyDocumentError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class BaseTextExtractor(ABC):
    """
    Abstract base class for text extractors.

    Each document format has its own extractor keyed by MIME type.
    """

    def __init__(self, mime_type: str, format_name: str):
        """
        Args:
            mime_type: MIME type handled (e.g. 'application/pdf')
            format_name: Human-readable format name (e.g. 'PDF')
        """
        self.mime_type = mime_type
        self.format_name = format_name

    @abstractmethod
    def extract(self, path: Path) -> str:
        """
        Extract text from a document on disk.

        Raises:
            ExtractionError: If the document cannot be parsed
            EmptyDocumentError: If it has no extractable text
        """
        pass

    def validate_content(self, text_content: str) -> str:
        """Return the text, or raise EmptyDocumentError if there is none."""
        if not text_content or not text_content.strip():
            raise EmptyDocumentError(
                f"{self.format_name} file appears to be empty or contains no extractable text"
            )
        return text_content
