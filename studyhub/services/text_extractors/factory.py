"""
Text Extractor Factory.

Picks an extractor by MIME type. Only PDF and DOCX are extracted; anything
else raises UnsupportedFileTypeError so it never reaches the summarizer.
"""
from pathlib import Path
from typing import Dict, List, Optional

from .base import BaseTextExtractor
from .docx_extractor import DOCXExtractor
from .pdf_extractor import PDFExtractor
from ...core.exceptions import UnsupportedFileTypeError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """'Application/PDF; charset=binary' -> 'application/pdf'."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


class TextExtractorFactory:
    """Registry of extractors keyed by MIME type."""

    _extractors: Dict[str, BaseTextExtractor] = {}

    @classmethod
    def _initialize_extractors(cls):
        if not cls._extractors:
            for extractor in (PDFExtractor(), DOCXExtractor()):
                cls._extractors[extractor.mime_type] = extractor

    @classmethod
    def get_extractor(cls, mime_type: Optional[str]) -> BaseTextExtractor:
        """
        Raises:
            UnsupportedFileTypeError: If no extractor handles the MIME type
        """
        cls._initialize_extractors()
        extractor = cls._extractors.get(normalize_mime_type(mime_type))
        if extractor is None:
            raise UnsupportedFileTypeError(mime_type)
        return extractor

    @classmethod
    def is_supported(cls, mime_type: Optional[str]) -> bool:
        cls._initialize_extractors()
        return normalize_mime_type(mime_type) in cls._extractors

    @classmethod
    def supported_mime_types(cls) -> List[str]:
        cls._initialize_extractors()
        return list(cls._extractors.keys())


def extract_text(path: Path, mime_type: Optional[str]) -> str:
    """
    Extract text from a downloaded document.

    Raises:
        UnsupportedFileTypeError: MIME type is neither PDF nor DOCX
        ExtractionError: The document could not be parsed
        EmptyDocumentError: No text in the document
    """
    extractor = TextExtractorFactory.get_extractor(mime_type)
    logger.info(f"Extracting text from {extractor.format_name} document")
    return extractor.extract(Path(path))
