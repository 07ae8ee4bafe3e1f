"""
PDF Text Extractor.

Extracts text from PDF files using pypdf library.
"""
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .base import BaseTextExtractor
from ...core.exceptions import ExtractionError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class PDFExtractor(BaseTextExtractor):
    """Extractor for PDF files."""

    def __init__(self):
        super().__init__("application/pdf", "PDF")

    def extract(self, path: Path) -> str:
        try:
            reader = PdfReader(path)
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PyPdfError, ValueError, OSError) as e:
            logger.error(f"Error extracting text from PDF {path.name}: {e}")
            raise ExtractionError(f"Error extracting text from PDF: {e}") from e

        text_content = "\n".join(p for p in pages if p)
        logger.debug(f"Extracted {len(text_content)} chars from {len(pages)} PDF pages")
        return self.validate_content(text_content)
