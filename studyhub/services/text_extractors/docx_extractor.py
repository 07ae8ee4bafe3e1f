"""
DOCX Text Extractor.

Extracts text from DOCX files using python-docx library.
"""
from pathlib import Path
from zipfile import BadZipFile

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError

from .base import BaseTextExtractor
from ...core.exceptions import ExtractionError
from ...core.logging_config import get_logger

logger = get_logger(__name__)

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class DOCXExtractor(BaseTextExtractor):
    """Extractor for DOCX files (paragraphs, then table rows)."""

    def __init__(self):
        super().__init__(DOCX_MIME_TYPE, "DOCX")

    def extract(self, path: Path) -> str:
        try:
            doc = DocxDocument(str(path))
        except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as e:
            logger.error(f"Error extracting text from DOCX {path.name}: {e}")
            raise ExtractionError(f"Error extracting text from DOCX: {e}") from e

        lines = [p.text for p in doc.paragraphs if p.text.strip()]

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append(" | ".join(cells))

        return self.validate_content("\n".join(lines))
