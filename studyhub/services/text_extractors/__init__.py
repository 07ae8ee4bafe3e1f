"""
Text Extractors Package.

Extracts text from downloaded documents by MIME type (PDF, DOCX).
"""
from .base import BaseTextExtractor
from .docx_extractor import DOCX_MIME_TYPE, DOCXExtractor
from .factory import TextExtractorFactory, extract_text, normalize_mime_type
from .pdf_extractor import PDFExtractor

__all__ = [
    "BaseTextExtractor",
    "DOCX_MIME_TYPE",
    "DOCXExtractor",
    "PDFExtractor",
    "TextExtractorFactory",
    "extract_text",
    "normalize_mime_type",
]
