"""
PDF service for turning uploaded documents into text for the LLM
"""
import fitz  # PyMuPDF
from io import BytesIO
from pdfminer.high_level import extract_text
from pdfminer.layout import LAParams
import logging
import re

logger = logging.getLogger(__name__)


class PDFService:
    """Service for PDF text extraction"""

    def __init__(self, max_chars: int = 20000):
        self.max_chars = max_chars

    def extract_text_pymupdf(self, pdf_content: bytes) -> str:
        """Extract text using PyMuPDF (fitz)"""
        doc = fitz.open(stream=pdf_content, filetype="pdf")
        try:
            text = ""
            for page_num in range(len(doc)):
                page = doc.load_page(page_num)
                text += page.get_text()
        finally:
            doc.close()

        cleaned_text = self._clean_text(text)
        logger.info(f"Extracted text using PyMuPDF: {len(cleaned_text)} characters")
        return cleaned_text

    def extract_text_pdfminer(self, pdf_content: bytes) -> str:
        """Extract text using pdfminer.six - fallback method"""
        laparams = LAParams(
            line_margin=0.5,
            word_margin=0.1,
            char_margin=2.0,
            boxes_flow=0.5,
            detect_vertical=True
        )
        text = extract_text(BytesIO(pdf_content), laparams=laparams)

        cleaned_text = self._clean_text(text)
        logger.info(f"Extracted text using pdfminer: {len(cleaned_text)} characters")
        return cleaned_text

    def extract_text(self, pdf_content: bytes) -> str:
        """Extract text from PDF content, PyMuPDF first with pdfminer fallback"""
        try:
            text = self.extract_text_pymupdf(pdf_content)
        except Exception as e:
            logger.warning(f"PyMuPDF failed, trying pdfminer: {e}")
            try:
                text = self.extract_text_pdfminer(pdf_content)
            except Exception as e2:
                logger.error(f"Both extraction methods failed: {e2}")
                raise RuntimeError(f"PDF text extraction failed: {e2}")
        return text[:self.max_chars]

    def _clean_text(self, text: str) -> str:
        """Clean and normalize extracted text"""
        if not text:
            return ""

        # Remove page numbers
        text = re.sub(r'Page \d+ of \d+', '', text)

        # Collapse runs of spaces but keep line structure for tables
        text = re.sub(r'[ \t]+', ' ', text)
        text = re.sub(r'\n\s*\n+', '\n\n', text)

        return text.strip()


# Global PDF service instance
pdf_service = PDFService()
