"""
Statement text loading from plain-text dumps or PDFs (via pdfplumber).
"""
import pdfplumber
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pathlib import Path
from typing import List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {'.txt', '.text'}

# Typographic ligatures some statement fonts emit
LIGATURES = {
    'ﬁ': 'fi',
    'ﬂ': 'fl',
    'ﬀ': 'ff',
    'ﬃ': 'ffi',
    'ﬄ': 'ffl',
}


class PDFTextLoader:
    """Extracts the text of selected PDF pages."""

    def __init__(self, pdf_path: Path, password: Optional[str] = None):
        self.pdf_path = pdf_path
        self.password = password
        self._pdf = None

    def open(self):
        """
        Open the PDF, decrypting it when a password is given.

        Raises:
            ValueError: If the PDF is encrypted and the password is missing or wrong
        """
        if self._pdf is not None:
            return self._pdf
        try:
            self._pdf = pdfplumber.open(self.pdf_path, password=self.password or "")
        except Exception as e:
            # Newer pdfplumber releases wrap pdfminer errors in their own exception
            cause = e.args[0] if e.args else None
            if not isinstance(e, PDFPasswordIncorrect) and not isinstance(cause, PDFPasswordIncorrect):
                raise
            if self.password:
                raise ValueError("Incorrect password for PDF file")
            raise ValueError("PDF file is password protected; a password is required")
        logger.info(f"Loaded PDF with {len(self._pdf.pages)} pages")
        return self._pdf

    def extract_text(self, pages: Optional[Sequence[int]] = None) -> str:
        """
        Extract the text of the given pages (1-indexed), or of all pages.

        Args:
            pages: Page numbers to extract

        Returns:
            Page texts joined by newlines
        """
        pdf = self.open()
        selected = self._select_pages(len(pdf.pages), pages)

        texts: List[str] = []
        for page_num in selected:
            text = pdf.pages[page_num - 1].extract_text() or ""
            texts.append(self._normalize_text(text))
            logger.debug(f"Page {page_num}: {len(text)} chars extracted")

        return "\n".join(texts)

    @staticmethod
    def _select_pages(page_count: int, pages: Optional[Sequence[int]]) -> List[int]:
        if not pages:
            return list(range(1, page_count + 1))
        out_of_range = [p for p in pages if not 1 <= p <= page_count]
        if out_of_range:
            raise ValueError(f"Page(s) out of range 1-{page_count}: {out_of_range}")
        return list(pages)

    @staticmethod
    def _normalize_text(text: str) -> str:
        for ligature, replacement in LIGATURES.items():
            text = text.replace(ligature, replacement)
        return text

    def close(self):
        """Close the PDF file."""
        if self._pdf:
            self._pdf.close()
            self._pdf = None


def parse_page_range(value: Optional[str]) -> Optional[List[int]]:
    """
    Parse a page selection such as "1-3,5" into page numbers.

    Raises:
        ValueError: If the selection is malformed
    """
    if not value or not value.strip():
        return None

    pages: List[int] = []
    for part in value.split(','):
        part = part.strip()
        if not part:
            continue
        try:
            if '-' in part:
                first, last = (int(x) for x in part.split('-', 1))
                pages.extend(range(first, last + 1))
            else:
                pages.append(int(part))
        except ValueError:
            raise ValueError(f"Invalid page selection: {value!r}")
    return pages or None


def load_statement_text(path: Path, password: Optional[str] = None,
                        pages: Optional[Sequence[int]] = None) -> str:
    """
    Load the text of a statement document.

    Args:
        path: Path to a .txt dump or a PDF
        password: PDF password, if the document is encrypted
        pages: 1-indexed pages to read from a PDF

    Returns:
        Extracted text

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the PDF cannot be decrypted or has no extractable text
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Statement file not found: {path}")

    if path.suffix.lower() in TEXT_SUFFIXES:
        return path.read_text(encoding='utf-8')

    loader = PDFTextLoader(path, password)
    try:
        text = loader.extract_text(pages)
    finally:
        loader.close()

    if not text.strip():
        raise ValueError(
            "No text could be extracted from the PDF. It may be a scanned image "
            "or have extraction restrictions."
        )
    return text
