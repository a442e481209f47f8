"""Document processing service: PDF word extraction for the tag store."""

import logging
from pathlib import Path

import fitz  # PyMuPDF

from ctr_invoice.core.config import get_settings
from ctr_invoice.core.exceptions import SourceNotFoundError
from ctr_invoice.schemas import TokenIn

logger = logging.getLogger(__name__)

settings = get_settings()


class DocumentProcessingService:
    """Service for reading positioned words out of PDF documents."""

    def __init__(self, flip_y_axis: bool | None = None):
        """Initialize document processing service."""
        self.flip_y_axis = settings.flip_y_axis if flip_y_axis is None else flip_y_axis

    def extract_tokens(self, file_path: Path) -> list[TokenIn]:
        """
        Extract every word of a PDF with its bounding box and page number.

        Args:
            file_path: Path to the PDF file

        Returns:
            Tokens in page order
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise SourceNotFoundError(f"Document not found: {file_path}")

        try:
            doc = fitz.open(file_path)
        except RuntimeError as exc:
            raise SourceNotFoundError(f"Cannot open document {file_path}: {exc}") from exc

        tokens: list[TokenIn] = []
        try:
            for page_num in range(len(doc)):
                page = doc[page_num]
                tokens.extend(self._extract_page_tokens(page, page_num + 1))
        finally:
            doc.close()

        logger.info("Extracted %d tokens from %s", len(tokens), file_path.name)
        return tokens

    def _extract_page_tokens(
        self,
        page: fitz.Page,
        page_number: int,
    ) -> list[TokenIn]:
        """
        Extract words from one page.

        PyMuPDF measures y downward from the top of the page. With
        flip_y_axis, y is measured upward from the bottom instead, so y1 is
        the bottom edge of a word and y2 its top edge.
        """
        page_height = page.rect.height
        tokens = []

        for x0, y0, x1, y1, text, *_ in page.get_text("words"):
            if self.flip_y_axis:
                bottom, top = page_height - y1, page_height - y0
            else:
                bottom, top = y0, y1

            tokens.append(
                TokenIn(
                    text=text,
                    x1=x0,
                    y1=bottom,
                    x2=x1,
                    y2=top,
                    sheet=page_number,
                )
            )

        return tokens


# Singleton instance
document_service = DocumentProcessingService()
