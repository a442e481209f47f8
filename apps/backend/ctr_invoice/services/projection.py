"""CTR projection: write tagged invoice values into the CTR workbook template."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ctr_invoice.core.config import get_settings
from ctr_invoice.core.exceptions import FormatError, SourceNotFoundError
from ctr_invoice.models import FieldLabel
from ctr_invoice.services.tag_store import ProjectionRow

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass
class ProjectionResult:
    """Result of writing a CTR workbook."""
    output_path: Path
    cells: dict[str, str]
    errors: list[FormatError] = field(default_factory=list)


class CtrProjector:
    """
    Projects labeled tokens onto fixed cells of the first worksheet.

    Rows are applied in the order given; when several rows carry the same
    label the last one wins. A value that cannot be formatted is reported
    and its cell left as it is in the template.
    """

    CELL_MAP = {
        FieldLabel.STATE: "A4",
        FieldLabel.INVOICE_END_DATE: "B4",
        FieldLabel.CLIENT_CONTRACT: "D4",
        FieldLabel.INVOICE_NUMBER: "F4",
    }

    # Jurisdiction code -> tax district
    STATE_CODES = {
        "IN": "TD-IN",
        "KY": "TD-KY-OH",
        "OH": "TD-KY-OH",
        "NC": "TD-NC-SC",
        "SC": "TD-NC-SC",
        "FL": "TD-FL",
    }

    def __init__(
        self,
        date_input_format: str | None = None,
        date_output_format: str | None = None,
    ):
        self.date_input_format = date_input_format or settings.invoice_date_format
        self.date_output_format = date_output_format or settings.ctr_date_format

    def format_value(self, label: FieldLabel, text: str) -> str:
        """Convert a tagged value to what its CTR cell expects."""
        if label == FieldLabel.STATE:
            return self.STATE_CODES.get(text, "")

        if label == FieldLabel.INVOICE_END_DATE:
            try:
                parsed = datetime.strptime(text, self.date_input_format)
            except ValueError as exc:
                raise FormatError(label.value, text, self.date_input_format) from exc
            return parsed.strftime(self.date_output_format)

        return text

    def build_cells(
        self,
        rows: Iterable[ProjectionRow],
    ) -> tuple[dict[str, str], list[FormatError]]:
        """Map rows to cell values. Returns (cells, errors)."""
        cells: dict[str, str] = {}
        errors: list[FormatError] = []

        for row in rows:
            cell = self.CELL_MAP.get(row.label)
            if cell is None:
                continue

            try:
                cells[cell] = self.format_value(row.label, row.text)
            except FormatError as exc:
                logger.warning("Skipping %s: %s", cell, exc)
                errors.append(exc)

        return cells, errors

    def project(
        self,
        rows: Iterable[ProjectionRow],
        template_path: Path,
        output_path: Path | None = None,
    ) -> ProjectionResult:
        """
        Fill a copy of the CTR template.

        Args:
            rows: Labeled tokens, in tag store order
            template_path: CTR workbook to fill
            output_path: Where to save; defaults to the configured file
                name next to the template

        Returns:
            ProjectionResult with the cells written and any format errors
        """
        template_path = Path(template_path)
        if not template_path.exists():
            raise SourceNotFoundError(f"CTR template not found: {template_path}")

        cells, errors = self.build_cells(rows)

        try:
            workbook = load_workbook(template_path)
        except (BadZipFile, InvalidFileException, KeyError) as exc:
            raise SourceNotFoundError(f"Cannot open CTR template {template_path}: {exc}") from exc

        worksheet = workbook.worksheets[0]
        for cell, value in cells.items():
            worksheet[cell] = value

        if output_path is None:
            output_path = template_path.with_name(settings.ctr_output_filename)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(output_path)
        workbook.close()

        logger.info("CTR saved as %s (%d cells)", output_path, len(cells))
        return ProjectionResult(output_path=output_path, cells=cells, errors=errors)


# Singleton instance
ctr_projector = CtrProjector()
