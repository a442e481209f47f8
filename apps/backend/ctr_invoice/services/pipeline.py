"""Document-processing run: invoice PDF in, filled CTR workbook out."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ctr_invoice.core.exceptions import SourceNotFoundError
from ctr_invoice.schemas import TokenIn, TokenResponse
from ctr_invoice.services.classification import Layout
from ctr_invoice.services.document import document_service
from ctr_invoice.services.projection import ProjectionResult, ctr_projector
from ctr_invoice.services.tag_store import TagStore
from ctr_invoice.services.tagging import TaggingResult, tagging_service

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Result of one document-processing run."""
    run_id: str
    tagging: TaggingResult
    projection: ProjectionResult


class CtrPipeline:
    """
    Runs the invoice-to-CTR flow against a fresh set of tag store rows.

    Steps:
    1. Extract tokens from the invoice PDF
    2. Store them under a new run id
    3. Classify, drop not-applicable rows, flag blank rows
    4. Project the labeled values into the CTR template
    5. Discard the run's rows
    """

    async def run(
        self,
        db: AsyncSession,
        invoice_path: Path,
        template_path: Path,
        output_path: Path | None = None,
        run_id: str | None = None,
        layout: Layout | None = None,
    ) -> PipelineResult:
        """
        Generate a CTR workbook from an invoice.

        Raises SourceNotFoundError before anything is stored when the
        invoice or template is missing or the invoice has no text.
        A template that exists but cannot be read as a workbook raises
        SourceNotFoundError from the projection step; the run is still
        discarded.
        """
        template_path = Path(template_path)
        if not template_path.exists():
            raise SourceNotFoundError(f"CTR template not found: {template_path}")

        tokens = document_service.extract_tokens(Path(invoice_path))
        if not tokens:
            raise SourceNotFoundError(f"No text found in {Path(invoice_path).name}")

        store = TagStore(db, run_id=run_id)
        await store.add_tokens(tokens)

        try:
            tagging = await tagging_service.process(store, layout)
            rows = await store.fetch_projection_rows()
            projection = ctr_projector.project(rows, template_path, output_path)
        finally:
            await store.discard()

        if projection.errors:
            logger.warning(
                "Run %s finished with %d projection errors",
                store.run_id,
                len(projection.errors),
            )

        return PipelineResult(
            run_id=store.run_id,
            tagging=tagging,
            projection=projection,
        )

    async def tag_tokens(
        self,
        db: AsyncSession,
        tokens: Iterable[TokenIn],
        layout: Layout | None = None,
    ) -> tuple[list[TokenResponse], TaggingResult]:
        """Tag already-extracted tokens and return them with their labels."""
        store = TagStore(db)
        await store.add_tokens(tokens)

        try:
            tagging = await tagging_service.process(store, layout)
            rows = [TokenResponse.model_validate(row) for row in await store.fetch_rows()]
        finally:
            await store.discard()

        return rows, tagging


# Singleton instance
ctr_pipeline = CtrPipeline()
