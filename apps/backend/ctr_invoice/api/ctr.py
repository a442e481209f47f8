"""CTR generation API routes."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ctr_invoice.core.exceptions import LayoutError, SourceNotFoundError, TagStoreError
from ctr_invoice.models import generate_run_id, get_db
from ctr_invoice.schemas import (
    ClassifyRequest,
    ClassifyResponse,
    CtrGenerationResponse,
    ProjectionErrorResponse,
)
from ctr_invoice.services.pipeline import ctr_pipeline
from ctr_invoice.services.storage import storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ctr", tags=["ctr"])

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/classify", response_model=ClassifyResponse)
async def classify_tokens(
    request: ClassifyRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Classify a set of positioned tokens.

    The tokens are tagged on a temporary run, which is discarded before
    the response is returned.
    """
    try:
        tokens, tagging = await ctr_pipeline.tag_tokens(db, request.tokens)
    except (LayoutError, TagStoreError) as exc:
        logger.exception("Classification failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        )

    return ClassifyResponse(tokens=tokens, summary=tagging.to_summary())


@router.post("/generate", response_model=CtrGenerationResponse)
async def generate_ctr(
    invoice: UploadFile = File(...),
    template: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
):
    """Tag a draft invoice PDF and project its fields into a CTR workbook."""
    if invoice.content_type != "application/pdf":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invoice must be a PDF",
        )
    if template.content_type != XLSX_CONTENT_TYPE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Template must be an Excel workbook (.xlsx)",
        )

    run_id = generate_run_id()

    invoice_path = storage_service.get_invoice_path(run_id, invoice.filename or "invoice.pdf")
    template_path = storage_service.get_template_path(run_id, template.filename or "ctr.xlsx")
    await storage_service.save_file(await invoice.read(), invoice_path)
    await storage_service.save_file(await template.read(), template_path)

    try:
        result = await ctr_pipeline.run(
            db,
            invoice_path=invoice_path,
            template_path=template_path,
            output_path=storage_service.get_output_path(run_id),
            run_id=run_id,
        )
    except SourceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        )
    except (LayoutError, TagStoreError) as exc:
        logger.exception("CTR generation failed for run %s", run_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        )
    finally:
        storage_service.delete_directory(invoice_path.parent)
        storage_service.delete_directory(template_path.parent)

    projection = result.projection
    return CtrGenerationResponse(
        run_id=result.run_id,
        output_url=storage_service.get_file_url(projection.output_path),
        cells=projection.cells,
        errors=[
            ProjectionErrorResponse(label=err.label, text=err.text, message=str(err))
            for err in projection.errors
        ],
        summary=result.tagging.to_summary(),
    )
