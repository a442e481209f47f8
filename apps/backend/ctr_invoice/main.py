"""Main FastAPI application."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse

from ctr_invoice.api import api_router
from ctr_invoice.core.config import get_settings
from ctr_invoice.core.logging import configure_logging
from ctr_invoice.models import init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()
    await init_db()

    # Ensure storage directories exist
    storage_path = Path(settings.storage_path)
    storage_path.mkdir(parents=True, exist_ok=True)

    yield


app = FastAPI(
    title=settings.app_name,
    description="Spatial tagging of draft invoices into CTR workbooks",
    version="0.1.0",
    lifespan=lifespan,
)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


# Serve generated files
@app.get("/api/v1/files/{file_path:path}")
async def serve_file(file_path: str):
    """Serve generated files from storage."""
    storage_root = Path(settings.storage_path).resolve()
    full_path = (storage_root / file_path).resolve()
    if storage_root not in full_path.parents or not full_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    # Determine content type
    content_types = {
        ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ".pdf": "application/pdf",
    }
    content_type = content_types.get(full_path.suffix.lower(), "application/octet-stream")

    return FileResponse(full_path, media_type=content_type, filename=full_path.name)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": "0.1.0",
        "docs": "/docs",
    }
