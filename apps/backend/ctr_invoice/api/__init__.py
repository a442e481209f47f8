"""API routes package."""

from fastapi import APIRouter

from ctr_invoice.api.ctr import router as ctr_router

api_router = APIRouter()

api_router.include_router(ctr_router)
