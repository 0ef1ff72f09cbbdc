"""API v1 router."""

from fastapi import APIRouter

from setbuilder.api.v1.endpoints import barcodes, health, set_jobs

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(set_jobs.router, prefix="/set-jobs", tags=["set-jobs"])
api_router.include_router(barcodes.router, prefix="/barcodes", tags=["barcodes"])
