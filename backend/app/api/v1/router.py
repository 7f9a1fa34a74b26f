"""Aggregate router for API v1."""
from fastapi import APIRouter

from .listings import router as listings_router

router = APIRouter()
router.include_router(listings_router, tags=["listings"])
