# API routers for the portal statistics service

from fastapi import APIRouter

from .statistics import router as statistics_router

router = APIRouter()
router.include_router(statistics_router)
