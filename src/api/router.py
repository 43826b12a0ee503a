from fastapi import APIRouter

from src.api.endpoints import deletes, files, health, uploads

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(uploads.router, tags=["uploads"])
router.include_router(deletes.router, tags=["uploads"])
router.include_router(files.router, tags=["files"])
