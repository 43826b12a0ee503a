from datetime import datetime, timezone

from fastapi import APIRouter

from src.api.deps import SettingsDep
from src.schemas.health import HealthResponse, ServiceInfo

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
    )


@router.get("/", response_model=ServiceInfo)
async def service_info(settings: SettingsDep) -> ServiceInfo:
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        endpoints={
            "health": "GET /health",
            "upload": "POST /upload/:namespace",
            "uploadMultiple": "POST /upload-multiple/:namespace",
            "delete": "DELETE /delete",
            "deleteByUrl": "DELETE /delete-by-url",
            "images": "GET /uploads/:namespace/:filename",
        },
    )
