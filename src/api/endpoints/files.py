from fastapi import APIRouter
from fastapi.responses import FileResponse

from src.api.deps import SettingsDep, StoreDep
from src.core.exceptions import NotFoundError
from src.services.normalizer import CANONICAL_MEDIA_TYPE

router = APIRouter(prefix="/uploads")


@router.get("/{namespace}/{filename}")
async def get_image(namespace: str, filename: str, settings: SettingsDep, store: StoreDep) -> FileResponse:
    if namespace not in settings.namespaces:
        raise NotFoundError("Not found")

    image_path = store.get_path(namespace, filename)
    if image_path is None:
        raise NotFoundError("Not found")

    return FileResponse(
        path=image_path,
        media_type=CANONICAL_MEDIA_TYPE,
        headers={
            "Cache-Control": f"public, max-age={settings.cache_max_age}, immutable",
            "Access-Control-Allow-Origin": "*",
        },
    )
