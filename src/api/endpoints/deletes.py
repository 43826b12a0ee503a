import structlog
from fastapi import APIRouter, Depends

from src.api.deps import SettingsDep, StoreDep, require_admission
from src.core.exceptions import ValidationError
from src.schemas.uploads import (
    DeleteByUrlRequest,
    DeleteByUrlResponse,
    DeleteRequest,
    DeleteResponse,
    ErrorResponse,
)
from src.services.object_store import parse_public_url
from src.services.upload_validator import validate_namespace

logger = structlog.get_logger()

router = APIRouter(
    dependencies=[Depends(require_admission)],
    responses={code: {"model": ErrorResponse} for code in (400, 401, 404, 429)},
)


@router.delete("/delete", response_model=DeleteResponse)
async def delete_image(settings: SettingsDep, store: StoreDep, body: DeleteRequest | None = None) -> DeleteResponse:
    if body is None or not body.filename or not body.namespace:
        raise ValidationError("filename and namespace are required")
    validate_namespace(body.namespace, settings.namespaces)

    filename = store.delete(body.namespace, body.filename)
    return DeleteResponse(message="File deleted successfully", filename=filename)


@router.delete("/delete-by-url", response_model=DeleteByUrlResponse)
async def delete_image_by_url(
    settings: SettingsDep,
    store: StoreDep,
    body: DeleteByUrlRequest | None = None,
) -> DeleteByUrlResponse:
    if body is None or not body.url:
        raise ValidationError("url is required")

    namespace, filename = parse_public_url(body.url)
    if namespace not in settings.namespaces:
        raise ValidationError("Invalid type in URL")

    store.delete(namespace, filename)
    logger.info("image_deleted_by_url", url=body.url)
    return DeleteByUrlResponse(message="File deleted successfully")
