import structlog
from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.deps import PipelineDep, SettingsDep, require_admission
from src.config import Settings
from src.core.exceptions import MalformedRequestError
from src.schemas.uploads import ErrorResponse, MultiUploadResponse, UploadedFile, UploadResponse
from src.services.upload_validator import FileDescriptor, read_upload, validate_files, validate_namespace

logger = structlog.get_logger()

router = APIRouter(
    dependencies=[Depends(require_admission)],
    responses={code: {"model": ErrorResponse} for code in (400, 401, 429, 500)},
)


async def _read_uploads(request: Request, field: str, settings: Settings, max_files: int) -> list[bytes]:
    try:
        async with request.form(max_files=max_files + 1) as form:
            files = [f for f in form.getlist(field) if isinstance(f, UploadFile)]
            validate_files(
                [FileDescriptor(content_type=f.content_type, size=f.size or 0) for f in files],
                allowed_types=settings.allowed_mime_types,
                max_file_size=settings.max_file_size,
                max_files=max_files,
            )
            return [await read_upload(f, settings.max_file_size) for f in files]
    except StarletteHTTPException as e:
        raise MalformedRequestError("Invalid multipart body", details=str(e.detail)) from e


@router.post("/upload/{namespace}", response_model=UploadResponse)
async def upload_image(
    namespace: str,
    request: Request,
    settings: SettingsDep,
    pipeline: PipelineDep,
) -> UploadResponse:
    validate_namespace(namespace, settings.namespaces)
    blobs = await _read_uploads(request, "image", settings, max_files=1)

    stored = await pipeline.store_one(namespace, blobs[0])
    logger.info("upload_completed", namespace=namespace, filename=stored.filename)
    return UploadResponse(url=stored.url, filename=stored.filename, namespace=namespace)


@router.post("/upload-multiple/{namespace}", response_model=MultiUploadResponse)
async def upload_images(
    namespace: str,
    request: Request,
    settings: SettingsDep,
    pipeline: PipelineDep,
) -> MultiUploadResponse:
    validate_namespace(namespace, settings.namespaces)
    blobs = await _read_uploads(request, "images", settings, max_files=settings.max_files)

    stored = await pipeline.store_many(namespace, blobs)
    logger.info("upload_batch_completed", namespace=namespace, count=len(stored))
    return MultiUploadResponse(
        count=len(stored),
        urls=[obj.url for obj in stored],
        files=[UploadedFile(url=obj.url, filename=obj.filename) for obj in stored],
    )
