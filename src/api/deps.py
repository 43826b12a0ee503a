from typing import Annotated

import structlog
from fastapi import Depends, Header, Request

from src.config import Settings
from src.core.exceptions import RateLimitError
from src.services.admission import AdmissionTracker, ApiKeyAuthenticator
from src.services.object_store import ObjectStore
from src.services.uploads import UploadPipeline

logger = structlog.get_logger()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ObjectStore:
    return request.app.state.store


def get_pipeline(request: Request) -> UploadPipeline:
    return request.app.state.pipeline


def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def require_admission(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    limiter: AdmissionTracker = request.app.state.limiter
    identity = client_identity(request)
    if not limiter.admit(identity):
        logger.warning("rate_limit_exceeded", client=identity, path=request.url.path)
        raise RateLimitError()

    authenticator: ApiKeyAuthenticator = request.app.state.authenticator
    authenticator.verify(x_api_key)


SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[ObjectStore, Depends(get_store)]
PipelineDep = Annotated[UploadPipeline, Depends(get_pipeline)]
