from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from src.api.router import router
from src.config import Settings, settings as default_settings
from src.core.exceptions import register_exception_handlers
from src.core.logging import configure_logging
from src.services.admission import ApiKeyAuthenticator, SlidingWindowLimiter
from src.services.object_store import ObjectStore
from src.services.uploads import UploadPipeline

logger = structlog.get_logger()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    cfg: Settings = app.state.settings
    app.state.store.ensure_namespace_dirs()
    if app.state.authenticator.uses_default_key:
        logger.warning("insecure_api_key", hint="set API_KEY to a random secret before deploying")
    logger.info(
        "service_started",
        domain=cfg.domain,
        uploads_path=cfg.uploads_path,
        namespaces=cfg.namespaces,
    )
    yield
    app.state.pipeline.close()
    logger.info("service_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    cfg = settings or default_settings
    configure_logging(cfg.log_level)

    app = FastAPI(title=cfg.app_name, version=cfg.app_version, lifespan=lifespan)

    store = ObjectStore(cfg.uploads_path, cfg.namespaces)
    app.state.settings = cfg
    app.state.store = store
    app.state.pipeline = UploadPipeline(store, cfg)
    app.state.limiter = SlidingWindowLimiter(
        max_requests=cfg.rate_limit_max,
        window_seconds=cfg.rate_limit_window,
    )
    app.state.authenticator = ApiKeyAuthenticator(cfg.api_key)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    register_exception_handlers(app, debug=cfg.debug)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level,
    )
