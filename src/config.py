from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_KEY = "CHANGE_THIS_TO_A_SECURE_RANDOM_STRING"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "upload-storage-service"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    cors_origins: list[str] = ["*"]

    domain: str = "http://localhost:8000"
    api_key: str = DEFAULT_API_KEY

    uploads_path: str = "./uploads"
    namespaces: list[str] = ["posts", "avatars", "reports"]
    allowed_mime_types: list[str] = ["image/jpeg", "image/png", "image/webp", "image/gif"]
    max_file_size: int = 10 * 1024 * 1024
    max_files: int = 10
    max_dimension: int = 1200
    jpeg_quality: int = Field(default=80, ge=1, le=100)
    cache_max_age: int = 2592000

    rate_limit_window: int = 60
    rate_limit_max: int = 100

    normalize_workers: int = 4
    max_concurrent_writes: int = 5


settings = Settings()
