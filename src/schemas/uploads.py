from pydantic import BaseModel


class UploadResponse(BaseModel):
    success: bool = True
    url: str
    filename: str
    namespace: str


class UploadedFile(BaseModel):
    url: str
    filename: str


class MultiUploadResponse(BaseModel):
    success: bool = True
    count: int
    urls: list[str]
    files: list[UploadedFile]


class DeleteRequest(BaseModel):
    filename: str | None = None
    namespace: str | None = None


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    filename: str


class DeleteByUrlRequest(BaseModel):
    url: str | None = None


class DeleteByUrlResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
