from collections.abc import Sequence
from dataclasses import dataclass

from starlette.datastructures import UploadFile

from src.core.exceptions import PayloadTooLarge, ValidationError

READ_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class FileDescriptor:
    content_type: str | None
    size: int


def _format_size(num_bytes: int) -> str:
    mib = num_bytes / (1024 * 1024)
    return f"{mib:g}MB"


def validate_namespace(namespace: str, allowed: Sequence[str]) -> None:
    if namespace not in allowed:
        raise ValidationError(f"Invalid type. Allowed: {', '.join(allowed)}")


def validate_size(size: int, max_file_size: int) -> None:
    if size > max_file_size:
        raise PayloadTooLarge(f"File too large. Maximum size: {_format_size(max_file_size)}")


def validate_files(
    files: Sequence[FileDescriptor],
    allowed_types: Sequence[str],
    max_file_size: int,
    max_files: int,
) -> None:
    if not files:
        raise ValidationError("No image file provided")
    if len(files) > max_files:
        raise ValidationError(f"Too many files. Maximum: {max_files}")
    for f in files:
        if f.content_type not in allowed_types:
            raise ValidationError(f"Invalid file type: {f.content_type}. Allowed: {', '.join(allowed_types)}")
        validate_size(f.size, max_file_size)


async def read_upload(upload: UploadFile, max_file_size: int) -> bytes:
    buffer = bytearray()
    while chunk := await upload.read(READ_CHUNK_SIZE):
        buffer.extend(chunk)
        validate_size(len(buffer), max_file_size)
    return bytes(buffer)
