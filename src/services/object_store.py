import contextlib
import os
import re
import secrets
import tempfile
import time
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import unquote, urlsplit

import structlog

from src.core.exceptions import MalformedRequestError, NotFoundError, StorageError, ValidationError
from src.services.normalizer import CANONICAL_EXTENSION

logger = structlog.get_logger()

_PUBLIC_PATH_RE = re.compile(r"/uploads/([^/]+)/([^/]+)$")


def generate_filename() -> str:
    return f"{time.time_ns() // 1_000_000}_{secrets.token_hex(4)}.{CANONICAL_EXTENSION}"


def sanitize_filename(raw: str) -> str:
    name = raw.replace("\\", "/").rsplit("/", 1)[-1]
    if not name or "\x00" in name or name.startswith("."):
        raise ValidationError("Invalid filename")
    return name


def build_public_url(domain: str, namespace: str, filename: str) -> str:
    return f"{domain.rstrip('/')}/uploads/{namespace}/{filename}"


def parse_public_url(url: str) -> tuple[str, str]:
    m = _PUBLIC_PATH_RE.search(urlsplit(url).path)
    if not m:
        raise MalformedRequestError("Invalid URL format")
    return unquote(m.group(1)), unquote(m.group(2))


class ObjectStore:
    def __init__(self, root: str | Path, namespaces: Iterable[str]) -> None:
        self.root = Path(root)
        self.namespaces = tuple(namespaces)

    def namespace_dir(self, namespace: str) -> Path:
        return self.root / namespace

    def ensure_namespace_dirs(self) -> None:
        for namespace in self.namespaces:
            path = self.namespace_dir(namespace)
            if not path.exists():
                path.mkdir(parents=True, exist_ok=True)
                logger.info("namespace_dir_created", path=str(path))

    def path_for_write(self, namespace: str, filename: str) -> Path:
        return self.namespace_dir(namespace) / filename

    def resolve(self, namespace: str, raw_name: str) -> Path:
        namespace_dir = self.namespace_dir(namespace)
        path = namespace_dir / sanitize_filename(raw_name)
        if path.parent != namespace_dir:
            raise ValidationError("Invalid filename")
        return path

    def save(self, namespace: str, data: bytes) -> str:
        namespace_dir = self.namespace_dir(namespace)
        filename = generate_filename()
        target = self.path_for_write(namespace, filename)
        tmp_path: str | None = None
        try:
            namespace_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=namespace_dir, prefix=".", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)
            logger.error("image_save_failed", namespace=namespace, error=str(e))
            raise StorageError("Failed to store image", details=str(e)) from e

        logger.info("image_saved", namespace=namespace, filename=filename, size=len(data))
        return filename

    def delete(self, namespace: str, raw_name: str) -> str:
        path = self.resolve(namespace, raw_name)
        if not path.is_file():
            raise NotFoundError("File not found")
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFoundError("File not found") from e
        except OSError as e:
            logger.error("image_delete_failed", path=str(path), error=str(e))
            raise StorageError("Failed to delete image", details=str(e)) from e

        logger.info("image_deleted", namespace=namespace, filename=path.name)
        return path.name

    def get_path(self, namespace: str, raw_name: str) -> Path | None:
        path = self.resolve(namespace, raw_name)
        if path.is_file():
            return path
        return None
