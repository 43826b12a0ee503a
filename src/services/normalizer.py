from io import BytesIO

import structlog
from PIL import Image, UnidentifiedImageError

from src.core.exceptions import ProcessingError

logger = structlog.get_logger()

CANONICAL_FORMAT = "JPEG"
CANONICAL_EXTENSION = "jpg"
CANONICAL_MEDIA_TYPE = "image/jpeg"


def normalize_image(image_bytes: bytes, max_dimension: int = 1200, quality: int = 80) -> bytes:
    try:
        img: Image.Image = Image.open(BytesIO(image_bytes))
        img.seek(0)
        img.load()
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
        buffer = BytesIO()
        img.save(buffer, format=CANONICAL_FORMAT, quality=quality, optimize=True)
        return buffer.getvalue()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        logger.warning("image_normalize_failed", error=str(e), size=len(image_bytes))
        raise ProcessingError("Unprocessable image", details=str(e)) from e
