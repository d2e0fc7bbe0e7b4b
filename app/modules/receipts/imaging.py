"""Receipt photo downscaling and data-URL parsing."""
import logging
import re
from io import BytesIO
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from app.config import settings
from app.core.errors import RequestValidationFailed

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
_DATA_URL_HEADER = re.compile(r"^data:([^;,]+)?(?:;[^,]*)?$")


def split_data_url(payload: str) -> Tuple[str, str]:
    """Split ``data:image/png;base64,AAAA`` into (mime_type, base64 data).

    A bare base64 string is returned as-is with the default JPEG mime type.
    """
    payload = (payload or "").strip()
    if "," not in payload:
        return DEFAULT_MIME_TYPE, payload
    header, data = payload.split(",", 1)
    match = _DATA_URL_HEADER.match(header)
    mime_type = match.group(1) if match and match.group(1) else DEFAULT_MIME_TYPE
    return mime_type, data


def scaled_size(width: int, height: int, max_dim: int) -> Tuple[int, int]:
    """Fit (width, height) inside a max_dim square, keeping the aspect ratio. Never upscales."""
    if width <= max_dim and height <= max_dim:
        return width, height
    if width > height:
        return max_dim, max(1, round(height * max_dim / width))
    return max(1, round(width * max_dim / height)), max_dim


def compress_image(content: bytes, max_dim: int = None, quality: int = None) -> bytes:
    """Downscale a photo so its longest side is at most max_dim and re-encode it as JPEG."""
    max_dim = max_dim or settings.image_max_dim
    quality = quality or settings.image_jpeg_quality
    try:
        img = Image.open(BytesIO(content))
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError) as e:
        raise RequestValidationFailed(f"Formato immagine non supportato: {e}")

    target = scaled_size(img.width, img.height, max_dim)
    if target != (img.width, img.height):
        img = img.resize(target, Image.LANCZOS)
    if img.mode != "RGB":
        img = img.convert("RGB")

    out = BytesIO()
    img.save(out, format="JPEG", quality=quality, optimize=True)
    data = out.getvalue()
    logger.debug("Compressed receipt image %d -> %d bytes (%dx%d)", len(content), len(data), *target)
    return data
