"""
Image Utilities - Load image sources and encode them for providers

Accepted sources: PIL images, numpy arrays, raw bytes, filesystem paths,
file:// and http(s):// URIs, and data: URIs.
"""
import io
import base64
import logging
from pathlib import Path
from typing import Any, Union
from urllib.parse import urlparse, unquote

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from .errors import ImageLoadError

logger = logging.getLogger(__name__)

JPEG_QUALITY = 90
DOWNLOAD_TIMEOUT = 30


def _read_source_bytes(source: Union[str, Path]) -> bytes:
    if isinstance(source, Path):
        return source.read_bytes()

    if source.startswith("data:"):
        try:
            header, payload = source.split(",", 1)
        except ValueError:
            raise ImageLoadError("Malformed data URI")
        if ";base64" in header:
            return base64.b64decode(payload)
        return unquote(payload).encode("latin-1")

    parsed = urlparse(source)
    if parsed.scheme in ("http", "https"):
        resp = requests.get(source, timeout=DOWNLOAD_TIMEOUT)
        resp.raise_for_status()
        return resp.content
    if parsed.scheme == "file":
        return Path(unquote(parsed.path)).read_bytes()
    return Path(source).read_bytes()


def load_image(source: Any) -> Image.Image:
    """Load any supported image source into a PIL image."""
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, np.ndarray):
        array = source
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        return Image.fromarray(array)

    try:
        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
        elif isinstance(source, (str, Path)):
            data = _read_source_bytes(source)
        else:
            raise ImageLoadError(f"Unsupported image source type: {type(source).__name__}")
        image = Image.open(io.BytesIO(data))
        image.load()
        return image
    except (OSError, UnidentifiedImageError, requests.RequestException, ValueError) as e:
        if isinstance(e, ImageLoadError):
            raise
        raise ImageLoadError(f"Could not load image: {e}") from e


def encode_image_base64(source: Any, quality: int = JPEG_QUALITY) -> str:
    """Encode an image source as base64 JPEG, the format the cloud providers expect."""
    image = load_image(source)
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    logger.debug(f"Encoded image {image.size[0]}x{image.size[1]} as {len(encoded)} base64 chars")
    return encoded
