"""
Image Preprocessing - Pillow clean-up before local OCR

Steps, in order:
- apply EXIF orientation
- downscale so the longest side is at most MAX_SIDE
- grayscale
- contrast boost
- light sharpening
"""
import logging

from PIL import Image, ImageEnhance, ImageFilter, ImageOps

logger = logging.getLogger(__name__)

MAX_SIDE = 2000
CONTRAST_FACTOR = 1.5


def preprocess_for_ocr(image: Image.Image, max_side: int = MAX_SIDE, contrast: float = CONTRAST_FACTOR) -> Image.Image:
    """Return a grayscale, contrast-enhanced copy of ``image``; the input is not modified."""
    img = ImageOps.exif_transpose(image)

    if max(img.size) > max_side:
        ratio = max_side / max(img.size)
        new_size = (max(1, int(img.size[0] * ratio)), max(1, int(img.size[1] * ratio)))
        logger.debug(f"Resizing image from {img.size} to {new_size}")
        img = img.resize(new_size, Image.Resampling.LANCZOS)

    img = img.convert("L")
    img = ImageEnhance.Contrast(img).enhance(contrast)
    return img.filter(ImageFilter.SHARPEN)
