"""
Image utilities for decoding uploads and generating thumbnails.
Thumbnails keep the aspect ratio of the original and are never upscaled.
"""
import io
import logging
from typing import Optional
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 85  # Balance between quality and file size (0-100)

# Pillow format name -> file extension used when an upload has no extension
FORMAT_EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "WEBP": ".webp",
    "GIF": ".gif",
}

# File extension -> Pillow format name used when saving a thumbnail
EXTENSION_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
    ".gif": "GIF",
}

# Modes the non-JPEG thumbnail formats accept as-is
WRITABLE_MODES = ("1", "L", "LA", "P", "RGB", "RGBA")


def open_image(image_bytes: bytes) -> Image.Image:
    """
    Decode image bytes and fully load the pixel data.

    Raises:
        UnidentifiedImageError: If the bytes are not a supported image
        OSError: If the image is truncated or otherwise unreadable
    """
    image = Image.open(io.BytesIO(image_bytes))
    image.load()
    return image


def make_thumbnail(
    image_bytes: bytes,
    width: int,
    output_format: Optional[str] = None,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> bytes:
    """
    Resize an image to the given width with proportional height.

    Args:
        image_bytes: Original image file bytes
        width: Target width in pixels; smaller images keep their size
        output_format: Pillow format name (defaults to the source format)
        quality: Encoder quality for lossy formats

    Returns:
        bytes: Encoded thumbnail
    """
    image = open_image(image_bytes)
    source_format = image.format or "JPEG"
    target_format = output_format or source_format

    # Apply camera orientation so portrait photos stay portrait
    image = ImageOps.exif_transpose(image)

    src_width, src_height = image.size
    if src_width > width:
        new_height = max(1, round(src_height * (width / src_width)))
        logger.debug(f"Resizing thumbnail from {src_width}x{src_height} to {width}x{new_height}")
        image = image.resize((width, new_height), Image.Resampling.LANCZOS)

    # JPEG has no alpha channel or palette
    if target_format == "JPEG":
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
    elif image.mode not in WRITABLE_MODES:
        # CMYK, LAB, etc. cannot be written as PNG/WebP/GIF
        logger.debug(f"Converting {image.mode} image to RGB for {target_format} thumbnail")
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    save_kwargs = {"format": target_format}
    if target_format in ("JPEG", "WEBP"):
        save_kwargs["quality"] = quality

    buffer = io.BytesIO()
    image.save(buffer, **save_kwargs)
    return buffer.getvalue()
