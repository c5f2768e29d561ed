"""
Local image storage for gallery folders.
Each gallery maps to <UPLOAD_DIR>/<folder>/originals and <UPLOAD_DIR>/<folder>/thumbnails.
Filesystem errors propagate to the caller; partial writes are not rolled back.
"""
import logging
import re
import shutil
import time
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from gallery_cms.config import settings
from gallery_cms.errors import ValidationError
from gallery_cms.utils.image_converter import (
    EXTENSION_FORMATS,
    FORMAT_EXTENSIONS,
    make_thumbnail,
    open_image,
)

logger = logging.getLogger(__name__)

ORIGINALS_DIR = "originals"
THUMBNAILS_DIR = "thumbnails"
THUMBNAIL_PREFIX = "thumb-"


def sanitize_name(value: str) -> str:
    """Lowercase and collapse every run of non-alphanumeric characters into one hyphen."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def image_url(folder_name: str, filename: str, kind: str = "original") -> str:
    """Public path of a stored file, served by the static mount in main.py."""
    subdir = THUMBNAILS_DIR if kind == "thumbnail" else ORIGINALS_DIR
    return f"/galleries/{folder_name}/{subdir}/{filename}"


class FileManager:
    """Stores originals and thumbnails for gallery folders under a root directory."""

    def __init__(self, root, thumbnail_width: int = 400):
        self.root = Path(root)
        self.thumbnail_width = thumbnail_width

    def gallery_path(self, folder_name: str) -> Path:
        if not folder_name or sanitize_name(folder_name) != folder_name:
            raise ValueError(f"Invalid gallery folder name: {folder_name!r}")
        return self.root / folder_name

    def ensure_gallery_folders(self, folder_name: str) -> Path:
        """Create the originals/thumbnails pair for a gallery. Safe to call repeatedly."""
        base = self.gallery_path(folder_name)
        (base / ORIGINALS_DIR).mkdir(parents=True, exist_ok=True)
        (base / THUMBNAILS_DIR).mkdir(parents=True, exist_ok=True)
        return base

    def save_image(self, image_bytes: bytes, original_name: str, folder_name: str) -> Tuple[str, str]:
        """
        Store an uploaded image and its thumbnail in a gallery folder.

        The image is decoded and the thumbnail rendered before anything touches the disk,
        so undecodable uploads leave no files behind.

        Args:
            image_bytes: Raw uploaded file content
            original_name: Client-side filename, used for the readable part of the new name
            folder_name: Gallery folder to write into

        Returns:
            Tuple[str, str]: (original filename, thumbnail filename)

        Raises:
            ValidationError: If the bytes are not a readable image or exceed the pixel limit
            OSError: If writing to the gallery folder fails
        """
        try:
            source_format = open_image(image_bytes).format
            ext = Path(original_name or "").suffix.lower()
            if ext not in EXTENSION_FORMATS:
                ext = FORMAT_EXTENSIONS.get(source_format, ".jpg")
            thumbnail_bytes = make_thumbnail(
                image_bytes,
                self.thumbnail_width,
                output_format=EXTENSION_FORMATS[ext],
            )
        except Image.DecompressionBombError as e:
            logger.warning(f"Rejected oversized image upload {original_name!r}: {str(e)}")
            raise ValidationError(
                "Uploaded image is too large",
                {"image": ["Image dimensions are too large to process"]},
            )
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Rejected unreadable image upload {original_name!r}: {str(e)}")
            raise ValidationError(
                "Uploaded file is not a readable image",
                {"image": ["Unsupported or corrupted image file"]},
            )

        base_name = sanitize_name(Path(original_name or "").stem) or "image"
        base = self.ensure_gallery_folders(folder_name)

        timestamp = int(time.time() * 1000)
        while True:
            filename = f"{timestamp}-{base_name}{ext}"
            thumbnail_filename = f"{THUMBNAIL_PREFIX}{filename}"
            thumbnail_path = base / THUMBNAILS_DIR / thumbnail_filename
            try:
                with open(base / ORIGINALS_DIR / filename, "xb") as f:
                    f.write(image_bytes)
            except FileExistsError:
                timestamp += 1
                continue
            if thumbnail_path.exists():
                # Leftover thumbnail from an interrupted upload; pick another name
                (base / ORIGINALS_DIR / filename).unlink()
                timestamp += 1
                continue
            break

        thumbnail_path.write_bytes(thumbnail_bytes)

        logger.info(
            f"Stored image {filename} ({len(image_bytes):,} bytes) "
            f"and thumbnail ({len(thumbnail_bytes):,} bytes) in {folder_name}"
        )
        return filename, thumbnail_filename

    def delete_image(self, folder_name: str, filename: str, thumbnail_filename: str) -> None:
        """Remove an original and its thumbnail. Missing files are ignored."""
        base = self.gallery_path(folder_name)
        (base / ORIGINALS_DIR / filename).unlink(missing_ok=True)
        (base / THUMBNAILS_DIR / thumbnail_filename).unlink(missing_ok=True)
        logger.info(f"Deleted image {filename} from {folder_name}")

    def move_image(self, filename: str, thumbnail_filename: str, from_folder: str, to_folder: str) -> None:
        """Relocate an original and its thumbnail to another gallery folder."""
        source = self.gallery_path(from_folder)
        target = self.ensure_gallery_folders(to_folder)

        for subdir, name in ((ORIGINALS_DIR, filename), (THUMBNAILS_DIR, thumbnail_filename)):
            src = source / subdir / name
            if src.exists():
                src.replace(target / subdir / name)

        logger.info(f"Moved image {filename} from {from_folder} to {to_folder}")

    def delete_gallery_folder(self, folder_name: str) -> None:
        base = self.gallery_path(folder_name)
        if base.exists():
            shutil.rmtree(base)
            logger.info(f"Deleted gallery folder {folder_name}")

    def folder_exists(self, folder_name: str) -> bool:
        return self.gallery_path(folder_name).exists()

    def image_exists(self, folder_name: str, filename: str, thumbnail_filename: str) -> bool:
        base = self.gallery_path(folder_name)
        return (base / ORIGINALS_DIR / filename).is_file() and (base / THUMBNAILS_DIR / thumbnail_filename).is_file()


# Default instance used by the API
file_manager = FileManager(settings.UPLOAD_DIR, settings.THUMBNAIL_WIDTH)


def get_file_manager() -> FileManager:
    """FastAPI dependency returning the configured file manager."""
    return file_manager
