"""Shared helpers for building test images and inspecting stored files."""
import io
from pathlib import Path

from PIL import Image

from gallery_cms.config import settings

ADMIN_PASSWORD = "brushstrokes42"


def make_image_bytes(
    width: int = 800, height: int = 600, fmt: str = "JPEG", color=(180, 60, 40), mode: str = None
) -> bytes:
    """Encode a solid-colour test image (RGBA for PNG, RGB otherwise unless a mode is given)."""
    mode = mode or ("RGBA" if fmt == "PNG" else "RGB")
    fill = color + (255,) if len(mode) == 4 else color
    buffer = io.BytesIO()
    Image.new(mode, (width, height), fill).save(buffer, format=fmt)
    return buffer.getvalue()


def image_size(data: bytes):
    return Image.open(io.BytesIO(data)).size


def stored_files(folder_name: str, subdir: str, root=None):
    """Names of the files currently stored in a gallery subfolder."""
    path = Path(root or settings.UPLOAD_DIR) / folder_name / subdir
    if not path.exists():
        return []
    return sorted(p.name for p in path.iterdir())
