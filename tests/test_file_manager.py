"""
Tests for local image storage.
"""
import pytest
from PIL import Image

from gallery_cms.errors import ValidationError
from gallery_cms.services.file_manager import (
    FileManager,
    image_url,
    sanitize_name,
)
from tests.helpers import image_size, make_image_bytes, stored_files


@pytest.fixture
def manager(tmp_path):
    return FileManager(tmp_path / "galleries", thumbnail_width=400)


class TestSanitizeName:
    """Slug-style names used for folders and stored filenames."""

    def test_collapses_punctuation_and_spaces(self):
        assert sanitize_name("Rebellion I (Final)") == "rebellion-i-final"

    def test_strips_edge_hyphens(self):
        assert sanitize_name("--Studies--") == "studies"

    def test_non_latin_only_becomes_empty(self):
        assert sanitize_name("لوحة") == ""


class TestSaveImage:
    def test_writes_one_original_and_one_thumbnail(self, manager, tmp_path):
        filename, thumbnail = manager.save_image(make_image_bytes(), "Rebellion I.JPG", "studies")

        assert filename.endswith("-rebellion-i.jpg")
        assert thumbnail == f"thumb-{filename}"
        root = tmp_path / "galleries"
        assert stored_files("studies", "originals", root) == [filename]
        assert stored_files("studies", "thumbnails", root) == [thumbnail]

    def test_original_bytes_are_kept_verbatim(self, manager, tmp_path):
        data = make_image_bytes(1200, 900)
        filename, _ = manager.save_image(data, "big.jpg", "studies")

        assert (tmp_path / "galleries" / "studies" / "originals" / filename).read_bytes() == data

    def test_thumbnail_is_resized_proportionally(self, manager, tmp_path):
        _, thumbnail = manager.save_image(make_image_bytes(1200, 900), "big.jpg", "studies")

        data = (tmp_path / "galleries" / "studies" / "thumbnails" / thumbnail).read_bytes()
        assert image_size(data) == (400, 300)

    def test_small_images_are_not_upscaled(self, manager, tmp_path):
        _, thumbnail = manager.save_image(make_image_bytes(120, 80, fmt="PNG"), "tiny.png", "studies")

        data = (tmp_path / "galleries" / "studies" / "thumbnails" / thumbnail).read_bytes()
        assert image_size(data) == (120, 80)

    def test_missing_extension_uses_detected_format(self, manager):
        filename, _ = manager.save_image(make_image_bytes(fmt="PNG"), "scan", "studies")
        assert filename.endswith("-scan.png")

    def test_unusable_name_falls_back_to_image(self, manager):
        filename, _ = manager.save_image(make_image_bytes(), "لوحة.jpg", "studies")
        assert filename.endswith("-image.jpg")

    def test_same_name_twice_gets_distinct_files(self, manager, tmp_path):
        first, _ = manager.save_image(make_image_bytes(), "a.jpg", "studies")
        second, _ = manager.save_image(make_image_bytes(), "a.jpg", "studies")

        assert first != second
        assert len(stored_files("studies", "originals", tmp_path / "galleries")) == 2

    def test_rejects_bytes_that_are_not_an_image(self, manager, tmp_path):
        with pytest.raises(ValidationError) as exc_info:
            manager.save_image(b"definitely not a jpeg", "a.jpg", "studies")

        assert "image" in exc_info.value.errors
        assert stored_files("studies", "originals", tmp_path / "galleries") == []

    def test_rejects_images_over_the_pixel_limit(self, manager, tmp_path, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        with pytest.raises(ValidationError) as exc_info:
            manager.save_image(make_image_bytes(100, 100, fmt="PNG"), "huge.png", "studies")

        assert "image" in exc_info.value.errors
        assert stored_files("studies", "originals", tmp_path / "galleries") == []

    def test_cmyk_jpeg_named_as_png_gets_a_png_thumbnail(self, manager, tmp_path):
        data = make_image_bytes(600, 300, fmt="JPEG", mode="CMYK")
        filename, thumbnail = manager.save_image(data, "scan.png", "studies")

        assert filename.endswith("-scan.png")
        stored = Image.open(tmp_path / "galleries" / "studies" / "thumbnails" / thumbnail)
        assert stored.format == "PNG"
        assert stored.mode == "RGB"
        assert stored.size == (400, 200)

    def test_rejects_unsanitized_folder_names(self, manager):
        with pytest.raises(ValueError):
            manager.save_image(make_image_bytes(), "a.jpg", "../outside")


class TestDeleteAndMove:
    def test_delete_ignores_missing_files(self, manager):
        manager.ensure_gallery_folders("studies")
        manager.delete_image("studies", "nope.jpg", "thumb-nope.jpg")

    def test_delete_removes_both_files(self, manager):
        filename, thumbnail = manager.save_image(make_image_bytes(), "a.jpg", "studies")
        manager.delete_image("studies", filename, thumbnail)

        assert not manager.image_exists("studies", filename, thumbnail)

    def test_move_relocates_both_files(self, manager):
        filename, thumbnail = manager.save_image(make_image_bytes(), "a.jpg", "studies")
        manager.move_image(filename, thumbnail, "studies", "portraits")

        assert manager.image_exists("portraits", filename, thumbnail)
        assert not manager.image_exists("studies", filename, thumbnail)

    def test_delete_gallery_folder(self, manager):
        manager.save_image(make_image_bytes(), "a.jpg", "studies")
        manager.delete_gallery_folder("studies")

        assert not manager.folder_exists("studies")


def test_image_url_layout():
    assert image_url("main", "1-a.jpg") == "/galleries/main/originals/1-a.jpg"
    assert image_url("main", "thumb-1-a.jpg", "thumbnail") == "/galleries/main/thumbnails/thumb-1-a.jpg"
