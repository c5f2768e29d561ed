"""
Tests for painting management and the files behind each painting.
"""
from unittest.mock import patch

import pytest

from gallery_cms.errors import NotFoundError, ValidationError
from gallery_cms.services.gallery_service import GalleryService
from gallery_cms.services.painting_service import PaintingService
from tests.helpers import make_image_bytes, stored_files

pytestmark = pytest.mark.anyio


@pytest.fixture
def service(db, files):
    return PaintingService(db, files)


@pytest.fixture
async def studies(db, files, main_gallery):
    return await GalleryService(db, files).create(name="Studies", slug="studies")


async def _add(service, gallery, title, name="a.jpg", **fields):
    return await service.create(
        gallery_id=gallery.id,
        title=title,
        image=make_image_bytes(),
        image_name=name,
        **fields,
    )


class TestCreate:
    async def test_requires_an_image(self, service, main_gallery):
        with pytest.raises(ValidationError) as exc_info:
            await service.create(gallery_id=main_gallery.id, title="Blank", image=None)

        assert "image" in exc_info.value.errors
        assert stored_files("main", "originals") == []

    async def test_writes_one_original_and_one_thumbnail(self, service, main_gallery):
        painting = await _add(service, main_gallery, "Rebellion I", technique="Impasto")

        assert stored_files("main", "originals") == [painting.image_filename]
        assert stored_files("main", "thumbnails") == [painting.thumbnail_filename]
        assert painting.technique == "Impasto"
        assert painting.is_visible is True
        assert painting.image_url == f"/galleries/main/originals/{painting.image_filename}"

    async def test_appends_to_the_end_of_its_gallery(self, service, main_gallery, studies):
        first = await _add(service, main_gallery, "One")
        other = await _add(service, studies, "Elsewhere")
        second = await _add(service, main_gallery, "Two")

        assert (first.display_order, second.display_order) == (0, 1)
        assert other.display_order == 0

    async def test_unknown_gallery_writes_nothing(self, service, main_gallery):
        with pytest.raises(NotFoundError):
            await service.create(gallery_id=999, title="Lost", image=make_image_bytes())
        assert stored_files("main", "originals") == []

    async def test_failed_insert_removes_new_files(self, service, main_gallery):
        with patch.object(service.db, "commit", side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                await _add(service, main_gallery, "Doomed")

        assert stored_files("main", "originals") == []
        assert stored_files("main", "thumbnails") == []


class TestUpdate:
    async def test_replacing_image_deletes_old_files_after_success(self, service, main_gallery):
        painting = await _add(service, main_gallery, "Rebellion I", name="old.jpg")
        old_files = (painting.image_filename, painting.thumbnail_filename)

        updated = await service.update(painting.id, image=make_image_bytes(color=(10, 10, 200)), image_name="new.jpg")

        assert updated.image_filename != old_files[0]
        assert stored_files("main", "originals") == [updated.image_filename]
        assert stored_files("main", "thumbnails") == [updated.thumbnail_filename]

    async def test_failed_replacement_keeps_old_files(self, service, main_gallery):
        painting = await _add(service, main_gallery, "Rebellion I", name="old.jpg")
        old_original = painting.image_filename

        with patch.object(service.db, "commit", side_effect=RuntimeError("db gone")):
            with pytest.raises(RuntimeError):
                await service.update(painting.id, image=make_image_bytes(), image_name="new.jpg")

        assert stored_files("main", "originals") == [old_original]

    async def test_metadata_only_update(self, service, main_gallery):
        painting = await _add(service, main_gallery, "Draft", medium="Acrylic")

        updated = await service.update(painting.id, title="Final", dimensions="50x70 cm")

        assert updated.title == "Final"
        assert updated.dimensions == "50x70 cm"
        assert updated.medium == "Acrylic"
        assert updated.image_filename == painting.image_filename

    async def test_empty_text_clears_optional_field(self, service, main_gallery):
        painting = await _add(service, main_gallery, "Draft", medium="Acrylic")

        updated = await service.update(painting.id, medium="  ")
        assert updated.medium is None

    async def test_gallery_change_moves_files(self, service, main_gallery, studies):
        painting = await _add(service, main_gallery, "Traveller")

        moved = await service.update(painting.id, gallery_id=studies.id)

        assert moved.gallery_id == studies.id
        assert moved.image_url.startswith("/galleries/studies/originals/")
        assert stored_files("main", "originals") == []
        assert stored_files("studies", "originals") == [painting.image_filename]

    async def test_failed_gallery_change_moves_files_back(self, service, main_gallery, studies):
        painting = await _add(service, main_gallery, "Traveller")
        files = (painting.image_filename, painting.thumbnail_filename)
        painting_id, home_id = painting.id, main_gallery.id

        with patch.object(service.db, "commit", side_effect=RuntimeError("db gone")):
            with pytest.raises(RuntimeError):
                await service.update(painting_id, gallery_id=studies.id)

        assert stored_files("main", "originals") == [files[0]]
        assert stored_files("main", "thumbnails") == [files[1]]
        assert stored_files("studies", "originals") == []
        assert stored_files("studies", "thumbnails") == []
        assert (await service.get_by_id(painting_id)).gallery_id == home_id


class TestMoveAndDelete:
    async def test_move_appends_and_compacts_source(self, service, main_gallery, studies):
        a = await _add(service, main_gallery, "A")
        b = await _add(service, main_gallery, "B")
        c = await _add(service, main_gallery, "C")
        resident = await _add(service, studies, "Resident")

        moved = await service.move(a.id, studies.id)

        assert moved.display_order == 1
        assert [(p.id, p.display_order) for p in await service.list(main_gallery.id)] == [(b.id, 0), (c.id, 1)]
        assert [p.id for p in await service.list(studies.id)] == [resident.id, a.id]

    async def test_move_to_unknown_gallery(self, service, main_gallery):
        painting = await _add(service, main_gallery, "A")
        with pytest.raises(NotFoundError):
            await service.move(painting.id, 999)
        assert stored_files("main", "originals") == [painting.image_filename]

    async def test_delete_removes_files_and_closes_gap(self, service, main_gallery):
        a = await _add(service, main_gallery, "A")
        b = await _add(service, main_gallery, "B")

        await service.delete(a.id)

        assert stored_files("main", "originals") == [b.image_filename]
        assert [(p.id, p.display_order) for p in await service.list(main_gallery.id)] == [(b.id, 0)]
        with pytest.raises(NotFoundError):
            await service.get_by_id(a.id)


class TestVisibilityAndReorder:
    async def test_toggling_twice_restores_state(self, service, main_gallery):
        painting = await _add(service, main_gallery, "Blink")

        assert (await service.toggle_visibility(painting.id)).is_visible is False
        assert (await service.toggle_visibility(painting.id)).is_visible is True

    async def test_reorder_within_gallery(self, service, main_gallery):
        a = await _add(service, main_gallery, "A")
        b = await _add(service, main_gallery, "B")
        c = await _add(service, main_gallery, "C")

        result = await service.reorder([c.id, a.id, b.id])

        assert [(p.id, p.display_order) for p in result] == [(c.id, 0), (a.id, 1), (b.id, 2)]

    async def test_reorder_across_galleries_is_rejected(self, service, main_gallery, studies):
        a = await _add(service, main_gallery, "A")
        b = await _add(service, studies, "B")

        with pytest.raises(ValidationError):
            await service.reorder([a.id, b.id])

    async def test_reorder_unknown_painting(self, service, main_gallery):
        a = await _add(service, main_gallery, "A")
        with pytest.raises(NotFoundError):
            await service.reorder([a.id, 999])
