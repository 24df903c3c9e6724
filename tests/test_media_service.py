import pytest

from app.core.exceptions import InvalidUploadError
from app.schemas.media import AssetKind, AssetSlot, POSTER_SLOT, VIDEO_SLOT
from app.services.media_service import profile_slot
from app.utils.file_utils import generate_asset_reference, sanitize_filename

from tests.conftest import JPEG_BYTES, MP4_BYTES


async def put(storage, slot, reference, content=JPEG_BYTES):
    await storage.save(content, slot.path_for(reference))


async def test_replace_deletes_previous_asset(media, storage):
    slot = profile_slot()
    await put(storage, slot, "p1.jpg")
    await put(storage, slot, "p2.jpg")

    assert await media.replace(slot, "p1.jpg", "p2.jpg") is True

    assert not await storage.exists("profile/p1.jpg")
    assert await storage.exists("profile/p2.jpg")


async def test_placeholder_is_never_deleted(media, storage):
    slot = profile_slot()
    await put(storage, slot, slot.placeholder)
    await put(storage, slot, "p3.jpg")

    assert await media.replace(slot, slot.placeholder, "p3.jpg") is False
    assert await media.delete_all(slot, slot.placeholder) is False

    assert await storage.exists(f"profile/{slot.placeholder}")


async def test_replace_without_new_reference_is_a_noop(media, storage):
    slot = profile_slot()
    await put(storage, slot, "p1.jpg")

    assert await media.replace(slot, "p1.jpg", None) is False
    assert await media.replace(slot, "p1.jpg", "p1.jpg") is False
    assert await media.replace(slot, None, "p1.jpg") is False
    assert await storage.exists("profile/p1.jpg")


async def test_missing_old_file_is_not_an_error(media):
    assert await media.replace(POSTER_SLOT, "gone.jpg", "new.jpg") is False
    assert await media.delete_all(VIDEO_SLOT, "gone.mp4") is False


async def test_delete_all_removes_asset(media, storage):
    await put(storage, VIDEO_SLOT, "m1.mp4", MP4_BYTES)

    assert await media.delete_all(VIDEO_SLOT, "m1.mp4") is True
    assert not await storage.exists("videos/m1.mp4")


async def test_store_validates_content_kind(media, storage):
    reference = await media.store(POSTER_SLOT, JPEG_BYTES, "cover.jpg")
    assert reference.endswith("_cover.jpg")
    assert await storage.exists(f"posters/{reference}")

    with pytest.raises(InvalidUploadError):
        await media.store(POSTER_SLOT, MP4_BYTES, "cover.jpg")
    with pytest.raises(InvalidUploadError):
        await media.store(VIDEO_SLOT, b"just some text", "movie.mp4")
    with pytest.raises(InvalidUploadError):
        await media.store(POSTER_SLOT, b"", "empty.jpg")


async def test_discard_upload(media, storage):
    reference = await media.store(VIDEO_SLOT, MP4_BYTES, "clip.mp4")

    await media.discard_upload(VIDEO_SLOT, reference)
    await media.discard_upload(VIDEO_SLOT, None)

    assert not await storage.exists(f"videos/{reference}")


async def test_store_upload_without_file(media):
    assert await media.store_upload(POSTER_SLOT, None) is None


def test_asset_reference_format():
    reference = generate_asset_reference("../my photo.jpg")
    millis, name = reference.split("_", 1)

    assert millis.isdigit()
    assert name == "my_photo.jpg"
    assert sanitize_filename("") == "unnamed_file"


def test_slot_paths():
    slot = AssetSlot(folder="extras", kind=AssetKind.IMAGE)
    assert slot.path_for("a.png") == "extras/a.png"
    assert profile_slot().placeholder == "default.png"
