import pytest

from app.storage import FileNotFoundError as StorageFileNotFoundError
from app.storage import StorageError


async def test_save_get_delete(storage):
    stored = await storage.save(b"poster bytes", "posters/1_a.jpg", "image/jpeg")

    assert stored.size == 12
    assert stored.content_type == "image/jpeg"
    assert await storage.get("posters/1_a.jpg") == b"poster bytes"

    assert await storage.delete("posters/1_a.jpg") is True
    assert await storage.delete("posters/1_a.jpg") is False
    assert not await storage.exists("posters/1_a.jpg")


async def test_get_missing_file(storage):
    with pytest.raises(StorageFileNotFoundError):
        await storage.get("videos/nothing.mp4")


async def test_paths_cannot_escape_root(storage):
    with pytest.raises(StorageError):
        await storage.save(b"x", "../../etc/evil")
    with pytest.raises(StorageError):
        await storage.delete("../outside.jpg")
    assert await storage.exists("../outside.jpg") is False
