from app.core.config import settings
from app.models import Movie

from tests.conftest import JPEG_BYTES, MP4_BYTES, auth_headers

API = settings.API_V1_PREFIX

MOVIE_FORM = {"title": "Heat", "description": "LA crime saga", "category": "Crime"}


async def create_movie(client, admin, **files):
    response = await client.post(
        f"{API}/movies",
        data=MOVIE_FORM,
        files=files or None,
        headers=auth_headers(admin),
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_admin_creates_movie_with_assets(client, admin, storage):
    movie = await create_movie(
        client, admin,
        poster=("heat.jpg", JPEG_BYTES, "image/jpeg"),
        video=("heat.mp4", MP4_BYTES, "video/mp4"),
    )

    assert movie["title"] == "Heat"
    assert await storage.exists(f"posters/{movie['poster']}")
    assert await storage.exists(f"videos/{movie['video']}")


async def test_create_requires_admin(client, user):
    response = await client.post(
        f"{API}/movies", data=MOVIE_FORM, headers=auth_headers(user)
    )
    assert response.status_code == 403


async def test_create_rejects_wrong_kind_and_cleans_up(client, admin, storage):
    response = await client.post(
        f"{API}/movies",
        data=MOVIE_FORM,
        files={
            "poster": ("heat.jpg", JPEG_BYTES, "image/jpeg"),
            "video": ("heat.mp4", JPEG_BYTES, "video/mp4"),
        },
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_upload"
    assert list((storage.base_path / "posters").iterdir()) == []


async def test_create_missing_fields(client, admin):
    response = await client.post(
        f"{API}/movies", data={"title": "Heat"}, headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "missing_fields"


async def test_list_is_ordered_by_rating(client, db_session):
    db_session.add_all([
        Movie(title="Low", description="d", category="c", average_rating=2.0),
        Movie(title="High", description="d", category="c", average_rating=4.5),
    ])
    await db_session.commit()

    response = await client.get(f"{API}/movies")

    assert response.status_code == 200
    assert [m["title"] for m in response.json()] == ["High", "Low"]


async def test_get_unknown_movie(client):
    response = await client.get(f"{API}/movies/404")
    assert response.status_code == 404


async def test_update_replaces_only_uploaded_slot(client, admin, storage):
    movie = await create_movie(
        client, admin,
        poster=("p1.jpg", JPEG_BYTES, "image/jpeg"),
        video=("m1.mp4", MP4_BYTES, "video/mp4"),
    )

    response = await client.put(
        f"{API}/movies/{movie['id']}",
        data={**MOVIE_FORM, "title": "Heat (1995)"},
        files={"poster": ("p2.jpg", JPEG_BYTES, "image/jpeg")},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Heat (1995)"
    assert updated["video"] == movie["video"]
    assert updated["poster"] != movie["poster"]
    assert not await storage.exists(f"posters/{movie['poster']}")
    assert await storage.exists(f"posters/{updated['poster']}")
    assert await storage.exists(f"videos/{movie['video']}")


async def test_update_unknown_movie_discards_upload(client, admin, storage):
    response = await client.put(
        f"{API}/movies/999",
        data=MOVIE_FORM,
        files={"poster": ("p2.jpg", JPEG_BYTES, "image/jpeg")},
        headers=auth_headers(admin),
    )

    assert response.status_code == 404
    assert list((storage.base_path / "posters").iterdir()) == []


async def test_delete_removes_assets(client, admin, storage):
    movie = await create_movie(
        client, admin,
        poster=("p1.jpg", JPEG_BYTES, "image/jpeg"),
        video=("m1.mp4", MP4_BYTES, "video/mp4"),
    )

    response = await client.delete(f"{API}/movies/{movie['id']}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert not await storage.exists(f"posters/{movie['poster']}")
    assert not await storage.exists(f"videos/{movie['video']}")
    assert (await client.get(f"{API}/movies/{movie['id']}")).status_code == 404
