"""
Movie Service

Catalog CRUD. Posters and videos are two independent asset slots.
Each one follows the same store / commit / collect sequence as
profile pictures.
"""

import logging
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import MissingFieldsError, MovieNotFoundError
from app.models import Movie
from app.repositories.movie_repo import MovieRepository
from app.schemas.media import POSTER_SLOT, VIDEO_SLOT
from app.services.media_service import MediaService

logger = logging.getLogger(__name__)


def _require(*values: Optional[str]) -> None:
    if not all(v and v.strip() for v in values):
        raise MissingFieldsError()


class MovieService:
    """Business logic for the movie catalog."""

    def __init__(self, db: AsyncSession, media: Optional[MediaService] = None):
        self.db = db
        self.movie_repo = MovieRepository(db)
        self.media = media or MediaService()

    async def list_movies(self, skip: int = 0, limit: int = 100) -> List[Movie]:
        return await self.movie_repo.list_by_rating(skip=skip, limit=limit)

    async def get_movie(self, movie_id: int) -> Movie:
        movie = await self.movie_repo.get_by_id(movie_id)
        if movie is None:
            raise MovieNotFoundError()
        return movie

    # ============================================================
    # Create
    # ============================================================
    async def create_movie(
        self,
        title: str,
        description: str,
        category: str,
        poster: Optional[UploadFile] = None,
        video: Optional[UploadFile] = None,
    ) -> Movie:
        _require(title, description, category)

        new_poster = await self.media.store_upload(POSTER_SLOT, poster)
        try:
            new_video = await self.media.store_upload(VIDEO_SLOT, video)
        except Exception:
            await self.media.discard_upload(POSTER_SLOT, new_poster)
            raise

        try:
            movie = await self.movie_repo.create(
                title=title.strip(),
                description=description.strip(),
                category=category.strip(),
                poster=new_poster,
                video=new_video,
            )
        except Exception:
            await self.db.rollback()
            await self.media.discard_upload(POSTER_SLOT, new_poster)
            await self.media.discard_upload(VIDEO_SLOT, new_video)
            raise

        logger.info(f"Movie created: {movie.title} (id={movie.id})")
        return movie

    # ============================================================
    # Update
    # ============================================================
    async def update_movie(
        self,
        movie_id: int,
        title: str,
        description: str,
        category: str,
        poster: Optional[UploadFile] = None,
        video: Optional[UploadFile] = None,
    ) -> Movie:
        _require(title, description, category)

        new_poster = await self.media.store_upload(POSTER_SLOT, poster)
        try:
            new_video = await self.media.store_upload(VIDEO_SLOT, video)
        except Exception:
            await self.media.discard_upload(POSTER_SLOT, new_poster)
            raise

        try:
            movie = await self.movie_repo.get_by_id_for_update(movie_id)
            if movie is None:
                raise MovieNotFoundError()

            previous_poster, previous_video = movie.poster, movie.video

            movie.title = title.strip()
            movie.description = description.strip()
            movie.category = category.strip()
            if new_poster:
                movie.poster = new_poster
            if new_video:
                movie.video = new_video

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await self.media.discard_upload(POSTER_SLOT, new_poster)
            await self.media.discard_upload(VIDEO_SLOT, new_video)
            raise

        await self.media.replace(POSTER_SLOT, previous_poster, new_poster)
        await self.media.replace(VIDEO_SLOT, previous_video, new_video)
        await self.db.refresh(movie)

        logger.info(f"Movie {movie_id} updated")
        return movie

    # ============================================================
    # Delete
    # ============================================================
    async def delete_movie(self, movie_id: int) -> None:
        movie = await self.movie_repo.get_by_id_for_update(movie_id)
        if movie is None:
            raise MovieNotFoundError()

        poster, video = movie.poster, movie.video
        await self.db.delete(movie)
        await self.db.commit()

        await self.media.delete_all(POSTER_SLOT, poster)
        await self.media.delete_all(VIDEO_SLOT, video)
        logger.info(f"Movie {movie_id} deleted")
