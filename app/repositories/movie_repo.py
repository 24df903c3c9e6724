"""
Movie Repository

Data access layer for Movie model.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.repositories.base import BaseRepository
from app.models import Movie


class MovieRepository(BaseRepository[Movie]):
    """Repository for Movie model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Movie, db)

    async def list_by_rating(self, skip: int = 0, limit: int = 100) -> List[Movie]:
        """Get movies, best rated first."""
        result = await self.db.execute(
            select(Movie)
            .order_by(Movie.average_rating.desc(), Movie.id.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())
