from app.repositories.base import BaseRepository
from app.repositories.user_repo import UserRepository, normalize_email
from app.repositories.movie_repo import MovieRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "MovieRepository",
    "normalize_email",
]
