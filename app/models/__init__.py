from app.models.base import Base
from app.models.user import User, ROLE_USER, ROLE_ADMIN
from app.models.movie import Movie

__all__ = [
    "Base",
    "User",
    "ROLE_USER",
    "ROLE_ADMIN",
    "Movie",
]
