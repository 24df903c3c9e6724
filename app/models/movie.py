"""
Movie Model

Catalog entry with two asset slots: a poster image and a video file.
"""

from sqlalchemy import Column, String, Text, Float
from .base import BaseModel


class Movie(BaseModel):
    __tablename__ = "movies"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    poster = Column(String(255), nullable=True)
    video = Column(String(255), nullable=True)
    # Maintained by the ratings feature, read-only here
    average_rating = Column(Float, nullable=False, default=0.0, server_default="0")
