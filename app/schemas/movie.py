"""
Movie Schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class MovieResponse(BaseModel):
    id: int
    title: str
    description: str
    category: str
    poster: Optional[str] = None
    video: Optional[str] = None
    average_rating: float = 0.0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
