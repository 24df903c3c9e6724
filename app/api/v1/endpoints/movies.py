"""
Movie Endpoints

Public catalog reads, admin-only writes.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from app.api.deps import get_current_admin, get_movie_service
from app.models import User
from app.schemas.auth import ErrorResponse, MessageResponse
from app.schemas.movie import MovieResponse
from app.services.movie_service import MovieService

router = APIRouter(tags=["Movies"])


@router.get("", response_model=List[MovieResponse])
async def list_movies(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    movie_service: MovieService = Depends(get_movie_service),
):
    """All movies, best rated first."""
    movies = await movie_service.list_movies(skip=skip, limit=limit)
    return [MovieResponse.model_validate(m) for m in movies]


@router.get(
    "/{movie_id}",
    response_model=MovieResponse,
    responses={404: {"model": ErrorResponse, "description": "Movie not found"}},
)
async def get_movie(
    movie_id: int,
    movie_service: MovieService = Depends(get_movie_service),
):
    return MovieResponse.model_validate(await movie_service.get_movie(movie_id))


@router.post(
    "",
    response_model=MovieResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Missing fields or bad upload"}},
)
async def create_movie(
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    poster: Optional[UploadFile] = File(None),
    video: Optional[UploadFile] = File(None),
    _: User = Depends(get_current_admin),
    movie_service: MovieService = Depends(get_movie_service),
):
    movie = await movie_service.create_movie(title, description, category, poster, video)
    return MovieResponse.model_validate(movie)


@router.put(
    "/{movie_id}",
    response_model=MovieResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or bad upload"},
        404: {"model": ErrorResponse, "description": "Movie not found"},
    },
)
async def update_movie(
    movie_id: int,
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    poster: Optional[UploadFile] = File(None),
    video: Optional[UploadFile] = File(None),
    _: User = Depends(get_current_admin),
    movie_service: MovieService = Depends(get_movie_service),
):
    """
    Edit a movie. Poster and video are replaced independently; a slot
    left empty keeps its current file.
    """
    movie = await movie_service.update_movie(movie_id, title, description, category, poster, video)
    return MovieResponse.model_validate(movie)


@router.delete(
    "/{movie_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Movie not found"}},
)
async def delete_movie(
    movie_id: int,
    _: User = Depends(get_current_admin),
    movie_service: MovieService = Depends(get_movie_service),
):
    """Delete a movie together with its poster and video files."""
    await movie_service.delete_movie(movie_id)
    return MessageResponse(message="Movie deleted")
