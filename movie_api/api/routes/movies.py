"""Movie Routes — CRUD over the movies table, mounted under /api.

Invariants:
    - Write bodies come from parse_body, so JSON and nested form bodies behave the same
    - Empty write body -> MissingBodyError; invalid fields -> RequestValidationError (400)
    - Unknown movie id -> ResourceNotFoundError (404)
    - Success envelope is always {"success": true, "data": ...}

Design Decisions:
    - Schema validation runs inside the handler (not as a typed body param)
      because the payload may arrive form-encoded
    - get_movie_or_404 shared by read, update and delete
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.api.body_parsing import parse_body
from movie_api.core.errors import MissingBodyError, ResourceNotFoundError
from movie_api.infrastructure.database import get_db
from movie_api.models.movie import Movie
from movie_api.schemas.movie import MovieResponse, MovieWrite

logger = logging.getLogger(__name__)
router = APIRouter(tags=["movies"])


def validate_movie(payload: Any) -> MovieWrite:
    """Validate a parsed body as a movie, mapping failures to a 400."""
    if not payload:
        raise MissingBodyError("Movie")
    try:
        return MovieWrite.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()],
        )


def serialize(movie: Movie) -> dict:
    return MovieResponse.model_validate(movie).model_dump(mode="json")


async def get_movie_or_404(movie_id: UUID, db: AsyncSession) -> Movie:
    result = await db.execute(select(Movie).where(Movie.id == movie_id))
    movie = result.scalar_one_or_none()
    if not movie:
        raise ResourceNotFoundError("Movie", str(movie_id))
    return movie


@router.post("/movie", status_code=status.HTTP_201_CREATED)
async def create_movie(
    payload: Any = Depends(parse_body), db: AsyncSession = Depends(get_db),
):
    """Create a movie."""
    body = validate_movie(payload)
    movie = Movie(name=body.name, time=body.time, rating=body.rating)
    db.add(movie)
    await db.commit()
    await db.refresh(movie)
    logger.info("Movie created", extra={"movie_id": str(movie.id)})
    return {"success": True, "data": serialize(movie), "message": "Movie created"}


@router.put("/movie/{movie_id}")
async def update_movie(
    movie_id: UUID,
    payload: Any = Depends(parse_body),
    db: AsyncSession = Depends(get_db),
):
    """Replace a movie's fields."""
    body = validate_movie(payload)
    movie = await get_movie_or_404(movie_id, db)
    movie.name = body.name
    movie.time = body.time
    movie.rating = body.rating
    movie.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(movie)
    logger.info("Movie updated", extra={"movie_id": str(movie_id)})
    return {"success": True, "data": serialize(movie), "message": "Movie updated"}


@router.delete("/movie/{movie_id}")
async def delete_movie(movie_id: UUID, db: AsyncSession = Depends(get_db)):
    """Delete a movie, returning what was removed."""
    movie = await get_movie_or_404(movie_id, db)
    data = serialize(movie)
    await db.delete(movie)
    await db.commit()
    logger.info("Movie deleted", extra={"movie_id": str(movie_id)})
    return {"success": True, "data": data}


@router.get("/movie/{movie_id}")
async def get_movie(movie_id: UUID, db: AsyncSession = Depends(get_db)):
    movie = await get_movie_or_404(movie_id, db)
    return {"success": True, "data": serialize(movie)}


@router.get("/movies")
async def list_movies(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List movies, newest first."""
    result = await db.execute(
        select(Movie)
        .order_by(Movie.created_at.desc())
        .limit(limit)
        .offset(offset),
    )
    movies = result.scalars().all()
    return {
        "success": True,
        "data": [serialize(m) for m in movies],
        "pagination": {"limit": limit, "offset": offset},
    }
