"""ORM Models — SQLAlchemy declarative models for all domain entities.

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before
      create_all or alembic autogenerate runs
"""

from movie_api.models.movie import Movie  # noqa: F401
