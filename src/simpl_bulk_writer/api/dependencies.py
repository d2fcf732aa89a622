"""Dependency providers for FastAPI routes."""

from functools import lru_cache

from simpl_bulk_writer.application.services import JobPlanningService
from simpl_bulk_writer.bootstrap import build_planning_service
from simpl_bulk_writer.config import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return singleton settings."""

    return Settings()


@lru_cache(maxsize=1)
def get_planning_service() -> JobPlanningService:
    """Return singleton service graph."""

    return build_planning_service(get_settings())


__all__ = ["get_planning_service", "get_settings"]
