"""Route modules public API."""

from simpl_bulk_writer.api.routes.health import router as health_router
from simpl_bulk_writer.api.routes.jobs import router as jobs_router

__all__ = ["health_router", "jobs_router"]
