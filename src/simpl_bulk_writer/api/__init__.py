"""HTTP API public surface."""

from simpl_bulk_writer.api.router import api_router

__all__ = ["api_router"]
