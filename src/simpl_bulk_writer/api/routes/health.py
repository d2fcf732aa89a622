"""Service status route."""

from fastapi import APIRouter, Request

from simpl_bulk_writer import __version__
from simpl_bulk_writer.bootstrap import MEMORY_SCHEME, S3_SCHEME

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    """Report liveness together with the version and the supported file system schemes."""

    settings = request.app.state.settings
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": __version__,
        "fileSystems": [S3_SCHEME, MEMORY_SCHEME],
    }


__all__ = ["router"]
