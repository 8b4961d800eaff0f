"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from awv_server.routes.patients import router as patients_router
from awv_server.routes.reference import router as reference_router
from awv_server.routes.templates import router as templates_router
from awv_server.routes.visits import router as visits_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(templates_router, prefix=API_PREFIX)
    app.include_router(patients_router, prefix=API_PREFIX)
    app.include_router(visits_router, prefix=API_PREFIX)
    app.include_router(reference_router, prefix=API_PREFIX)
