"""Main FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from visitation import __version__
from visitation.api import appointments, endpoints, ministers, patients, reports
from visitation.api.dependencies import SESSION_HEADER
from visitation.exceptions import ConstraintError, NotFoundError, PermissionDeniedError, PersistenceError
from visitation.services.demo_data import seed_demo_data
from visitation.services.registry import get_services
from visitation.utils.logging import LogConfig, get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Seed demo data on startup when asked to, close the backend client on shutdown."""
    services = get_services()
    setup_logging(LogConfig(level=services.settings.log_level))
    if services.settings.seeds_demo_data:
        await seed_demo_data(services.patients, services.ministers)
    elif services.settings.seed_demo:
        logger.warning(f"Not seeding demo data into the {services.settings.backend} backend")
    yield
    await services.client.aclose()


app = FastAPI(
    title="Pastoral Visitation Records",
    description=(
        "Record keeping for a visitation ministry: patients, the ministers who visit them "
        "and the visits scheduled between them."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Log in and out. Every other route except health requires a login."},
        {"name": "Patients", "description": "Visit recipients."},
        {"name": "Ministers", "description": "Minister accounts. Requires the manage_ministers permission."},
        {"name": "Appointments", "description": "Scheduled visits."},
        {"name": "Reports", "description": "Patient lists for printing."},
        {"name": "Health", "description": "Service health monitoring and status checks."},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[SESSION_HEADER],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(ConstraintError)
async def constraint_handler(request: Request, exc: ConstraintError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=502, content={"detail": "The records service is unavailable, please try again"})


app.include_router(endpoints.router)
app.include_router(patients.router)
app.include_router(ministers.router)
app.include_router(appointments.router)
app.include_router(reports.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("visitation.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
