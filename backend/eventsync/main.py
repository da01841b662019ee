"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventsync.assistant.model_client import build_model_client
from eventsync.config import settings
from eventsync.database import Base, engine

# Import routers
from eventsync.routers import assistant, events, invitations, search, users

# Import all models so Base.metadata knows about them
from eventsync.models.user import User                # noqa: F401
from eventsync.models.event import Event              # noqa: F401
from eventsync.models.invitation import Invitation    # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="EventSync",
    description="Event scheduling with invitations, RSVP tracking and a natural-language assistant",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(invitations.router, prefix="/api/events", tags=["Invitations"])
app.include_router(search.router, prefix="/api/search", tags=["Search"])
app.include_router(assistant.router, prefix="/api/assistant", tags=["Assistant"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every error response has the shape {"error": <detail>}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.on_event("startup")
def on_startup():
    """Create tables (SQLite dev mode) and build the model client once per process."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    app.state.model_client = build_model_client(settings)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
