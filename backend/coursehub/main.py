"""CourseHub — FastAPI Application Entry Point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError

import coursehub.models  # noqa: F401  (registers every table on Base.metadata)
from coursehub.config import settings
from coursehub.database import engine, Base, SessionLocal
from coursehub.middleware.rate_limit import limiter
from coursehub.routers import auth, courses, enrollments, admin
from coursehub.services.identity_service import ensure_default_admin

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("coursehub")

# ── CORS origins from env ────────────────────────────────────────────────────
_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app = FastAPI(
    title="CourseHub",
    description="Online course marketplace: catalog approval, enrollment progress, certificates and reviews.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """A uniqueness race lost at the storage layer."""
    logger.warning("Constraint violation on %s: %s", request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflicting write, please retry."})


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(courses.router)
app.include_router(enrollments.router)
app.include_router(admin.router)


@app.on_event("startup")
def on_startup():
    """Create tables and seed the default admin account."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()
    logger.info("CourseHub started (database: %s)", engine.url.render_as_string(hide_password=True))


@app.get("/")
def root():
    return {
        "name": "CourseHub API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "ok"}
