"""Stay rules service - FastAPI application."""
from __future__ import annotations

import logging

from fastapi import FastAPI

from stayrules.api.router import api_router
from stayrules.core.config import get_settings
from stayrules.db.base import Base
from stayrules.db.session import engine

# Import models so Base.metadata has all tables before create_all
import stayrules.models  # noqa: F401

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("stayrules")

app = FastAPI(title=settings.app_name)
app.include_router(api_router, prefix=settings.api_prefix)


@app.on_event("startup")
def startup():
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        log.warning("Database startup failed (tables not created). Check DATABASE_URL. Error: %s", e)


@app.get("/health")
def health():
    return {"status": "healthy", "environment": settings.environment}
