"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cinegrok.app.api import pages
from cinegrok.app.api.v1 import analytics, auth, filmmakers, interests, profile_builder, storage
from cinegrok.app.core.config import settings
from cinegrok.app.core.logging_config import get_logger, setup_logging
from cinegrok.app.db.base import Base
from cinegrok.app.db.session import engine
from cinegrok.app.utils import cache

# Import models so they register with Base.metadata
import cinegrok.app.models  # noqa: F401

setup_logging()
logger = get_logger("main")

# Create database tables
try:
    Base.metadata.create_all(bind=engine)
except Exception as e:
    logger.error("Database error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await cache.connect()
    yield
    await cache.close()


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Filmmaker portfolio and discovery API",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(filmmakers.router, prefix="/api/v1", tags=["filmmakers"])
app.include_router(profile_builder.router, prefix="/api/v1/profile-builder", tags=["profile-builder"])
app.include_router(interests.router, prefix="/api/interested-profiles", tags=["interests"])
app.include_router(
    interests.collaboration_router, prefix="/api/v1/collaboration-interests", tags=["interests"]
)
app.include_router(analytics.router, prefix="/api/v1/analytics", tags=["analytics"])
app.include_router(storage.router, prefix="/api/storage", tags=["storage"])
app.include_router(pages.router)


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": settings.app_name, "version": settings.app_version}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
