import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tenantgate.core import database
from tenantgate.core.settings import settings
from tenantgate.domains.auth.routes import router as auth_router
from tenantgate.domains.modules.routes import router as modules_router
from tenantgate.domains.organizations.routes import admin_router as org_admin_router
from tenantgate.domains.organizations.routes import router as organizations_router
from tenantgate.domains.partners.routes import router as partners_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    logging.basicConfig(level=settings.LOG_LEVEL)
    await database.connect()
    yield
    # Shutdown
    await database.disconnect()


app = FastAPI(
    title="tenantgate API",
    description="Session, permission and organization context API for the dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(modules_router, prefix="/api/v1")
app.include_router(org_admin_router, prefix="/api/v1")
app.include_router(organizations_router, prefix="/api/v1")
app.include_router(partners_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "tenantgate API is running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}
