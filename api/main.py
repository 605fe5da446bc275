"""
Authentication Key Console API - Main Application.

FastAPI application serving the operator console. Business state lives on the
remote admin service; this app orchestrates calls to it.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from repositories.client import close_admin_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_admin_client()


# Create FastAPI application
app = FastAPI(
    title="Authentication Key Console API",
    description="Back-office API for generating and distributing Authentication Keys",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# TODO: Restrict origins to the console host once it has a fixed domain
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "auth-key-console-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Authentication Key Console API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import accounts, auth_keys, plans  # noqa: E402

app.include_router(auth_keys.router, prefix="/api/v1", tags=["Authentication Keys"])
app.include_router(accounts.router, prefix="/api/v1", tags=["Accounts"])
app.include_router(plans.router, prefix="/api/v1", tags=["Plans"])
