"""Frota & Transfer - fleet rental and transfer request tracker API"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from frota.core.config import get_settings
from frota.core.logging import configure_logging, logger
from frota.routers import dashboard, requests, workspace


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Frota API starting",
        version="0.1.0",
        state_path=settings.state_path,
        llm_model=settings.llm_model,
        analysis_configured=settings.resolved_api_key() is not None,
    )
    yield
    logger.info("Frota API shutting down")


app = FastAPI(
    title="Frota & Transfer API",
    description="Single-operator tracker for vehicle rental and transfer requests",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(requests.router)
app.include_router(workspace.router)
app.include_router(dashboard.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Frota & Transfer API",
        "version": "0.1.0",
        "description": "Gestor Operacional de Frota & Transfer",
        "endpoints": {
            "requests": "/requests",
            "workspace": "/workspace",
            "dashboard": "/dashboard",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
