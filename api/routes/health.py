"""
Module 06 - Health Check Route

Liveness endpoint. Reports the configured record store backend so a
misconfigured deployment (memory store in production) is visible.
"""

from fastapi import APIRouter, Depends

from api import __version__
from api.deps import get_runtime_config
from api.models.responses import HealthResponse
from core.config.runtime import RuntimeConfig


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse, include_in_schema=False)
async def health_check(config: RuntimeConfig = Depends(get_runtime_config)) -> HealthResponse:
    return HealthResponse(
        ok=True,
        version=__version__,
        storage_backend=config.storage.backend,
    )
