from __future__ import annotations

from fastapi import APIRouter, Depends

from ...providers.registry import ProviderSet
from ...schemas.recommend import HealthResponse
from ...services.fallback import FALLBACK_VERSION
from ..deps import get_providers

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def get_health(providers: ProviderSet = Depends(get_providers)) -> HealthResponse:
    return HealthResponse(ok=True, fallback_version=FALLBACK_VERSION, offline_providers=providers.offline_names())
