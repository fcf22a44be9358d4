from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from ..core.config import Settings
from .ensemble import EnsembleDataClient
from .google_maps import GoogleMapsClient
from .openrouter import OpenRouterClient
from .socialkit import SocialKitClient


@dataclass(slots=True)
class ProviderSet:
    ensemble: EnsembleDataClient
    maps: GoogleMapsClient
    socialkit: SocialKitClient
    ai: Optional[OpenRouterClient] = None

    def offline_names(self) -> List[str]:
        clients = [self.ensemble, self.maps, self.socialkit, self.ai]
        return [client.provider_name for client in clients if client is not None and client.offline]

    async def close(self) -> None:
        clients = [self.ensemble, self.maps, self.socialkit, self.ai]
        await asyncio.gather(*(client.close() for client in clients if client is not None))


def build_providers(settings: Settings) -> ProviderSet:
    timeout = settings.adapter_timeout_seconds
    return ProviderSet(
        ensemble=EnsembleDataClient(
            api_key=settings.ensemble_data_api_key,
            base_url=settings.ensemble_data_base_url,
            timeout=timeout,
        ),
        maps=GoogleMapsClient(
            api_key=settings.google_maps_api_key,
            base_url=settings.google_maps_base_url,
            timeout=timeout,
        ),
        socialkit=SocialKitClient(
            api_key=settings.social_kit_api_key,
            base_url=settings.social_kit_base_url,
            timeout=timeout,
        ),
        ai=OpenRouterClient(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            timeout=timeout,
            model=settings.openrouter_model,
        ),
    )
