from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

from .base import MalformedPayloadError, ProviderAuthError, ProviderClient

RECOMMENDATION_PROMPT = (
    "Generate 5 trending local recommendations based on location and preferences. "
    "Output as JSON array of objects with keys: recommendationId, title, description, venue_name, "
    "location (object with lat and lng), social_media_url, trend_score, vibe_tags (array), "
    "image_url, video_url, timestamp."
)


@dataclass(slots=True)
class OpenRouterClient(ProviderClient):
    """Chat completions through OpenRouter's OpenAI-compatible API."""

    model: str = "google/gemini-flash-1.5"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

    async def complete(self, system: str, user: str) -> str:
        if self.offline:
            raise ProviderAuthError("openrouter api key not configured")
        payload = await self._request(
            "POST",
            "/chat/completions",
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            },
        )
        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedPayloadError("completion without message content") from exc
        return content or ""

    async def generate_recommendations(self, location: str, preferences: Sequence[str]) -> str:
        return await self.complete(
            RECOMMENDATION_PROMPT,
            f"Location: {location}, Preferences: {', '.join(preferences)}",
        )
