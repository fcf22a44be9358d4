from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, List

from . import fixtures
from .base import MalformedPayloadError, ProviderClient


def _data(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


@dataclass(slots=True)
class SocialKitClient(ProviderClient):
    """Video analysis: summaries, sentiment, keywords and engagement."""

    def _auth_headers(self) -> Dict[str, str]:
        return {"x-access-key": self.api_key} if self.api_key else {}

    async def _video(self, endpoint: str, video_url: str) -> Any:
        return _data(await self._request("GET", f"/video/{endpoint}", params={"url": video_url}))

    async def get_video_summary(self, video_url: str) -> Dict[str, Any]:
        if self.offline:
            return dict(fixtures.VIDEO_SUMMARY)
        data = await self._video("summary", video_url)
        if not isinstance(data, dict) or not isinstance(data.get("summary"), str):
            raise MalformedPayloadError("summary payload missing 'summary'")
        return data

    async def analyze_video_sentiment(self, video_url: str) -> Dict[str, float]:
        if self.offline:
            return dict(fixtures.VIDEO_SENTIMENT)
        data = await self._video("sentiment", video_url)
        if not isinstance(data, dict):
            raise MalformedPayloadError("sentiment payload is not an object")
        try:
            return {key: float(data.get(key) or 0.0) for key in ("positive", "neutral", "negative")}
        except (TypeError, ValueError) as exc:
            raise MalformedPayloadError("sentiment values are not numeric") from exc

    async def extract_keywords(self, video_url: str) -> List[str]:
        if self.offline:
            return list(fixtures.VIDEO_KEYWORDS)
        data = await self._video("keywords", video_url)
        if isinstance(data, dict):
            data = data.get("keywords")
        if not isinstance(data, list):
            raise MalformedPayloadError("keywords payload is not a list")
        return [str(word) for word in data if word]

    async def get_engagement_metrics(self, video_url: str) -> Dict[str, Any]:
        if self.offline:
            return copy.deepcopy(fixtures.VIDEO_ENGAGEMENT)
        data = await self._video("stats", video_url)
        if not isinstance(data, dict):
            raise MalformedPayloadError("stats payload is not an object")
        return data
