from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator

from .recommend import InteractionKind, _CamelModel, dedupe_tags

Tier = Literal["free", "premium"]


class UserProfile(_CamelModel):
    id: str
    email: str
    preferences: List[str] = []
    onboarding_complete: bool = False
    subscription_tier: Tier = "free"
    subscription_expires_at: Optional[str] = None
    is_premium: bool = False


class PreferencesUpdate(_CamelModel):
    preferences: List[str] = Field(default_factory=list)

    @field_validator("preferences")
    @classmethod
    def _clean(cls, value: List[str]) -> List[str]:
        return dedupe_tags(value)


class SaveRecommendationRequest(_CamelModel):
    recommendation_id: str = Field(..., min_length=1)


class SaveRecommendationResponse(_CamelModel):
    saved: bool


class InteractionRequest(_CamelModel):
    recommendation_id: str = Field(..., min_length=1)
    kind: InteractionKind
    vibe_tags: List[str] = Field(default_factory=list)


class SubscriptionTiersResponse(_CamelModel):
    features: Dict[str, List[str]]
    pricing: Dict[str, int]
