from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.security import verify_service_token
from ...db.repository import VenueRepository
from ...schemas.recommend import VenueSummary
from ..deps import get_venue_repository

router = APIRouter(prefix="/v1/venues", tags=["venues"], dependencies=[Depends(verify_service_token)])


@router.get("", response_model=List[VenueSummary])
async def list_venues(
    q: Optional[str] = Query(None, min_length=1, description="Matches venue name or address"),
    category: Optional[str] = Query(None, min_length=1),
    limit: int = Query(20, ge=1, le=100),
    venues: VenueRepository = Depends(get_venue_repository),
) -> List[VenueSummary]:
    if q:
        return await venues.search(q, limit=limit)
    if category:
        return await venues.by_category(category, limit=limit)
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="either q or category is required")


@router.get("/{venue_id}", response_model=VenueSummary)
async def get_venue(venue_id: str, venues: VenueRepository = Depends(get_venue_repository)) -> VenueSummary:
    venue = await venues.get(venue_id)
    if venue is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"unknown venue {venue_id}")
    return venue
