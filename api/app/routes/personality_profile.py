# api/app/routes/personality_profile.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.app.dependencies import get_session
from api.app.schemas.personality_profile import PersonalityProfileResponse, PersonalityProfileUpdate
from services.profile_service import get_or_create_profile, update_profile

router = APIRouter(tags=["personality-profile"])


@router.get("/personality-profile", response_model=PersonalityProfileResponse)
async def get_personality_profile(db: AsyncSession = Depends(get_session)):
    profile = await get_or_create_profile(db)
    return PersonalityProfileResponse.model_validate(profile)


@router.patch("/personality-profile", response_model=PersonalityProfileResponse)
async def update_personality_profile(
    body: PersonalityProfileUpdate,
    db: AsyncSession = Depends(get_session),
):
    profile = await update_profile(db, **body.model_dump(exclude_unset=True))
    return PersonalityProfileResponse.model_validate(profile)
