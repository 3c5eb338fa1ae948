from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doypal.db import get_db
from doypal.models.profile import Profile
from doypal.schemas.profile import ProfileCreate, ProfileOut, ProfileUpdate


router = APIRouter(prefix="/api/profiles", tags=["profiles"])


def _serialize(profile: Profile) -> dict:
    return ProfileOut.model_validate(profile).model_dump(mode="json")


@router.get("")
def list_profiles(db: Session = Depends(get_db)):
    profiles = Profile.active(db).order_by(Profile.created_at.asc(), Profile.name.asc()).all()
    return {"profiles": [_serialize(p) for p in profiles]}


@router.post("", status_code=201)
def create_profile(payload: ProfileCreate, db: Session = Depends(get_db)):
    if not payload.name or not payload.name.strip():
        raise HTTPException(status_code=400, detail="Profile name is required")

    profile = Profile(
        name=payload.name.strip(),
        avatar_url=payload.avatar_url or None,
        is_active=True,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return {"profile": _serialize(profile)}


@router.get("/{profile_id}")
def get_profile(profile_id: UUID, db: Session = Depends(get_db)):
    profile = Profile.active(db).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"profile": _serialize(profile)}


@router.patch("/{profile_id}")
def update_profile(profile_id: UUID, payload: ProfileUpdate, db: Session = Depends(get_db)):
    data = payload.model_dump(exclude_unset=True)

    updates = {}
    if "name" in data:
        if not data["name"] or not data["name"].strip():
            raise HTTPException(status_code=400, detail="Profile name cannot be empty")
        updates["name"] = data["name"].strip()
    if "avatar_url" in data:
        updates["avatar_url"] = data["avatar_url"]

    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    profile = Profile.active(db).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    for k, v in updates.items():
        setattr(profile, k, v)

    db.commit()
    db.refresh(profile)
    return {"profile": _serialize(profile)}


@router.delete("/{profile_id}")
def delete_profile(profile_id: UUID, db: Session = Depends(get_db)):
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    profile.is_active = False
    db.commit()
    db.refresh(profile)
    return {"message": "Profile deleted successfully", "profile": _serialize(profile)}
