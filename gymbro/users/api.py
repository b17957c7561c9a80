# -*- coding: utf-8 -*-
"""User profile — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth.models import UserPublic
from ..auth.security import get_current_user
from ..auth.storage import update_user_name
from .models import ProfileResponse, ProfileUpdateRequest, ProfileUpdateResponse

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=ProfileResponse, summary="Get the caller's profile")
def get_profile(user: dict = Depends(get_current_user)):
    return ProfileResponse(
        id=user["id"],
        email=user["email"],
        name=user.get("name"),
        created_at=user["created_at"],
    )


@router.put("/profile", response_model=ProfileUpdateResponse, summary="Update the caller's display name")
def update_profile(request: ProfileUpdateRequest, user: dict = Depends(get_current_user)):
    row = user
    if request.name is not None:
        name = request.name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="Name cannot be empty")
        row = update_user_name(user["id"], name) or user
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserPublic(id=row["id"], email=row["email"], name=row.get("name")),
    )
