# -*- coding: utf-8 -*-
"""User profile — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..auth.models import UserPublic


class ProfileResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    created_at: str


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=120)


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserPublic
