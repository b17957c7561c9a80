# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from .models import AuthResponse, LoginRequest, RegisterRequest, UserPublic, VerifyResponse
from .security import create_access_token, get_current_user, hash_password, verify_password
from .storage import create_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _user_public(row: dict) -> UserPublic:
    return UserPublic(id=row["id"], email=row["email"], name=row.get("name"))


@router.post("/register", response_model=AuthResponse, status_code=201, summary="Register a new user")
def register(request: RegisterRequest):
    if get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="User already exists")

    name = (request.name or "").strip() or None
    user = create_user(email=request.email, password_hash=hash_password(request.password), name=name)
    logger.info("Registered user %s", user["id"])

    token = create_access_token(user_id=user["id"], email=user["email"])
    return AuthResponse(message="User created successfully", token=token, user=_user_public(user))


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest):
    user = get_user_by_email(request.email)
    if not user or not verify_password(request.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user_id=user["id"], email=user["email"])
    return AuthResponse(message="Login successful", token=token, user=_user_public(user))


@router.get("/verify", response_model=VerifyResponse, summary="Check that a bearer token is still valid")
def verify(user: dict = Depends(get_current_user)):
    return VerifyResponse(valid=True, user=_user_public(user))
