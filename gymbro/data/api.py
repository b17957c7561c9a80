# -*- coding: utf-8 -*-
"""Remote data — sync endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth.security import get_current_user
from .models import DataTypePushRequest, DataTypeResponse, StatusResponse, SyncPullResponse, SyncPushRequest
from .storage import (
    delete_user_data,
    get_user_data,
    get_user_document,
    save_user_data,
    save_user_document,
    utc_now,
)

router = APIRouter(prefix="/api/data", tags=["Data"])


@router.get("/sync", response_model=SyncPullResponse, summary="Fetch the caller's full document")
def pull_document(user: dict = Depends(get_current_user)):
    return SyncPullResponse(data=get_user_document(user["id"]), timestamp=utc_now())


@router.post("/sync", response_model=StatusResponse, summary="Store the caller's full document")
def push_document(request: SyncPushRequest, user: dict = Depends(get_current_user)):
    if not isinstance(request.data, dict):
        raise HTTPException(status_code=400, detail="Invalid data format")
    save_user_document(user["id"], request.data)
    return StatusResponse(message="Data synced successfully", timestamp=utc_now())


@router.get("/{data_type}", response_model=DataTypeResponse, summary="Fetch one data type")
def get_data_type(data_type: str, user: dict = Depends(get_current_user)):
    data = get_user_data(user["id"], data_type)
    return DataTypeResponse(dataType=data_type, data=data if data is not None else {}, timestamp=utc_now())


@router.post("/{data_type}", response_model=StatusResponse, summary="Store one data type")
def save_data_type(data_type: str, request: DataTypePushRequest, user: dict = Depends(get_current_user)):
    save_user_data(user["id"], data_type, request.data)
    return StatusResponse(message=f"{data_type} data saved successfully", timestamp=utc_now())


@router.delete("/{data_type}", response_model=StatusResponse, summary="Delete one data type")
def delete_data_type(data_type: str, user: dict = Depends(get_current_user)):
    delete_user_data(user["id"], data_type)
    return StatusResponse(message=f"{data_type} data deleted successfully", timestamp=utc_now())
