# -*- coding: utf-8 -*-
"""Remote data — Pydantic models."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class SyncPushRequest(BaseModel):
    data: Any = Field(..., description="Full AppData document; each top-level key is stored separately")


class DataTypePushRequest(BaseModel):
    data: Any = Field(..., description="Value stored for a single data type")


class SyncPullResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
    timestamp: str


class DataTypeResponse(BaseModel):
    success: bool = True
    dataType: str
    data: Any
    timestamp: str


class StatusResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str
