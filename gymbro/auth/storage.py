# -*- coding: utf-8 -*-
"""Auth — user rows in the sync backend database."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _fetch_user(where: str, params: Sequence[Any]) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(f"SELECT * FROM users WHERE {where}", tuple(params)).fetchone()
    return dict(row) if row else None


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    return _fetch_user("email = ?", (normalize_email(email),))


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    return _fetch_user("id = ?", (user_id,))


def create_user(*, email: str, password_hash: str, name: Optional[str] = None) -> Dict[str, Any]:
    now = _timestamp()
    user = {
        "id": str(uuid4()),
        "email": normalize_email(email),
        "password_hash": password_hash,
        "name": name,
        "created_at": now,
        "updated_at": now,
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "INSERT INTO users (id, email, password_hash, name, created_at, updated_at)"
            " VALUES (:id, :email, :password_hash, :name, :created_at, :updated_at)",
            user,
        )
    return user


def update_user_name(user_id: str, name: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        updated = conn.execute(
            "UPDATE users SET name = ?, updated_at = ? WHERE id = ?",
            (name, _timestamp(), user_id),
        ).rowcount
    if not updated:
        logger.warning("Profile update for unknown user %s", user_id)
        return None
    return get_user_by_id(user_id)
