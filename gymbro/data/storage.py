# -*- coding: utf-8 -*-
"""Remote data — one row per (user, data_type), JSON-encoded."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..app_db import db_conn
from ..config import settings

logger = logging.getLogger(__name__)

_UPSERT_SQL = """
    INSERT INTO user_data (user_id, data_type, data, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT(user_id, data_type) DO UPDATE SET
        data = excluded.data,
        updated_at = excluded.updated_at
"""


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def save_user_data(user_id: str, data_type: str, data: Any) -> None:
    now = utc_now()
    with db_conn(settings.app_db_path) as conn:
        conn.execute(_UPSERT_SQL, (user_id, data_type, json.dumps(data, ensure_ascii=False), now, now))


def save_user_document(user_id: str, document: Mapping[str, Any]) -> int:
    """Upsert every top-level key of ``document``; returns how many rows were written."""
    now = utc_now()
    rows = [
        (user_id, data_type, json.dumps(value, ensure_ascii=False), now, now)
        for data_type, value in document.items()
    ]
    with db_conn(settings.app_db_path) as conn:
        conn.executemany(_UPSERT_SQL, rows)
    logger.info("Stored %d data types for user %s", len(rows), user_id)
    return len(rows)


def _decode(raw: str, user_id: str, data_type: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Skipping corrupt %s row for user %s", data_type, user_id)
        return None


def get_user_data(user_id: str, data_type: str) -> Optional[Any]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT data FROM user_data WHERE user_id = ? AND data_type = ?",
            (user_id, data_type),
        ).fetchone()
    if not row:
        return None
    return _decode(row["data"], user_id, data_type)


def get_user_document(user_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT data_type, data FROM user_data WHERE user_id = ? ORDER BY data_type",
            (user_id,),
        ).fetchall()
    document: Dict[str, Any] = {}
    for row in rows:
        document[row["data_type"]] = _decode(row["data"], user_id, row["data_type"])
    return document


def delete_user_data(user_id: str, data_type: str) -> int:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            "DELETE FROM user_data WHERE user_id = ? AND data_type = ?",
            (user_id, data_type),
        )
        return cur.rowcount
