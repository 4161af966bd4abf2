# fitflow/users.py
import logging
import shutil
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from fitflow.bmi import calculate_bmi
from fitflow.db import connect
from fitflow import storage

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "uid",
    "email",
    "display_name",
    "photo_url",
    "weight",
    "height",
    "bmi",
    "sleep_goal",
    "water_goal",
    "locale",
    "created_at",
    "updated_at",
    "last_login_at",
)

UPDATABLE_FIELDS = (
    "display_name",
    "photo_url",
    "weight",
    "height",
    "sleep_goal",
    "water_goal",
    "locale",
)


def now_iso() -> str:
    return datetime.utcnow().isoformat()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _profile_from_row(r) -> Dict[str, Any]:
    return {k: r[k] for k in PROFILE_FIELDS}


def create_user(email: str, password_hash: str, display_name: str = "") -> Dict[str, Any]:
    email = normalize_email(email)
    if "@" not in email:
        raise ValueError("a valid email is required")
    if get_user_by_email(email):
        raise ValueError("email already registered")

    uid = uuid.uuid4().hex
    ts = now_iso()
    try:
        with connect() as conn:
            conn.execute(
                """
                INSERT INTO users (
                  uid, email, password_hash, display_name, photo_url,
                  weight, height, bmi, sleep_goal, water_goal,
                  created_at, updated_at, last_login_at
                ) VALUES (?,?,?,?,'',0,0,0,8,2,?,?,?)
                """,
                (uid, email, password_hash, (display_name or "").strip() or "User", ts, ts, ts),
            )
    except sqlite3.IntegrityError:
        # lost a race with another registration for the same email
        raise ValueError("email already registered")
    return get_profile(uid)


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """Profile plus password hash, for credential checks only."""
    with connect() as conn:
        r = conn.execute(
            "SELECT * FROM users WHERE email = ?", (normalize_email(email),)
        ).fetchone()
    if not r:
        return None
    user = _profile_from_row(r)
    user["password_hash"] = r["password_hash"]
    return user


def get_profile(uid: str) -> Optional[Dict[str, Any]]:
    with connect() as conn:
        r = conn.execute("SELECT * FROM users WHERE uid = ?", (uid,)).fetchone()
    return _profile_from_row(r) if r else None


def update_profile(uid: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Partial update. BMI is derived: it is recomputed from the resulting weight
    and height whenever either of them is part of the update.
    """
    current = get_profile(uid)
    if not current:
        return None

    changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}
    if "weight" in changes or "height" in changes:
        changes["bmi"] = calculate_bmi(
            changes.get("weight", current["weight"]),
            changes.get("height", current["height"]),
        )
    if not changes:
        return current

    changes["updated_at"] = now_iso()
    assignments = ", ".join(f"{k} = ?" for k in changes)
    with connect() as conn:
        conn.execute(
            f"UPDATE users SET {assignments} WHERE uid = ?",
            (*changes.values(), uid),
        )
    return get_profile(uid)


def set_password_hash(uid: str, password_hash: str):
    with connect() as conn:
        conn.execute(
            "UPDATE users SET password_hash = ?, updated_at = ? WHERE uid = ?",
            (password_hash, now_iso(), uid),
        )


def touch_login(uid: str):
    with connect() as conn:
        conn.execute("UPDATE users SET last_login_at = ? WHERE uid = ?", (now_iso(), uid))


def delete_account(uid: str) -> bool:
    """Removes the user's entries, chats and uploaded images, then the user."""
    if not get_profile(uid):
        return False

    with connect() as conn:
        conn.execute("DELETE FROM entries WHERE user_id = ?", (uid,))
        conn.execute("DELETE FROM chat_histories WHERE user_id = ?", (uid,))
        conn.execute("DELETE FROM users WHERE uid = ?", (uid,))

    image_dir = storage.user_image_dir(uid)
    if image_dir.exists():
        shutil.rmtree(image_dir, ignore_errors=True)

    logger.info("deleted account %s", uid)
    return True
