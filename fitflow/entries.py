# fitflow/entries.py
"""
Document-style store for the six tracked kinds (activities, diets, hobbies,
mood, water, sleep).

Each entry is one row in `entries`: the owning user, the kind, the calendar
day it belongs to and the remaining fields as a JSON document. Payloads are
validated with the kind's pydantic model on create and again after a partial
update, so a stored document always matches its model.
"""
import json
import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from fitflow.db import connect
from fitflow.models import ENTRY_MODELS
from fitflow.timefmt import date_input_value, parse_navigation_date

logger = logging.getLogger(__name__)

# Fields the store owns; never taken from a payload.
RESERVED_FIELDS = {"id", "user_id", "kind", "created_at", "updated_at"}


def now_iso() -> str:
    return datetime.utcnow().isoformat()


def _model_for(kind: str):
    model = ENTRY_MODELS.get(kind)
    if model is None:
        raise ValueError(f"unknown entry kind: {kind}")
    return model


def _validate(kind: str, payload: Dict[str, Any]):
    model = _model_for(kind)
    clean = {k: v for k, v in payload.items() if k not in RESERVED_FIELDS}
    try:
        return model.model_validate(clean)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValueError(errors)


def _row_to_entry(r) -> Dict[str, Any]:
    return {
        "id": r["id"],
        "user_id": r["user_id"],
        "entry_date": r["entry_date"],
        **json.loads(r["data"] or "{}"),
        "created_at": r["created_at"],
        "updated_at": r["updated_at"],
    }


def _day(value: Union[str, date]) -> str:
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        value = date.fromisoformat(str(value)[:10])
    return date_input_value(value)


def create_entry(uid: str, kind: str, payload: Dict[str, Any]) -> str:
    entry = _validate(kind, payload)
    data = entry.model_dump(mode="json", exclude={"entry_date"})
    entry_id = uuid.uuid4().hex
    ts = now_iso()

    with connect() as conn:
        conn.execute(
            """
            INSERT INTO entries (id, user_id, kind, entry_date, data, created_at, updated_at)
            VALUES (?,?,?,?,?,?,?)
            """,
            (entry_id, uid, kind, entry.entry_date.isoformat(), json.dumps(data), ts, ts),
        )
    logger.debug("created %s entry %s", kind, entry_id)
    return entry_id


def get_entry(uid: str, kind: str, entry_id: str) -> Optional[Dict[str, Any]]:
    _model_for(kind)
    with connect() as conn:
        r = conn.execute(
            "SELECT * FROM entries WHERE id = ? AND user_id = ? AND kind = ?",
            (entry_id, uid, kind),
        ).fetchone()
    return _row_to_entry(r) if r else None


def list_entries_for_day(uid: str, kind: str, day: Union[str, date]) -> List[Dict[str, Any]]:
    """Entries logged on one calendar day, newest first."""
    _model_for(kind)
    with connect() as conn:
        rows = conn.execute(
            """
            SELECT * FROM entries
            WHERE user_id = ? AND kind = ? AND entry_date = ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (uid, kind, _day(day)),
        ).fetchall()
    return [_row_to_entry(r) for r in rows]


def list_entries_range(
    uid: str, kind: str, start: Union[str, date], end: Union[str, date]
) -> List[Dict[str, Any]]:
    """Entries between two days inclusive, oldest first (chart order)."""
    _model_for(kind)
    start_day, end_day = _day(start), _day(end)
    if start_day > end_day:
        raise ValueError("start must not be after end")

    with connect() as conn:
        rows = conn.execute(
            """
            SELECT * FROM entries
            WHERE user_id = ? AND kind = ? AND entry_date BETWEEN ? AND ?
            ORDER BY entry_date ASC, created_at ASC, rowid ASC
            """,
            (uid, kind, start_day, end_day),
        ).fetchall()
    return [_row_to_entry(r) for r in rows]


def update_entry(
    uid: str, kind: str, entry_id: str, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    current = get_entry(uid, kind, entry_id)
    if current is None:
        return None

    merged = {**current, **updates}
    entry = _validate(kind, merged)
    data = entry.model_dump(mode="json", exclude={"entry_date"})

    with connect() as conn:
        conn.execute(
            """
            UPDATE entries SET entry_date = ?, data = ?, updated_at = ?
            WHERE id = ? AND user_id = ? AND kind = ?
            """,
            (entry.entry_date.isoformat(), json.dumps(data), now_iso(), entry_id, uid, kind),
        )
    return get_entry(uid, kind, entry_id)


def delete_entry(uid: str, kind: str, entry_id: str) -> bool:
    _model_for(kind)
    with connect() as conn:
        cur = conn.execute(
            "DELETE FROM entries WHERE id = ? AND user_id = ? AND kind = ?",
            (entry_id, uid, kind),
        )
        deleted = cur.rowcount > 0
    return deleted


def resolve_selected_date(raw: Optional[str] = None, refresh: bool = False) -> date:
    """
    The day a list view shows. A refresh always jumps back to today; otherwise
    the date handed over from the previous view wins, and with none given the
    list shows today.
    """
    if refresh or not raw:
        return date.today()
    return parse_navigation_date(raw)
