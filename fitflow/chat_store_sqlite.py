# fitflow/chat_store_sqlite.py
import json
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fitflow.db import connect
from fitflow.prompts import GREETING

TITLE_LEN = 30
DEFAULT_TITLE = "New Chat"


def now_ts() -> str:
    return datetime.utcnow().isoformat() + "Z"


def new_message(sender: str, text: str) -> Dict[str, Any]:
    if sender not in ("user", "ai"):
        raise ValueError("sender must be 'user' or 'ai'")
    return {"id": uuid.uuid4().hex, "text": text, "sender": sender, "timestamp": now_ts()}


def greeting_messages(greeting: str = GREETING) -> List[Dict[str, Any]]:
    return [new_message("ai", greeting)]


def title_from_messages(messages: List[Dict[str, Any]]) -> str:
    """First user message, cut to the title length."""
    for m in messages:
        if m.get("sender") == "user" and (m.get("text") or "").strip():
            return m["text"].strip()[:TITLE_LEN]
    return DEFAULT_TITLE


def _row_to_chat(r) -> Dict[str, Any]:
    return {
        "id": r["id"],
        "user_id": r["user_id"],
        "title": r["title"] or DEFAULT_TITLE,
        "messages": json.loads(r["messages"] or "[]"),
        "created_at": r["created_at"],
        "updated_at": r["updated_at"],
    }


def create_chat(uid: str, messages: List[Dict[str, Any]]) -> str:
    chat_id = uuid.uuid4().hex
    ts = now_ts()
    with connect() as conn:
        conn.execute(
            """
            INSERT INTO chat_histories (id, user_id, title, messages, created_at, updated_at)
            VALUES (?,?,?,?,?,?)
            """,
            (chat_id, uid, title_from_messages(messages), json.dumps(messages), ts, ts),
        )
    return chat_id


def update_chat(uid: str, chat_id: str, messages: List[Dict[str, Any]]) -> bool:
    with connect() as conn:
        cur = conn.execute(
            """
            UPDATE chat_histories SET title = ?, messages = ?, updated_at = ?
            WHERE id = ? AND user_id = ?
            """,
            (title_from_messages(messages), json.dumps(messages), now_ts(), chat_id, uid),
        )
        updated = cur.rowcount > 0
    return updated


def get_chat(uid: str, chat_id: str) -> Optional[Dict[str, Any]]:
    with connect() as conn:
        r = conn.execute(
            "SELECT * FROM chat_histories WHERE id = ? AND user_id = ?",
            (chat_id, uid),
        ).fetchone()
    return _row_to_chat(r) if r else None


def list_chats(uid: str, limit: int = 50) -> List[Dict[str, Any]]:
    with connect() as conn:
        rows = conn.execute(
            """
            SELECT * FROM chat_histories
            WHERE user_id = ?
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (uid, limit),
        ).fetchall()

    out: List[Dict[str, Any]] = []
    for r in rows:
        chat = _row_to_chat(r)
        last = chat["messages"][-1]["text"] if chat["messages"] else ""
        out.append(
            {
                "id": chat["id"],
                "title": chat["title"],
                "last": last[:80],
                "count": len(chat["messages"]),
                "messages": chat["messages"],
                "created_at": chat["created_at"],
                "updated_at": chat["updated_at"],
            }
        )
    return out
