# main.py
from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, File, Header, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Load .env for local dev
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("fitflow")

from fitflow import auth, brain, entries, insights, storage, users
from fitflow.auth import AuthError, current_user_id
from fitflow.bmi import bmi_category
from fitflow.chat_store_sqlite import (
    create_chat,
    get_chat,
    greeting_messages,
    list_chats,
    new_message,
    update_chat,
)
from fitflow.context import build_user_data, calendar_day, daily_goals
from fitflow.db import ping
from fitflow.localization import SUPPORTED_LOCALES, resolve_locale
from fitflow.models import (
    ENTRY_LABELS,
    ChatSend,
    EntryKind,
    LoginPayload,
    PasswordResetConfirmPayload,
    PasswordResetPayload,
    ProfileUpdate,
    RegisterPayload,
    init_db,
)
from fitflow.prompts import GREETING, GREETING_NO_DATA, PROCESSING_ERROR
from fitflow.timefmt import parse_navigation_date

# -------------------------
# App
# -------------------------
ENV = os.getenv("ENV", "development").strip().lower()
app = FastAPI(title="FitFlow Backend")

# -------------------------
# CORS
# -------------------------
cors_raw = (os.getenv("CORS_ORIGINS") or "").strip()
if cors_raw:
    allow_origins = [o.strip().rstrip("/") for o in cors_raw.split(",") if o.strip()]
else:
    allow_origins = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded profile images, served read-only
storage.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount(storage.UPLOAD_URL_PREFIX, StaticFiles(directory=str(storage.UPLOAD_DIR)), name="profile-images")


# -------------------------
# Helpers
# -------------------------
def label_for(kind: str) -> str:
    return ENTRY_LABELS.get(kind, kind)


def require_profile(uid: str) -> Dict[str, Any]:
    profile = users.get_profile(uid)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


def parse_day(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="date must be YYYY-MM-DD")


# -------------------------
# Startup
# -------------------------
@app.on_event("startup")
def _startup():
    init_db()
    logger.info("FitFlow backend started (env=%s)", ENV)


# -------------------------
# Health
# -------------------------
@app.get("/health")
def health():
    return {"ok": True}


@app.get("/health/full")
def full_health():
    try:
        ping()
        return {"ok": True, "db": "ok", "ai": brain.is_configured()}
    except Exception as e:
        logger.exception("health check failed")
        return {"ok": False, "error": str(e)}


@app.get("/")
def root():
    return {"ok": True, "status": "FitFlow backend is running"}


# -------------------------
# Auth
# -------------------------
@app.post("/auth/register")
def register(payload: RegisterPayload):
    try:
        return auth.register(payload.email, payload.password, payload.display_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/auth/login")
def login(payload: LoginPayload):
    try:
        return auth.login(payload.email, payload.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))


@app.post("/auth/password-reset")
def password_reset(payload: PasswordResetPayload):
    auth.request_password_reset(payload.email)
    return {"ok": True, "message": "If that email is registered, a reset link is on its way."}


@app.post("/auth/password-reset/confirm")
def password_reset_confirm(payload: PasswordResetConfirmPayload):
    try:
        auth.reset_password(payload.token, payload.new_password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True}


# -------------------------
# Profile
# -------------------------
@app.get("/me")
def get_me(uid: str = Depends(current_user_id)):
    return {"user": require_profile(uid)}


@app.patch("/me")
def update_me(payload: ProfileUpdate, uid: str = Depends(current_user_id)):
    updates = payload.model_dump(exclude_unset=True)
    if "locale" in updates and updates["locale"] not in SUPPORTED_LOCALES:
        raise HTTPException(status_code=400, detail="unsupported locale")
    profile = users.update_profile(uid, updates)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": profile}


@app.delete("/me")
def delete_me(uid: str = Depends(current_user_id)):
    users.delete_account(uid)
    return {"ok": True}


@app.post("/me/photo")
def upload_photo(file: UploadFile = File(...), uid: str = Depends(current_user_id)):
    if file.size is not None and file.size > storage.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail=f"file exceeds {storage.MAX_UPLOAD_BYTES} bytes")
    # one byte past the cap is enough to reject it
    content = file.file.read(storage.MAX_UPLOAD_BYTES + 1)
    try:
        result = storage.upload_profile_image(uid, file.filename or "", content, file.content_type or "")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    profile = users.update_profile(uid, {"photo_url": result["url"]})
    return {"upload": result, "user": profile}


@app.get("/me/bmi")
def get_bmi(uid: str = Depends(current_user_id)):
    profile = require_profile(uid)
    bmi = profile["bmi"] or 0
    return {"bmi": bmi, **bmi_category(bmi)}


@app.get("/me/goals/today")
def get_goals_today(uid: str = Depends(current_user_id)):
    return daily_goals(uid, date.today(), require_profile(uid))


@app.get("/me/locale")
def get_locale(
    uid: str = Depends(current_user_id),
    accept_language: Optional[str] = Header(default=None),
):
    profile = require_profile(uid)
    return {"locale": resolve_locale(profile.get("locale"), accept_language), "supported": SUPPORTED_LOCALES}


# -------------------------
# Entries (activities, diets, hobbies, mood, water, sleep)
# -------------------------
@app.get("/entries/{kind}")
def list_entries(
    kind: EntryKind,
    selected_date: Optional[str] = Query(default=None, alias="date"),
    refresh: bool = False,
    uid: str = Depends(current_user_id),
):
    day = entries.resolve_selected_date(selected_date, refresh)
    try:
        items = entries.list_entries_for_day(uid, kind, day)
    except Exception:
        logger.exception("failed to load %s", kind)
        raise HTTPException(status_code=500, detail=f"Failed to load {kind}")
    return {"date": day.isoformat(), "items": items}


@app.post("/entries/{kind}")
def create_entry(kind: EntryKind, payload: Dict[str, Any] = Body(...), uid: str = Depends(current_user_id)):
    try:
        entry_id = entries.create_entry(uid, kind, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "id": entry_id, "entry": entries.get_entry(uid, kind, entry_id)}


@app.get("/entries/{kind}/range")
def list_entries_range(
    kind: EntryKind,
    start: str,
    end: str,
    uid: str = Depends(current_user_id),
):
    try:
        items = entries.list_entries_range(uid, kind, parse_day(start), parse_day(end))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"start": start, "end": end, "items": items}


@app.get("/entries/{kind}/{entry_id}")
def get_entry(kind: EntryKind, entry_id: str, uid: str = Depends(current_user_id)):
    entry = entries.get_entry(uid, kind, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"{label_for(kind)} not found")
    return {"entry": entry}


@app.patch("/entries/{kind}/{entry_id}")
def update_entry(
    kind: EntryKind,
    entry_id: str,
    payload: Dict[str, Any] = Body(...),
    uid: str = Depends(current_user_id),
):
    try:
        entry = entries.update_entry(uid, kind, entry_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if entry is None:
        raise HTTPException(status_code=404, detail=f"{label_for(kind)} not found")
    return {"entry": entry}


@app.delete("/entries/{kind}/{entry_id}")
def delete_entry(kind: EntryKind, entry_id: str, uid: str = Depends(current_user_id)):
    if not entries.delete_entry(uid, kind, entry_id):
        raise HTTPException(status_code=404, detail=f"{label_for(kind)} not found")
    return {"ok": True, "id": entry_id}


# -------------------------
# Insights + calendar
# -------------------------
@app.get("/insights")
def get_insights(days: int = 30, uid: str = Depends(current_user_id)):
    try:
        return insights.build_insights(uid, days, require_profile(uid))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/insights/ai")
def get_ai_insights(days: int = 30, uid: str = Depends(current_user_id)):
    try:
        data = insights.build_insights(uid, days, require_profile(uid))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"days": days, **brain.insights_summary(data, days)}


@app.get("/calendar/{day}")
def get_calendar_day(day: str, uid: str = Depends(current_user_id)):
    # DD-MM-YYYY from the calendar widget, or ISO
    return calendar_day(uid, parse_navigation_date(day))


# -------------------------
# AI chat
# -------------------------
@app.get("/chat/status")
def chat_status(uid: str = Depends(current_user_id)):
    return {"configured": brain.is_configured()}


@app.get("/chat/histories")
def get_chat_histories(uid: str = Depends(current_user_id)):
    return {"items": list_chats(uid)}


@app.get("/chat/histories/{chat_id}")
def get_chat_history(chat_id: str, uid: str = Depends(current_user_id)):
    chat = get_chat(uid, chat_id)
    if not chat:
        raise HTTPException(status_code=404, detail="Chat not found")
    return {"chat": chat}


@app.post("/chat/new")
def new_chat(uid: str = Depends(current_user_id)):
    """Fresh conversation; nothing is stored until the first message is sent."""
    try:
        user_data = build_user_data(uid, date.today(), require_profile(uid))
        greeting = GREETING
    except HTTPException:
        raise
    except Exception:
        logger.exception("failed to load user data for chat")
        user_data = None
        greeting = GREETING_NO_DATA
    return {"chat_id": None, "messages": greeting_messages(greeting), "user_data": user_data}


@app.post("/chat")
def send_chat(payload: ChatSend, uid: str = Depends(current_user_id)):
    text = (payload.message or "").strip()
    if not text:
        return {"ok": False, "error": "message required"}

    profile = require_profile(uid)

    if payload.chat_id:
        chat = get_chat(uid, payload.chat_id)
        if not chat:
            raise HTTPException(status_code=404, detail="Chat not found")
        messages = chat["messages"]
    else:
        messages = greeting_messages()

    messages.append(new_message("user", text))

    try:
        user_data = build_user_data(uid, date.today(), profile)
    except Exception:
        logger.exception("failed to load user data for chat")
        user_data = None

    try:
        reply = brain.assistant_reply(messages, user_data)
    except Exception:
        logger.exception("assistant reply failed")
        reply = PROCESSING_ERROR

    messages.append(new_message("ai", reply))

    if payload.chat_id:
        update_chat(uid, payload.chat_id, messages)
        chat_id = payload.chat_id
    else:
        chat_id = create_chat(uid, messages)

    return {
        "ok": True,
        "chat_id": chat_id,
        "reply": reply,
        "chat": get_chat(uid, chat_id),
    }


@app.get("/debug/version")
def debug_version():
    return {
        "service": "fitflow-backend",
        "env": ENV,
        "cors_origins": allow_origins,
        "ts": datetime.utcnow().isoformat(),
    }
