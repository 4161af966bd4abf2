# fitflow/models.py
from datetime import date
from typing import Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from fitflow.db import connect
from fitflow.timefmt import current_time, time_input_value


# -------------------------
# Auth / profile payloads
# -------------------------
class RegisterPayload(BaseModel):
    email: str
    password: str
    display_name: str = ""


class LoginPayload(BaseModel):
    email: str
    password: str


class PasswordResetPayload(BaseModel):
    email: str


class PasswordResetConfirmPayload(BaseModel):
    token: str
    new_password: str


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    weight: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    sleep_goal: Optional[float] = Field(default=None, gt=0, le=24)
    water_goal: Optional[float] = Field(default=None, gt=0, le=20)
    locale: Optional[str] = None


# -------------------------
# Entries (one model per kind)
# -------------------------
EntryKind = Literal["activities", "diets", "hobbies", "mood", "water", "sleep"]


class EntryBase(BaseModel):
    entry_date: date = Field(default_factory=date.today)
    notes: Optional[str] = None

    # Times are stored 24-hour "HH:MM"; 12-hour input is converted.
    @field_validator("time", "bed_time", "wake_time", "start_time", "end_time", check_fields=False)
    @classmethod
    def _to_24h(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None or not value.strip():
            return current_time() if info.field_name == "time" else None
        return time_input_value(value)


class Activity(EntryBase):
    name: str = Field(min_length=1)
    duration: int = Field(default=0, ge=0)  # minutes
    time: str = Field(default_factory=current_time)
    calories_burned: Optional[float] = Field(default=None, ge=0)
    actual_duration: Optional[int] = Field(default=None, ge=0)  # seconds


class Diet(EntryBase):
    meal_type: str = Field(min_length=1)
    food_items: str = ""
    calories: float = Field(default=0, ge=0)
    time: str = Field(default_factory=current_time)
    image_url: Optional[str] = None


class Hobby(EntryBase):
    name: Optional[str] = None
    type: Optional[str] = None  # older entries stored the hobby here
    duration: int = Field(default=0, ge=0)
    time: str = Field(default_factory=current_time)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    frequency: Optional[str] = None
    category: Optional[str] = None


class Mood(EntryBase):
    mood_level: int = Field(ge=1, le=5)
    mood_type: str = Field(min_length=1)
    time: str = Field(default_factory=current_time)
    factors: List[str] = []


class Water(EntryBase):
    amount: Optional[float] = Field(default=None, ge=0)  # ml
    liters: Optional[float] = Field(default=None, ge=0)  # older entries
    time: str = Field(default_factory=current_time)
    goal: Optional[float] = None


class Sleep(EntryBase):
    bed_time: Optional[str] = None
    wake_time: Optional[str] = None
    duration: Optional[float] = Field(default=None, ge=0, le=24)  # hours
    hours: Optional[float] = Field(default=None, ge=0, le=24)  # older entries
    quality: Optional[int] = Field(default=None, ge=1, le=5)
    goal: Optional[float] = None


ENTRY_MODELS: Dict[str, Type[EntryBase]] = {
    "activities": Activity,
    "diets": Diet,
    "hobbies": Hobby,
    "mood": Mood,
    "water": Water,
    "sleep": Sleep,
}

# Singular names for messages ("Activity not found")
ENTRY_LABELS: Dict[str, str] = {
    "activities": "Activity",
    "diets": "Diet",
    "hobbies": "Hobby",
    "mood": "Mood",
    "water": "Water",
    "sleep": "Sleep",
}


# -------------------------
# Chat
# -------------------------
class ChatSend(BaseModel):
    chat_id: Optional[str] = None
    message: Optional[str] = None


def init_db():
    conn = connect()
    cur = conn.cursor()

    # ---- users ----
    cur.execute("""
    CREATE TABLE IF NOT EXISTS users (
        uid TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        display_name TEXT NOT NULL DEFAULT 'User',
        photo_url TEXT NOT NULL DEFAULT '',
        weight REAL NOT NULL DEFAULT 0,
        height REAL NOT NULL DEFAULT 0,
        bmi REAL NOT NULL DEFAULT 0,
        sleep_goal REAL NOT NULL DEFAULT 8,
        water_goal REAL NOT NULL DEFAULT 2,
        locale TEXT,
        created_at TEXT,
        updated_at TEXT,
        last_login_at TEXT
    )
    """)

    # ---- entries (activities, diets, hobbies, mood, water, sleep) ----
    cur.execute("""
    CREATE TABLE IF NOT EXISTS entries (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        kind TEXT NOT NULL,
        entry_date TEXT NOT NULL,
        data TEXT NOT NULL,
        created_at TEXT,
        updated_at TEXT,
        FOREIGN KEY(user_id) REFERENCES users(uid) ON DELETE CASCADE
    )
    """)
    cur.execute("""
    CREATE INDEX IF NOT EXISTS idx_entries_user_kind_day
    ON entries(user_id, kind, entry_date)
    """)

    # ---- chat ----
    cur.execute("""
    CREATE TABLE IF NOT EXISTS chat_histories (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL DEFAULT 'New Chat',
        messages TEXT NOT NULL DEFAULT '[]',
        created_at TEXT,
        updated_at TEXT,
        FOREIGN KEY(user_id) REFERENCES users(uid) ON DELETE CASCADE
    )
    """)

    conn.commit()
    conn.close()
