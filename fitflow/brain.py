# fitflow/brain.py
import json
import logging
import os
import time
import warnings
from typing import Any, Dict, List, Optional

warnings.filterwarnings("ignore", category=FutureWarning)

import google.generativeai as genai
from openai import OpenAI

from fitflow.prompts import (
    INSIGHTS_ERROR,
    INSIGHTS_PROMPT,
    INSIGHTS_RATE_LIMITED,
    NOT_CONFIGURED,
    REPLY_ERROR,
    SYSTEM_INSTRUCTION,
    USER_DATA_CONTEXT,
)

logger = logging.getLogger(__name__)


class AIServiceError(RuntimeError):
    pass


# -------------------------
# Provider config
# -------------------------
MODEL_PROVIDER = os.getenv("MODEL_PROVIDER", "openai").strip().lower()
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "models/gemini-flash-latest").strip()


def _key(name: str) -> str:
    return (os.getenv(name) or "").strip()


def is_configured() -> bool:
    return bool(_key("OPENAI_API_KEY") or _key("GEMINI_API_KEY"))


# -------------------------
# Gemini (lazy init)
# -------------------------
_gemini_model = None


def _ensure_gemini():
    global _gemini_model
    if _gemini_model is not None:
        return

    key = _key("GEMINI_API_KEY")
    if not key:
        raise AIServiceError("GEMINI_API_KEY is missing")

    genai.configure(api_key=key)
    _gemini_model = genai.GenerativeModel(GEMINI_MODEL, system_instruction=SYSTEM_INSTRUCTION)


def _gemini_generate(text: str) -> str:
    _ensure_gemini()
    config = {"temperature": 0.4, "max_output_tokens": 800}

    try:
        resp = _gemini_model.generate_content(text, generation_config=config)
    except Exception as e:
        logger.warning("gemini attempt 1 failed: %s", e)
        time.sleep(0.6)
        resp = _gemini_model.generate_content(text, generation_config=config)
    return (getattr(resp, "text", "") or "").strip()


# -------------------------
# OpenAI (lazy init)
# -------------------------
_openai_client: Optional[OpenAI] = None


def _ensure_openai():
    global _openai_client
    if _openai_client is not None:
        return
    key = _key("OPENAI_API_KEY")
    if not key:
        raise AIServiceError("OPENAI_API_KEY is missing")
    _openai_client = OpenAI(api_key=key)


def _openai_generate(text: str) -> str:
    _ensure_openai()
    resp = _openai_client.responses.create(
        model=OPENAI_MODEL,
        instructions=SYSTEM_INSTRUCTION,
        input=text,
    )
    return (getattr(resp, "output_text", "") or "").strip()


# -------------------------
# LLM call router (configured primary, the other as fallback)
# -------------------------
def call_llm(prompt: str) -> str:
    primary = MODEL_PROVIDER if MODEL_PROVIDER in ("openai", "gemini") else "openai"
    fallback = "gemini" if primary == "openai" else "openai"

    def _call(provider: str) -> str:
        if provider == "openai":
            return _openai_generate(prompt)
        return _gemini_generate(prompt)

    try:
        out = _call(primary)
        if out:
            return out
        raise AIServiceError(f"Empty response from {primary}")
    except Exception as e:
        logger.warning("%s failed, falling back to %s: %s", primary, fallback, e)

    try:
        out = _call(fallback)
    except Exception as e2:
        logger.error("both providers failed: %s", e2)
        raise AIServiceError("No response from AI") from e2
    if not out:
        raise AIServiceError("No response from AI")
    return out


# -------------------------
# Prompt formatting
# -------------------------
def format_messages_to_prompt(messages: List[Dict[str, str]]) -> str:
    """
    Both providers are called with a single string here, so the conversation
    is flattened into role-tagged blocks ending with an open ASSISTANT turn.
    """
    parts: List[str] = []
    for m in messages:
        role = (m.get("role") or "user").upper()
        content = (m.get("content") or "").strip()
        if not content:
            continue
        parts.append(f"{role}:\n{content}")
    parts.append("ASSISTANT:\n")
    return "\n\n".join(parts)


def to_conversation(chat_messages: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Stored chat messages -> model turns. Leading assistant messages (the
    greeting a chat opens with) are not part of the conversation.
    """
    turns: List[Dict[str, str]] = []
    for m in chat_messages:
        role = "user" if m.get("sender") == "user" else "assistant"
        if not turns and role == "assistant":
            continue
        turns.append({"role": role, "content": m.get("text") or ""})
    return turns


# -------------------------
# Main entry
# -------------------------
def assistant_reply(chat_messages: List[Dict[str, Any]], user_data: Optional[Dict[str, Any]] = None) -> str:
    """
    Reply to the last user message of a chat. Never raises: configuration and
    provider problems come back as a message the chat can show.
    """
    if not is_configured():
        return NOT_CONFIGURED

    turns = to_conversation(chat_messages)
    if user_data is not None:
        context = USER_DATA_CONTEXT.format(user_data=json.dumps(user_data, indent=2))
        turns = [{"role": "user", "content": context}] + turns

    try:
        return call_llm(format_messages_to_prompt(turns))
    except AIServiceError as e:
        return REPLY_ERROR.format(reason=e)


# -------------------------
# Insights summary
# -------------------------
PERIODS = {7: "last 7 days", 30: "last 30 days", 90: "last 90 days"}


def _num(value) -> str:
    value = value or 0
    return str(int(value)) if float(value).is_integer() else str(value)


def _is_rate_limited(e: Exception) -> bool:
    cause = e.__cause__
    if getattr(cause, "status_code", None) == 429:
        return True
    return "429" in str(e) or "429" in str(cause or "")


def insights_prompt(insights: Dict[str, Any], days_back: int) -> str:
    sleep = insights["sleep"]["stats"]
    water = insights["water"]["stats"]
    activity = insights["activity"]["stats"]
    diet = insights["diet"]["stats"]

    activity_line = (
        f"Activity: Average {_num(activity['average_minutes'])} min/day, "
        f"Total: {_num(activity['total_minutes'])} min, "
        f"Consistency: {_num(activity['consistency'])}%"
    )
    if activity["total_calories"] > 0:
        activity_line += f", Calories burned: {_num(activity['total_calories'])} cal"

    lines = [
        f"Sleep: Average {_num(sleep['average'])}h/day, "
        f"Goal achievement: {_num(sleep['goal_achievement'])}%, "
        f"Consistency: {_num(sleep['consistency'])}%",
        f"Water: Average {_num(water['average'])}L/day, "
        f"Goal achievement: {_num(water['goal_achievement'])}%, "
        f"Consistency: {_num(water['consistency'])}%",
        activity_line,
        f"Diet: Average {_num(diet['average_calories'])} cal/day, "
        f"Total meals: {_num(diet['total_meals'])}, "
        f"Consistency: {_num(diet['consistency'])}%",
    ]
    return INSIGHTS_PROMPT.format(period=PERIODS.get(days_back, f"last {days_back} days"), lines="\n".join(lines))


def insights_summary(insights: Dict[str, Any], days_back: int) -> Dict[str, Any]:
    """
    A short written summary of the period's stats. Like assistant_reply this
    never raises; failures come back in `error`.
    """
    if not is_configured():
        return {"configured": False, "insights": None, "error": NOT_CONFIGURED}

    context = {
        "period": PERIODS.get(days_back, f"last {days_back} days"),
        "sleep": insights["sleep"]["stats"],
        "water": insights["water"]["stats"],
        "activity": insights["activity"]["stats"],
        "diet": insights["diet"]["stats"],
    }
    turns = [
        {"role": "user", "content": USER_DATA_CONTEXT.format(user_data=json.dumps(context, indent=2))},
        {"role": "user", "content": insights_prompt(insights, days_back)},
    ]

    try:
        text = call_llm(format_messages_to_prompt(turns))
    except AIServiceError as e:
        logger.warning("insights summary failed: %s", e)
        error = INSIGHTS_RATE_LIMITED if _is_rate_limited(e) else INSIGHTS_ERROR
        return {"configured": True, "insights": None, "error": error}
    return {"configured": True, "insights": text, "error": None}
