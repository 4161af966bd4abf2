# fitflow/auth.py
import logging
import os
from datetime import datetime, timedelta
from typing import Any, Dict

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from werkzeug.security import check_password_hash, generate_password_hash

from fitflow import users

logger = logging.getLogger(__name__)

DEV_SECRET_KEY = "fitflow-dev-secret-change-me-before-deploying"
SECRET_KEY = (os.getenv("SECRET_KEY") or "").strip() or DEV_SECRET_KEY
ALGORITHM = "HS256"
TOKEN_TTL_DAYS = int(os.getenv("TOKEN_TTL_DAYS", "30"))
RESET_TTL_MINUTES = 60
MIN_PASSWORD_LEN = 6

security = HTTPBearer(auto_error=False)


class AuthError(Exception):
    pass


def check_secret_key(env: str, secret: str):
    """Production must sign tokens with its own key, never the built-in one."""
    if (env or "").strip().lower() == "production" and (not secret or secret == DEV_SECRET_KEY):
        raise RuntimeError("SECRET_KEY must be set in production")
    if secret == DEV_SECRET_KEY:
        logger.warning("SECRET_KEY not set; using the development key")


check_secret_key(os.getenv("ENV", "development"), SECRET_KEY)


def create_token(uid: str, purpose: str = "access") -> str:
    if purpose == "reset":
        ttl = timedelta(minutes=RESET_TTL_MINUTES)
    else:
        ttl = timedelta(days=TOKEN_TTL_DAYS)
    payload = {
        "sub": uid,
        "purpose": purpose,
        "exp": datetime.utcnow() + ttl,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str, purpose: str = "access") -> str:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    uid = payload.get("sub")
    if not uid or payload.get("purpose") != purpose:
        raise AuthError("Invalid token")
    return uid


def _check_password(password: str):
    if len(password or "") < MIN_PASSWORD_LEN:
        raise ValueError(f"password must be at least {MIN_PASSWORD_LEN} characters")


def register(email: str, password: str, display_name: str = "") -> Dict[str, Any]:
    _check_password(password)
    profile = users.create_user(email, generate_password_hash(password), display_name)
    logger.info("registered user %s", profile["uid"])
    return {"user": profile, "token": create_token(profile["uid"])}


def login(email: str, password: str) -> Dict[str, Any]:
    user = users.get_user_by_email(email)
    if not user or not check_password_hash(user["password_hash"], password or ""):
        raise AuthError("Invalid email or password")

    users.touch_login(user["uid"])
    return {"user": users.get_profile(user["uid"]), "token": create_token(user["uid"])}


def request_password_reset(email: str) -> None:
    """
    Issues a reset token for known accounts. Callers get the same answer either
    way so the endpoint can't be used to discover registered emails.
    """
    user = users.get_user_by_email(email)
    if not user:
        return
    token = create_token(user["uid"], purpose="reset")
    # No mail transport here; the link is picked up from the service log.
    logger.info("password reset requested for %s: /login?reset_token=%s", user["uid"], token)


def reset_password(token: str, new_password: str) -> None:
    uid = decode_token(token, purpose="reset")
    _check_password(new_password)
    if not users.get_profile(uid):
        raise AuthError("Invalid token")
    users.set_password_hash(uid, generate_password_hash(new_password))


def current_user_id(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """FastAPI dependency: the uid behind a valid bearer token."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        uid = decode_token(credentials.credentials)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    if not users.get_profile(uid):
        raise HTTPException(status_code=401, detail="Invalid token")
    return uid
