"""Shared fixtures: every test gets its own SQLite file and upload directory."""

import os
import tempfile

# Point the data dir somewhere disposable before anything imports fitflow.db
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="fitflow-test-"))
os.environ.setdefault("SECRET_KEY", "fitflow-test-secret")

import pytest
from fastapi.testclient import TestClient

from fitflow import auth, db, storage, users
from fitflow.models import init_db


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_PATH", tmp_path / "fitflow-test.db")
    monkeypatch.setattr(storage, "UPLOAD_DIR", tmp_path / "profile-images")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    init_db()
    return tmp_path


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def uid():
    return users.create_user("alex@example.com", "not-a-real-hash", "Alex")["uid"]


@pytest.fixture
def other_uid():
    return users.create_user("sam@example.com", "not-a-real-hash", "Sam")["uid"]


@pytest.fixture
def account():
    """A registered user with a real password and an access token."""
    result = auth.register("jordan@example.com", "s3cret-pass", "Jordan")
    return {
        "uid": result["user"]["uid"],
        "token": result["token"],
        "headers": {"Authorization": f"Bearer {result['token']}"},
    }
