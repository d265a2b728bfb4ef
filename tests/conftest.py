import os

# In-memory database before the app module reads its config
os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from app import app as flask_app, create_tables
from models import db


# ---------------------------
# Fixtures Flask
# ---------------------------
@pytest.fixture
def app():
    flask_app.config["TESTING"] = True
    create_tables()
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


# ---------------------------
# Credentials
# ---------------------------
@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")


@pytest.fixture
def no_gemini_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
