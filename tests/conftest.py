from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import mongomock
import pytest


def pytest_configure():
    # Ensure project root is on sys.path for the root-level 'config' module
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def db():
    return mongomock.MongoClient().closers_test


@pytest.fixture
def app(db, tmp_path):
    from config import TestingConfig
    from marketplace import create_app

    class Cfg(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    return create_app(Cfg, db=db)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.test_request_context():
        yield


def closer_doc(n, **fields):
    """Un closeur prêt à insérer directement dans accounts."""
    doc = {
        "role": "closer",
        "email": f"closer{n}@closers.fr",
        "password_hash": "x",
        "first_name": f"Closer{n}",
        "profile_type": "Closeur",
        "market": "B2C",
        "availability": "FullTime",
        "years_experience": 1,
        "total_closed": 0,
        "product_types": [],
        "contract_types": [],
        "mission_type": "Mission",
        "is_premium": False,
        "stripe_customer_id": None,
        "stripe_subscription_id": None,
        "created_at": BASE_TIME + timedelta(days=n),
    }
    doc.update(fields)
    return doc


def closer_form(**overrides):
    """Données POST d'inscription closeur valides."""
    data = {
        "email": "alice@closers.fr",
        "password": "motdepasse",
        "confirm": "motdepasse",
        "first_name": "Alice",
        "last_name": "Martin",
        "phone": "0600000000",
        "profile_type": "Closeur",
        "market": "B2B",
        "availability": "FullTime",
        "years_experience": "4",
        "total_closed": "120000",
        "product_types": ["SaaS", "Coaching"],
        "past_clients": "Acme",
        "contract_types": ["Freelance"],
        "desired_income": "5000",
        "mission_type": "LongTerm",
        "vision": "Closer mieux",
    }
    data.update(overrides)
    return data


def company_form(**overrides):
    data = {
        "company_name": "Acme",
        "email": "rh@acme.fr",
        "password": "motdepasse",
        "confirm": "motdepasse",
    }
    data.update(overrides)
    return data


def login(client, email, password="motdepasse"):
    return client.post("/login", data={"email": email, "password": password})
