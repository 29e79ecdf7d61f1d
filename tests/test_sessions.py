from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from marketplace.accounts import register_closer, register_company, update_closer_profile, get_account
from marketplace.exceptions import EmailAlreadyUsed, InvalidCredentials
from marketplace.sessions import authenticate, open_session, load_session, close_session, refresh_premium


def test_authenticate_success_returns_account(db, ctx):
    register_company(db, "Acme", "RH@Acme.fr", "motdepasse")
    account = authenticate(db, "rh@acme.fr ", "motdepasse")
    assert account["role"] == "company"


def test_wrong_password_and_unknown_email_fail_identically(db, ctx):
    register_closer(db, "alice@closers.fr", "motdepasse", {"first_name": "Alice"})
    with pytest.raises(InvalidCredentials) as wrong:
        authenticate(db, "alice@closers.fr", "mauvais")
    with pytest.raises(InvalidCredentials) as unknown:
        authenticate(db, "personne@closers.fr", "mauvais")
    assert str(wrong.value) == str(unknown.value)
    assert db.sessions.count_documents({}) == 0


def test_email_unique_across_roles(db, ctx):
    register_closer(db, "bob@closers.fr", "motdepasse", {"first_name": "Bob"})
    with pytest.raises(EmailAlreadyUsed):
        register_company(db, "Bob SAS", "BOB@closers.fr", "motdepasse")
    with pytest.raises(EmailAlreadyUsed):
        register_closer(db, "bob@closers.fr", "autre", {"first_name": "Bobby"})
    assert db.accounts.count_documents({}) == 1


def test_register_closer_ignores_subscription_fields(db, ctx):
    account = register_closer(
        db, "eve@closers.fr", "motdepasse",
        {"first_name": "Eve", "is_premium": True, "stripe_customer_id": "cus_x", "role": "company"},
    )
    stored = get_account(db, account["_id"])
    assert stored["role"] == "closer"
    assert stored["is_premium"] is False
    assert stored["stripe_customer_id"] is None


def test_profile_update_cannot_touch_premium(db, ctx):
    account = register_closer(db, "eve@closers.fr", "motdepasse", {"first_name": "Eve"})
    assert update_closer_profile(db, account["_id"], {"vision": "Tout closer", "is_premium": True, "email": "x@y.fr"})
    stored = get_account(db, account["_id"])
    assert stored["vision"] == "Tout closer"
    assert stored["is_premium"] is False
    assert stored["email"] == "eve@closers.fr"


def test_session_roundtrip_and_logout(db, ctx):
    account = register_closer(db, "alice@closers.fr", "motdepasse", {"first_name": "Alice"})
    user = open_session(db, account)
    assert user.role == "closer" and user.name == "Alice" and user.is_premium is False
    assert user.account_id == str(account["_id"])

    loaded = load_session(db, user.get_id())
    assert loaded.account_id == user.account_id

    close_session(db, user.get_id())
    assert load_session(db, user.get_id()) is None


def test_expired_session_is_rejected(db, ctx):
    account = register_company(db, "Acme", "rh@acme.fr", "motdepasse")
    user = open_session(db, account)
    db.sessions.update_one(
        {"_id": user.token},
        {"$set": {"expires_at": datetime.now(timezone.utc) - timedelta(minutes=1)}},
    )
    assert load_session(db, user.token) is None
    assert load_session(db, None) is None
    assert load_session(db, "inconnu") is None


def test_session_lifetime_is_capped(db, ctx, app):
    account = register_company(db, "Acme", "rh@acme.fr", "motdepasse")
    user = open_session(db, account)
    doc = db.sessions.find_one({"_id": user.token})
    lifetime = doc["expires_at"] - doc["created_at"]
    assert timedelta(days=30) <= lifetime <= timedelta(days=60)


def test_refresh_premium_updates_stale_snapshot(db, ctx):
    account = register_closer(db, "alice@closers.fr", "motdepasse", {"first_name": "Alice"})
    user = open_session(db, account)
    db.accounts.update_one({"_id": account["_id"]}, {"$set": {"is_premium": True}})

    assert refresh_premium(db, user) is True
    assert user.is_premium is True
    assert db.sessions.find_one({"_id": user.token})["is_premium"] is True


def test_closer_session_name_is_full_name(db, ctx):
    both = register_closer(db, "alice@closers.fr", "motdepasse", {"first_name": "Alice", "last_name": "Martin"})
    last_only = register_closer(db, "bob@closers.fr", "motdepasse", {"last_name": "Durand"})
    assert open_session(db, both).name == "Alice Martin"
    assert open_session(db, last_only).name == "Durand"
