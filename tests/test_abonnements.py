from __future__ import annotations

from bson.objectid import ObjectId

from conftest import closer_doc
from marketplace import abonnements


def _snapshot(db):
    return sorted(db.accounts.find({}), key=lambda d: d["email"])


def test_checkout_completed_makes_premium(db, ctx):
    cid = db.accounts.insert_one(closer_doc(1)).inserted_id
    assert abonnements.checkout_completed(db, str(cid), "cus_1", "sub_1")
    doc = db.accounts.find_one({"_id": cid})
    assert abonnements.state_of(doc) == abonnements.PREMIUM
    assert doc["stripe_customer_id"] == "cus_1"
    assert doc["stripe_subscription_id"] == "sub_1"


def test_checkout_completed_replay_is_idempotent(db, ctx):
    cid = db.accounts.insert_one(closer_doc(1)).inserted_id
    abonnements.checkout_completed(db, str(cid), "cus_1", "sub_1")
    once = db.accounts.find_one({"_id": cid})
    abonnements.checkout_completed(db, str(cid), "cus_1", "sub_1")
    assert db.accounts.find_one({"_id": cid}) == once


def test_checkout_for_unknown_or_invalid_user_is_ignored(db, ctx):
    db.accounts.insert_one(closer_doc(1))
    before = _snapshot(db)
    assert not abonnements.checkout_completed(db, str(ObjectId()), "cus_1", "sub_1")
    assert not abonnements.checkout_completed(db, "pas-un-id", "cus_1", "sub_1")
    assert _snapshot(db) == before


def test_checkout_never_upgrades_a_company(db, ctx):
    cid = db.accounts.insert_one({"role": "company", "email": "rh@acme.fr", "company_name": "Acme"}).inserted_id
    assert not abonnements.checkout_completed(db, str(cid), "cus_1", "sub_1")
    assert "is_premium" not in db.accounts.find_one({"_id": cid})


def test_subscription_deleted_returns_to_free_and_clears_subscription(db, ctx):
    cid = db.accounts.insert_one(
        closer_doc(1, is_premium=True, stripe_customer_id="cus_1", stripe_subscription_id="sub_1")
    ).inserted_id
    assert abonnements.subscription_deleted(db, "cus_1")
    doc = db.accounts.find_one({"_id": cid})
    assert doc["is_premium"] is False
    assert doc["stripe_subscription_id"] is None
    assert doc["stripe_customer_id"] == "cus_1"


def test_stale_subscription_deleted_is_ignored(db, ctx):
    cid = db.accounts.insert_one(
        closer_doc(1, is_premium=True, stripe_customer_id="cus_1", stripe_subscription_id="sub_2")
    ).inserted_id
    assert not abonnements.subscription_deleted(db, "cus_1", "sub_1")
    assert db.accounts.find_one({"_id": cid})["is_premium"] is True


def test_payment_failed_keeps_subscription_ref(db, ctx):
    cid = db.accounts.insert_one(
        closer_doc(1, is_premium=True, stripe_customer_id="cus_1", stripe_subscription_id="sub_1")
    ).inserted_id
    assert abonnements.payment_failed(db, "cus_1")
    doc = db.accounts.find_one({"_id": cid})
    assert doc["is_premium"] is False
    assert doc["stripe_subscription_id"] == "sub_1"


def test_payment_failed_for_unknown_customer_changes_nothing(db, ctx):
    db.accounts.insert_many([
        closer_doc(1, is_premium=True, stripe_customer_id="cus_1", stripe_subscription_id="sub_1"),
        closer_doc(2),
    ])
    before = _snapshot(db)
    assert not abonnements.payment_failed(db, "cus_inconnu")
    assert not abonnements.payment_failed(db, None)
    assert _snapshot(db) == before


def test_apply_event_dispatches_stripe_payloads(db, ctx):
    cid = db.accounts.insert_one(closer_doc(1)).inserted_id
    assert abonnements.apply_event(db, "checkout.session.completed", {
        "client_reference_id": str(cid), "customer": "cus_9", "subscription": "sub_9",
    })
    assert db.accounts.find_one({"_id": cid})["is_premium"] is True

    assert abonnements.apply_event(db, "customer.subscription.deleted", {"id": "sub_9", "customer": "cus_9"})
    assert db.accounts.find_one({"_id": cid})["is_premium"] is False

    assert not abonnements.apply_event(db, "customer.created", {"id": "cus_9"})


def test_checkout_user_id_from_metadata(db, ctx):
    cid = db.accounts.insert_one(closer_doc(1)).inserted_id
    assert abonnements.apply_event(db, "checkout.session.completed", {
        "metadata": {"user_id": str(cid)}, "customer": "cus_3", "subscription": "sub_3",
    })
    assert db.accounts.find_one({"_id": cid})["stripe_customer_id"] == "cus_3"
