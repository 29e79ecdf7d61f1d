# marketplace/paiements.py
# -*- coding: utf-8 -*-
"""
Blueprint 'payments' : abonnement premium via Stripe
- /payments/checkout  -> crée une session Checkout (mode abonnement) et redirige
- /payments/portal    -> ouvre le portail de facturation Stripe du closeur
- /payments/webhook   -> reçoit les événements Stripe signés

La signature du webhook est vérifiée ICI, avant de lire le contenu ;
les transitions d'état sont dans marketplace.abonnements.
"""

#######------- BIBLIOTHEQUE NECESSAIRE -----------  #########
from flask import Blueprint, current_app, jsonify, request, redirect, url_for, flash
from flask_login import current_user
import json
import stripe as s

from marketplace import abonnements
from marketplace.access import role_required
from marketplace.accounts import get_account
from marketplace.exceptions import BillingUnavailable
from marketplace.extensions import csrf
from marketplace.models.user import ROLE_CLOSER
from marketplace.sessions import refresh_premium

bp = Blueprint("payments", __name__, url_prefix="/payments")


def _setup_stripe():
    """Configure la clé secrète Stripe depuis app.config ; lève si absente."""
    sec = current_app.config.get("STRIPE_SECRET_KEY") or ""
    if not sec.startswith(("sk_", "rk_")):
        current_app.logger.warning("[Stripe] Secret manquante/invalide.")
        raise BillingUnavailable("Clé Stripe serveur absente")
    s.api_key = sec


def create_checkout_url(email: str, user_id: str) -> str:
    """Session Checkout en mode abonnement ; renvoie l'URL Stripe."""
    _setup_stripe()
    price_id = current_app.config.get("STRIPE_PRICE_ID")
    if not price_id:
        raise BillingUnavailable("STRIPE_PRICE_ID manquant")
    try:
        session = s.checkout.Session.create(
            mode="subscription",
            customer_email=email,
            client_reference_id=user_id,
            metadata={"user_id": user_id},
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=current_app.config["STRIPE_SUCCESS_URL"],
            cancel_url=current_app.config["STRIPE_CANCEL_URL"],
        )
    except s.StripeError as e:
        current_app.logger.error(f"[Stripe] checkout create failed: {e}")
        raise BillingUnavailable(str(e)) from e
    return session.url


def create_portal_url(customer_ref: str) -> str:
    _setup_stripe()
    try:
        session = s.billing_portal.Session.create(
            customer=customer_ref,
            return_url=current_app.config["STRIPE_PORTAL_RETURN_URL"],
        )
    except s.StripeError as e:
        current_app.logger.error(f"[Stripe] portal create failed: {e}")
        raise BillingUnavailable(str(e)) from e
    return session.url


@bp.post("/checkout")
@role_required(ROLE_CLOSER)
def checkout():
    db = current_app.db
    # on relit le vrai statut : la session peut dater d'avant un webhook
    if refresh_premium(db, current_user):
        return portal()

    account = get_account(db, current_user.account_id, role=ROLE_CLOSER)
    if account is None:
        return redirect(url_for("auth.login"))
    try:
        url = create_checkout_url(account["email"], str(account["_id"]))
    except BillingUnavailable:
        flash("Le paiement est momentanément indisponible.", "danger")
        return redirect(url_for("dashboard.closer"))
    return redirect(url, code=303)


@bp.post("/portal")
@role_required(ROLE_CLOSER)
def portal():
    account = get_account(current_app.db, current_user.account_id, role=ROLE_CLOSER)
    customer_ref = (account or {}).get("stripe_customer_id")
    if not customer_ref:
        flash("Aucun abonnement à gérer.", "info")
        return redirect(url_for("dashboard.closer"))
    try:
        url = create_portal_url(customer_ref)
    except BillingUnavailable:
        flash("Le portail de facturation est momentanément indisponible.", "danger")
        return redirect(url_for("dashboard.closer"))
    return redirect(url, code=303)


@bp.post("/webhook")
@csrf.exempt
def webhook():
    """
    Événements Stripe. Signature invalide -> 400 et aucune écriture.
    Événement valide mais inconnu / sans closeur correspondant -> 200 (ignoré).
    """
    secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    if not secret:
        current_app.logger.error("[Stripe] STRIPE_WEBHOOK_SECRET absent, webhook refusé")
        return jsonify({"error": "webhook non configuré"}), 400

    payload = request.get_data()
    signature = request.headers.get("Stripe-Signature", "")
    try:
        s.Webhook.construct_event(payload, signature, secret)
    except ValueError:
        current_app.logger.warning("[Stripe] webhook : payload illisible")
        return jsonify({"error": "payload invalide"}), 400
    except s.SignatureVerificationError:
        current_app.logger.warning("[Stripe] webhook : signature invalide")
        return jsonify({"error": "signature invalide"}), 400

    # StripeObject n'est plus un dict : on relit le JSON déjà vérifié
    data = json.loads(payload)
    event_type = data.get("type", "")
    obj = (data.get("data") or {}).get("object") or {}
    applied = abonnements.apply_event(current_app.db, event_type, obj)
    return jsonify({"received": True, "applied": applied}), 200
