# marketplace/abonnements.py
# -----------------------------------------------------------------------------
# Machine à états de l'abonnement premium d'un closeur : Free <-> Premium.
#
# C'est le SEUL chemin d'écriture de is_premium / stripe_*_id. Les
# transitions viennent uniquement des événements Stripe (déjà vérifiés par
# le webhook, cf. paiements.py) :
#
#   checkout_completed(user_id, customer, subscription)  Free -> Premium
#   subscription_deleted(customer[, subscription])        Premium -> Free, efface subscription
#   payment_failed(customer)                              Premium -> Free, garde subscription
#
#   - Rejouer un événement ne change rien de plus ($set des mêmes valeurs).
#   - Client/closeur inconnu -> ignoré et loggé, jamais d'exception.
#   - Uniquement des update_one($set) : une édition de profil concurrente
#     n'est jamais écrasée.
# -----------------------------------------------------------------------------

from flask import current_app

from marketplace.accounts import to_object_id
from marketplace.models.user import ROLE_CLOSER

FREE = "free"
PREMIUM = "premium"

CHECKOUT_COMPLETED = "checkout.session.completed"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"
PAYMENT_FAILED = "invoice.payment_failed"


def state_of(closer) -> str:
    return PREMIUM if closer and closer.get("is_premium") else FREE


def checkout_completed(db, user_id, customer_ref, subscription_ref) -> bool:
    oid = to_object_id(user_id)
    if oid is None or not customer_ref:
        current_app.logger.warning(f"[Billing] checkout_completed incomplet ignoré (user={user_id})")
        return False
    res = db.accounts.update_one(
        {"_id": oid, "role": ROLE_CLOSER},
        {"$set": {
            "is_premium": True,
            "stripe_customer_id": customer_ref,
            "stripe_subscription_id": subscription_ref,
        }},
    )
    if res.matched_count == 0:
        current_app.logger.warning(f"[Billing] checkout_completed pour un closeur inconnu ({user_id})")
        return False
    current_app.logger.info(f"[Billing] closeur {user_id} -> premium")
    return True


def subscription_deleted(db, customer_ref, subscription_ref=None) -> bool:
    if not customer_ref:
        return False
    query = {"role": ROLE_CLOSER, "stripe_customer_id": customer_ref}
    if subscription_ref:
        # suppression d'un ancien abonnement arrivée après un réabonnement
        query["stripe_subscription_id"] = {"$in": [subscription_ref, None]}
    res = db.accounts.update_one(
        query,
        {"$set": {"is_premium": False, "stripe_subscription_id": None}},
    )
    if res.matched_count == 0:
        current_app.logger.info(f"[Billing] subscription_deleted ignoré (customer={customer_ref})")
        return False
    current_app.logger.info(f"[Billing] customer {customer_ref} -> free (abonnement supprimé)")
    return True


def payment_failed(db, customer_ref) -> bool:
    if not customer_ref:
        return False
    res = db.accounts.update_one(
        {"role": ROLE_CLOSER, "stripe_customer_id": customer_ref},
        {"$set": {"is_premium": False}},
    )
    if res.matched_count == 0:
        current_app.logger.info(f"[Billing] payment_failed ignoré (customer={customer_ref})")
        return False
    current_app.logger.info(f"[Billing] customer {customer_ref} -> free (paiement échoué)")
    return True


def apply_event(db, event_type: str, obj) -> bool:
    """
    Aiguille un événement Stripe (déjà vérifié) vers la bonne transition.
    `obj` est event["data"]["object"]. Les types non gérés sont ignorés.
    """
    obj = obj or {}
    if event_type == CHECKOUT_COMPLETED:
        metadata = obj.get("metadata") or {}
        user_id = obj.get("client_reference_id") or metadata.get("user_id")
        return checkout_completed(db, user_id, obj.get("customer"), obj.get("subscription"))
    if event_type == SUBSCRIPTION_DELETED:
        return subscription_deleted(db, obj.get("customer"), obj.get("id"))
    if event_type == PAYMENT_FAILED:
        return payment_failed(db, obj.get("customer"))
    current_app.logger.debug(f"[Billing] événement non géré : {event_type}")
    return False
