# marketplace/accounts.py
# -----------------------------------------------------------------------------
# Identity store : closeurs et entreprises vivent dans la même collection
# "accounts", distingués par le champ "role".
#
#   - L'email est unique tous rôles confondus (index uniq_email) : on vérifie
#     avant l'insertion pour un message propre, et l'index tranche en cas de
#     course entre deux inscriptions.
#   - On ne stocke jamais le mot de passe en clair.
#   - is_premium et les références Stripe ne sont écrits que par
#     marketplace.abonnements.
# -----------------------------------------------------------------------------

from datetime import datetime, timezone
from bson.objectid import ObjectId
from pymongo.errors import DuplicateKeyError
from werkzeug.security import generate_password_hash
from flask import current_app

from marketplace.exceptions import EmailAlreadyUsed
from marketplace.models.closer import EDITABLE_FIELDS
from marketplace.models.user import ROLE_CLOSER, ROLE_COMPANY

# Ce qu'on n'envoie jamais aux templates publics
PRIVATE_FIELDS = {"password_hash": 0, "stripe_customer_id": 0, "stripe_subscription_id": 0}


def normalize_email(email) -> str:
    return (email or "").strip().lower()


def to_object_id(value):
    """ObjectId valide ou None (jamais d'exception sur une entrée utilisateur)."""
    if isinstance(value, ObjectId):
        return value
    if value and ObjectId.is_valid(str(value)):
        return ObjectId(str(value))
    return None


def display_name(account) -> str:
    if account.get("role") == ROLE_COMPANY:
        return account.get("company_name", "")
    return " ".join(filter(None, [account.get("first_name"), account.get("last_name")]))


def _insert_account(db, doc):
    email = doc["email"]
    if db.accounts.find_one({"email": email}, {"_id": 1}):
        current_app.logger.info(f"[Auth] inscription refusée, email déjà pris ({doc['role']})")
        raise EmailAlreadyUsed(email)
    try:
        res = db.accounts.insert_one(doc)
    except DuplicateKeyError:
        # deux inscriptions simultanées : l'index a tranché
        raise EmailAlreadyUsed(email)
    doc["_id"] = res.inserted_id
    return doc


def register_company(db, company_name: str, email: str, password: str):
    """Crée un compte entreprise et renvoie le document inséré (avec _id)."""
    doc = {
        "role": ROLE_COMPANY,
        "email": normalize_email(email),
        "password_hash": generate_password_hash(password),
        "company_name": (company_name or "").strip(),
        "created_at": datetime.now(timezone.utc),
    }
    return _insert_account(db, doc)


def register_closer(db, email: str, password: str, profile: dict):
    """
    Crée un compte closeur. `profile` ne contient que des champs éditables,
    tout le reste est ignoré ; un nouveau closeur démarre toujours en gratuit.
    """
    doc = {
        "role": ROLE_CLOSER,
        "email": normalize_email(email),
        "password_hash": generate_password_hash(password),
        "product_types": [],
        "contract_types": [],
    }
    doc.update(_editable(profile))
    doc.update({
        "is_premium": False,
        "stripe_customer_id": None,
        "stripe_subscription_id": None,
        "created_at": datetime.now(timezone.utc),
    })
    return _insert_account(db, doc)


def _editable(data: dict) -> dict:
    return {k: v for k, v in (data or {}).items() if k in EDITABLE_FIELDS}


def update_closer_profile(db, closer_id, data: dict) -> bool:
    """
    Mise à jour atomique ($set) des seuls champs de profil : une mise à jour
    concurrente de l'abonnement par un webhook n'est jamais écrasée.
    """
    oid = to_object_id(closer_id)
    updates = _editable(data)
    if oid is None or not updates:
        return False
    res = db.accounts.update_one({"_id": oid, "role": ROLE_CLOSER}, {"$set": updates})
    return res.matched_count == 1


def get_account(db, account_id, role=None, public=False):
    oid = to_object_id(account_id)
    if oid is None:
        return None
    query = {"_id": oid}
    if role:
        query["role"] = role
    return db.accounts.find_one(query, PRIVATE_FIELDS if public else None)


def find_by_email(db, email):
    return db.accounts.find_one({"email": normalize_email(email)})
