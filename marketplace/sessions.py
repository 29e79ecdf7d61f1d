# marketplace/sessions.py
# -----------------------------------------------------------------------------
# Session manager.
#
# Le navigateur ne garde qu'un jeton opaque (via Flask-Login, cookie signé,
# HTTP-only). Le contenu de la session est dans la collection "sessions" :
#   { _id: jeton, account_id, role, name, is_premium, created_at, expires_at }
#
#   Anonyme --(login / inscription)--> Authentifié(rôle, id)
#   Authentifié --(logout / expiration)--> Anonyme
#
# Le flag premium de la session n'est qu'une photo prise au login :
# refresh_premium() le relit depuis "accounts" aux endroits où il compte.
# -----------------------------------------------------------------------------

import secrets
from datetime import datetime, timedelta, timezone
from flask import current_app
from werkzeug.security import check_password_hash

from marketplace.accounts import find_by_email, display_name, get_account
from marketplace.dataBase import as_utc
from marketplace.exceptions import InvalidCredentials
from marketplace.models.user import SessionUser, ROLE_CLOSER, ROLES


def session_lifetime() -> timedelta:
    return timedelta(days=current_app.config.get("SESSION_LIFETIME_DAYS", 60))


def authenticate(db, email: str, password: str):
    """
    Vérifie email + mot de passe et renvoie le compte.
    Un seul message d'échec : on ne révèle ni si l'email existe, ni son rôle.
    """
    account = find_by_email(db, email)
    if not account or not password or not check_password_hash(account.get("password_hash", ""), password):
        current_app.logger.info("[Auth] échec de connexion")
        raise InvalidCredentials()
    return account


def open_session(db, account) -> SessionUser:
    """Matérialise une session pour un compte (login ou auto-login après inscription)."""
    now = datetime.now(timezone.utc)
    doc = {
        "_id": secrets.token_urlsafe(32),
        "account_id": account["_id"],
        "role": account["role"],
        "name": display_name(account),
        "is_premium": bool(account.get("is_premium")) if account["role"] == ROLE_CLOSER else False,
        "created_at": now,
        "expires_at": now + session_lifetime(),
    }
    db.sessions.insert_one(doc)
    return SessionUser(doc)


def load_session(db, token):
    """
    Appelée à chaque requête par le user_loader : le rôle est revalidé
    depuis le store, jamais depuis un cache plus long que la session.
    """
    if not token or not isinstance(token, str):
        return None
    doc = db.sessions.find_one({"_id": token})
    if not doc:
        return None
    if doc.get("role") not in ROLES:
        return None
    # Le TTL Mongo passe environ toutes les minutes : on ne s'y fie pas seul
    if as_utc(doc["expires_at"]) <= datetime.now(timezone.utc):
        db.sessions.delete_one({"_id": token})
        return None
    return SessionUser(doc)


def close_session(db, token) -> None:
    if token:
        db.sessions.delete_one({"_id": token})


def refresh_premium(db, user):
    """
    Relit is_premium depuis le compte et met la session à jour.
    Renvoie la valeur fraîche (False pour une entreprise).
    """
    if user is None or not getattr(user, "is_authenticated", False) or user.role != ROLE_CLOSER:
        return False
    account = get_account(db, user.account_id, role=ROLE_CLOSER)
    fresh = bool(account and account.get("is_premium"))
    if fresh != user.is_premium:
        db.sessions.update_one({"_id": user.token}, {"$set": {"is_premium": fresh}})
        user.is_premium = fresh
    return fresh
