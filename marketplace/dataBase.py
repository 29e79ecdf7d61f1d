# marketplace/dataBase.py
# -----------------------------------------------------------------------------
# Connexion MongoDB centralisée et création des index indispensables.
#
# Points clés :
#   - Le client PyMongo est tz-aware (UTC) -> toutes les datetimes sont "aware".
#   - Une seule collection "accounts" pour les closeurs ET les entreprises,
#     avec un champ "role" : l'unicité de l'email est garantie par l'index,
#     tous rôles confondus.
#   - Les sessions expirées sont purgées par Mongo (index TTL).
#   - Les index sont créés au démarrage (idempotent).
# -----------------------------------------------------------------------------

import os
import atexit
from datetime import timezone
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.errors import OperationFailure
from bson.tz_util import utc           # tzinfo UTC → datetimes "aware"


def init_db(app, db=None):
    """
    Initialise Mongo et attache :
      - app.mongo_client : le MongoClient partagé
      - app.db           : la Database (par défaut 'closers')

    On peut injecter une Database déjà prête (tests : mongomock).
    On retourne aussi la DB pour pouvoir faire : app.db = init_db(app)
    """
    if db is not None:
        app.mongo_client = db.client
        app.db = db
        ensure_minimum_indexes(db)
        return db

    # Si Déjà initialisé ? -> on réutilise
    if getattr(app, "mongo_client", None) is not None and getattr(app, "db", None) is not None:
        return app.db

    uri = app.config.get("MONGO_URI") or os.getenv("MONGO_URI") or "mongodb://mongo:27017"

    # Client tz-aware (UTC) + timeout court pour "fail fast" si souci réseau
    client = MongoClient(uri, tz_aware=True, tzinfo=utc, serverSelectionTimeoutMS=3000)

    # DB depuis l'URI si présente (/closers) sinon fallback sur la config
    db = client.get_default_database(default=app.config.get("MONGO_DB_NAME") or "closers")

    app.mongo_client = client
    app.db = db

    # Fermer proprement le client à l'arrêt du process
    atexit.register(client.close)

    ensure_minimum_indexes(db)
    return db


def ensure_minimum_indexes(db):
    """
    Crée les index critiques au démarrage.
    Idempotent : si l'index existe déjà avec d'autres options, on le recrée.
    """
    if db is None:
        raise RuntimeError("Database non initialisée (db=None)")

    # --- ACCOUNTS (closeurs + entreprises) ---
    db.accounts.create_index([("email", ASCENDING)], unique=True, name="uniq_email")
    db.accounts.create_index([("role", ASCENDING)], name="idx_account_role")
    # Tri de l'annuaire : premium d'abord
    db.accounts.create_index(
        [("is_premium", DESCENDING), ("total_closed", DESCENDING)], name="idx_closer_best"
    )
    db.accounts.create_index(
        [("is_premium", DESCENDING), ("created_at", DESCENDING)], name="idx_closer_recent"
    )
    # Les événements Stripe retrouvent le closeur par son customer id
    db.accounts.create_index([("stripe_customer_id", ASCENDING)], name="idx_stripe_customer")

    # --- OFFERS ---
    db.offers.create_index([("company_id", ASCENDING)], name="idx_offer_company")
    db.offers.create_index([("created_at", DESCENDING)], name="idx_offer_created")

    # --- SESSIONS ---
    # Mongo purge tout seul les sessions arrivées à expires_at
    try:
        db.sessions.create_index([("expires_at", ASCENDING)], expireAfterSeconds=0, name="ttl_expires_at")
    except OperationFailure as e:
        if e.code == 85:  # IndexOptionsConflict
            db.sessions.drop_index("ttl_expires_at")
            db.sessions.create_index([("expires_at", ASCENDING)], expireAfterSeconds=0, name="ttl_expires_at")
        else:
            raise
    db.sessions.create_index([("account_id", ASCENDING)], name="idx_session_account")


def as_utc(value):
    """Force tzinfo=UTC sur une date si Mongo la renvoie naïve."""
    if value is not None and getattr(value, "tzinfo", None) is None:
        return value.replace(tzinfo=timezone.utc)
    return value
