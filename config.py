# config.py

# Ce fichier centralise la configuration de l’appli.

import os


def _lifetime_days() -> int:
    """Durée de vie d'une session en jours, bornée entre 30 et 60."""
    try:
        days = int(os.getenv("SESSION_LIFETIME_DAYS", 60))
    except ValueError:
        days = 60
    return min(60, max(30, days))


class Config:
    # Clé Flask sert à signer les cookies de session (Flask-Login)
    # et à protéger les formulaires (CSRF).
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

    # Mongo: en docker on utilise le nom du service "mongo"
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://mongo:27017")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "closers")

    # CSRF activé (Flask-WTF)
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None
    WTF_CSRF_SSL_STRICT = False

    # Cookies : le navigateur ne garde qu'un jeton opaque
    SESSION_LIFETIME_DAYS = _lifetime_days()
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = "Lax"
    REMEMBER_COOKIE_SECURE = False

    # Stripe pour l'abonnement premium
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_PRICE_ID = os.getenv("STRIPE_PRICE_ID", "")
    STRIPE_SUCCESS_URL = os.getenv("STRIPE_SUCCESS_URL", "http://localhost:5000/dashboard/closer")
    STRIPE_CANCEL_URL = os.getenv("STRIPE_CANCEL_URL", "http://localhost:5000/dashboard/closer")
    STRIPE_PORTAL_RETURN_URL = os.getenv("STRIPE_PORTAL_RETURN_URL", "http://localhost:5000/dashboard/closer")

    # Photos de profil (stockées sous static/uploads)
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "")
    PLACEHOLDER_PHOTO_URL = "https://via.placeholder.com/150"
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True


class TestingConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    SECRET_KEY = "test-secret-key"
    MONGO_DB_NAME = "closers_test"
    STRIPE_SECRET_KEY = ""
    STRIPE_WEBHOOK_SECRET = "whsec_test"
    STRIPE_PRICE_ID = "price_test"


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
