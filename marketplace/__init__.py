# marketplace/__init__.py

# Crée l'application Flask, attache la DB, configure Flask-Login (sessions),
# enregistre les blueprints (routes).

import os
from flask import Flask, render_template, current_app
from flask_wtf.csrf import CSRFError, generate_csrf
from werkzeug.exceptions import HTTPException
from dotenv import load_dotenv

from config import CONFIGS, DevelopmentConfig
from marketplace.extensions import csrf, login_manager
from marketplace.dataBase import init_db
from marketplace.routes import register_blueprints
from marketplace.sessions import load_session
from marketplace.models.closer import PROFILE_TYPES, MARKETS, AVAILABILITIES, MISSION_TYPES


def create_app(config_object=None, db=None):
    """
    config_object : classe de config (sinon choisie via APP_ENV)
    db            : Database déjà prête (tests), sinon MongoClient depuis MONGO_URI
    """
    app = Flask(__name__)
    load_dotenv()
    if config_object is None:
        config_object = CONFIGS.get(os.getenv("APP_ENV", "development"), DevelopmentConfig)
    app.config.from_object(config_object)

    # Petit log utile
    if (app.config.get("STRIPE_SECRET_KEY") or "").startswith("sk_"):
        app.logger.info("[Stripe] Secret présent.")
    else:
        app.logger.warning("[Stripe] Secret manquante/invalide, abonnement désactivé.")
    if not app.config.get("STRIPE_WEBHOOK_SECRET"):
        app.logger.warning("[Stripe] STRIPE_WEBHOOK_SECRET absent, webhook inactif.")

    #    ==========  DB/ EXTENSIONS =================    #
    # Attache la DB sur l'objet app (pratique pour y accéder dans les routes)
    app.db = init_db(app, db)

    # -----  Initialisation des extentions ------ #
    csrf.init_app(app)

    # Si une vue est protégée, on redirige ici si non connecté
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"
    login_manager.login_message = "Veuillez vous connecter pour continuer."
    login_manager.login_message_category = "info"

    register_blueprints(app)

    @login_manager.user_loader
    def load_user(token):
        """
        Flask-Login appelle cette fonction à chaque requête avec le jeton
        stocké dans le cookie signé ; on relit la session côté serveur.
        """
        return load_session(current_app.db, token)

    # Permet d'appeler {{ csrf_token() }} dans n’importe quel template Jinja
    @app.context_processor
    def inject_globals():
        return dict(
            csrf_token=generate_csrf,
            labels={
                "profile_type": PROFILE_TYPES,
                "market": MARKETS,
                "availability": AVAILABILITIES,
                "mission_type": MISSION_TYPES,
            },
        )

    #--- Les differents types d'erreurs ----
    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        current_app.logger.warning(f"CSRF error: {getattr(e, 'description', e)}")
        return render_template("error.html", message=e.description), 400

    @app.errorhandler(404)
    def page_not_found(error):
        return render_template("error.html", message="La page que vous cherchez est introuvable."), 404

    @app.errorhandler(500)
    def internal_server_error(error):
        current_app.logger.error(f"Erreur 500 : {error}")
        return render_template("error.html", message="Une erreur interne est survenue."), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        # 405, 413... : on laisse Werkzeug répondre normalement
        if isinstance(error, HTTPException):
            return error
        current_app.logger.exception("Une erreur inattendue s'est produite.")
        return render_template("error.html", message="Quelque chose s'est mal passé."), 500

    return app
