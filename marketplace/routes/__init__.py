# marketplace/routes/__init__.py

# Centralise l'enregistrement des ensembles de routes (blueprints).


def register_blueprints(app):
    # En important ici, on evite les imports circulaires
    from .accueil import bp as home_bp
    from .auth import bp as auth_bp
    from .dashboard import bp as dashboard_bp
    from .offres import bp as offers_bp
    from marketplace.paiements import bp as payments_bp

    app.register_blueprint(home_bp)        # annuaire public (Accueil)
    app.register_blueprint(auth_bp)        # login / register / logout
    app.register_blueprint(dashboard_bp)   # dashboards closeur / entreprise (protégés)
    app.register_blueprint(offers_bp)      # job board (protégé)
    app.register_blueprint(payments_bp)    # abonnement Stripe + webhook
