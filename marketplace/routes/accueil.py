# marketplace/routes/accueil.py
from flask import Blueprint, render_template, request, current_app
from flask_login import current_user

from marketplace.directory import DirectoryFilters, find_closers
from marketplace.models.closer import PROFILE_TYPES, MARKETS, MISSION_TYPES, PRODUCT_TYPES, CONTRACT_TYPES
from marketplace.sessions import refresh_premium

bp = Blueprint("accueil", __name__)


@bp.get("/")
def index():
    # Annuaire public : tout le monde peut y accéder, connecté ou non
    db = current_app.db
    if current_user.is_authenticated:
        # le badge premium affiché doit refléter l'état réel, pas celui du login
        refresh_premium(db, current_user)

    filters = DirectoryFilters.from_params(request.args)
    closers = find_closers(db, filters)
    return render_template(
        "accueil.html",
        closers=closers,
        filters=filters.as_dict(),
        profile_types=PROFILE_TYPES,
        markets=MARKETS,
        mission_types=MISSION_TYPES,
        product_types=PRODUCT_TYPES,
        contract_types=CONTRACT_TYPES,
    )


@bp.get("/healthz")
def healthz():
    # Pour Docker/K8s: simple check
    return {"status": "ok"}, 200
