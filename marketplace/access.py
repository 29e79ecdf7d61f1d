# marketplace/access.py
# Contrôle d'accès par rôle, à poser sous @bp.get / @bp.post :
#
#   @role_required("company")   -> entreprises seulement
#   @role_required("closer")    -> closeurs seulement
#   @role_required()            -> n'importe quel utilisateur connecté
#
# Pas connecté : redirection vers auth.login (via Flask-Login).
# Mauvais rôle : redirection vers la page d'accueil de SON rôle, jamais d'erreur.

from functools import wraps
from flask import redirect, url_for, flash
from flask_login import current_user

from marketplace.extensions import login_manager
from marketplace.models.user import ROLE_CLOSER, ROLE_COMPANY

LANDING_PAGES = {
    ROLE_CLOSER: "dashboard.closer",
    ROLE_COMPANY: "dashboard.company",
}


def landing_url(user) -> str:
    endpoint = LANDING_PAGES.get(getattr(user, "role", None), "accueil.index")
    return url_for(endpoint)


def role_required(*roles):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return login_manager.unauthorized()
            if roles and current_user.role not in roles:
                flash("Cette page n'est pas accessible avec votre type de compte.", "warning")
                return redirect(landing_url(current_user))
            return view(*args, **kwargs)
        return wrapped
    return decorator
