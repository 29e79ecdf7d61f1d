# marketplace/routes/auth.py

# Les vues d'authentification. On y manipule :
# - le store des comptes (création et recherche)
# - les sessions serveur (marketplace.sessions) et Flask-Login via login_user() / logout_user()

from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app
from flask_login import login_user, logout_user, current_user
from urllib.parse import urlparse, urljoin

from marketplace.access import landing_url
from marketplace.accounts import register_closer, register_company
from marketplace.exceptions import EmailAlreadyUsed, InvalidCredentials
from marketplace.forms.auth_forms import LoginForm, RegisterCloserForm, RegisterCompanyForm
from marketplace.sessions import authenticate, open_session, close_session, session_lifetime
from marketplace.uploads import save_upload

bp = Blueprint("auth", __name__)


# -- permet d'éviter les redirections externes (pour la securité)
def is_safe_url(target: str) -> bool:
    """
    On n'autorise que des redirections vers NOTRE domaine.
    Ça évite qu'un lien malicieux envoie l'utilisateur ailleurs.
    """
    if not target:
        return False
    ref_url = urlparse(request.host_url)
    test_url = urlparse(urljoin(request.host_url, target))
    return (
        test_url.scheme in ("http", "https") and ref_url.netloc == test_url.netloc
    )


def _clean_next(value: str | None) -> str | None:
    """Évite les cas 'None', 'null', 'undefined' -> None"""
    if not value:
        return None
    if value.strip().lower() in {"none", "null", "undefined"}:
        return None
    return value


def _start_session(account):
    """Ouvre la session serveur et pose le cookie (jeton opaque)."""
    user = open_session(current_app.db, account)
    login_user(user, remember=True, duration=session_lifetime())
    return user


def _redirect_after_login(user):
    # On respecte le "next" s'il est sûr ; sinon -> page d'accueil du rôle
    next_url = _clean_next(request.form.get("next") or request.args.get("next"))
    return redirect(next_url) if is_safe_url(next_url) else redirect(landing_url(user))


@bp.get("/register-choice")
def register_choice():
    if current_user.is_authenticated:
        return redirect(landing_url(current_user))
    return render_template("auth/choice.html")


# ---------------------------
#   INSCRIPTION ENTREPRISE
# ---------------------------
@bp.route("/register/company", methods=["GET", "POST"])
def register_company_view():
    if current_user.is_authenticated:
        return redirect(landing_url(current_user))

    form = RegisterCompanyForm()
    if request.method == "POST":
        if not form.validate():
            flash("Merci de corriger le formulaire.", "warning")
            return render_template("auth/register_company.html", form=form), 400
        try:
            account = register_company(
                current_app.db, form.company_name.data, form.email.data, form.password.data
            )
        except EmailAlreadyUsed:
            flash("Cet email est déjà utilisé.", "warning")
            return render_template("auth/register_company.html", form=form), 409

        # auto-login avec le compte qu'on vient de créer
        user = _start_session(account)
        flash("Bienvenue ! Votre compte entreprise a été créé.", "success")
        return redirect(landing_url(user))

    return render_template("auth/register_company.html", form=form)


# ---------------------------
#   INSCRIPTION CLOSEUR
# ---------------------------
@bp.route("/register/closer", methods=["GET", "POST"])
def register_closer_view():
    if current_user.is_authenticated:
        return redirect(landing_url(current_user))

    form = RegisterCloserForm()
    if request.method == "POST":
        if not form.validate():
            flash("Merci de corriger le formulaire.", "warning")
            return render_template("auth/register_closer.html", form=form), 400

        profile = form.profile_data()
        profile["photo_url"] = (
            save_upload(form.photo.data, "photo") or current_app.config["PLACEHOLDER_PHOTO_URL"]
        )
        try:
            account = register_closer(current_app.db, form.email.data, form.password.data, profile)
        except EmailAlreadyUsed:
            flash("Cet email est déjà utilisé.", "warning")
            return render_template("auth/register_closer.html", form=form), 409

        user = _start_session(account)
        flash("Bienvenue ! Votre profil closeur est en ligne.", "success")
        return redirect(landing_url(user))

    return render_template("auth/register_closer.html", form=form)


# ----------------------
#   CONNEXION /login
# ----------------------
@bp.route("/login", methods=["GET", "POST"])
def login():
    # Déjà connecté·e ? Direction sa page d'accueil.
    if current_user.is_authenticated:
        return redirect(landing_url(current_user))

    form = LoginForm()
    if request.method == "POST":
        if not form.validate():
            flash("Email et mot de passe sont requis.", "warning")
            return render_template("auth/login.html", form=form), 400

        try:
            account = authenticate(current_app.db, form.email.data, form.password.data)
        except InvalidCredentials:
            # même message que l'email existe ou non
            flash("Identifiants invalides.", "danger")
            return render_template("auth/login.html", form=form), 401

        user = _start_session(account)
        flash("Connexion réussie.", "success")
        return _redirect_after_login(user)

    return render_template("auth/login.html", form=form)


# ------------------------
#   DÉCONNEXION /logout
# ------------------------
@bp.get("/logout")
def logout():
    if current_user.is_authenticated:
        close_session(current_app.db, current_user.get_id())
        logout_user()
        flash("Vous êtes déconnecté.", "info")
    # Retour à l'accueil (non protégé)
    return redirect(url_for("accueil.index"))
