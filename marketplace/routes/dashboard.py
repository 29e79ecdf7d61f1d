# marketplace/routes/dashboard.py

# Toute la section dashboard est protégée : il faut être connecté,
# et chaque dashboard n'est ouvert qu'à son rôle (cf. marketplace.access).

from flask import Blueprint, render_template, redirect, url_for, flash, current_app, abort
from flask_login import current_user

from marketplace.access import role_required, landing_url
from marketplace.accounts import get_account, update_closer_profile
from marketplace.forms.auth_forms import CloserProfileForm
from marketplace.models.user import ROLE_CLOSER, ROLE_COMPANY
from marketplace.offers import list_applied_offers, list_company_offers
from marketplace.sessions import refresh_premium
from marketplace.uploads import save_upload

bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")


@bp.get("/")
@role_required()
def index():
    return redirect(landing_url(current_user))


# -------------------- DASHBOARD CLOSEUR --------------------
@bp.get("/closer")
@role_required(ROLE_CLOSER)
def closer():
    db = current_app.db
    account = get_account(db, current_user.account_id, role=ROLE_CLOSER)
    if account is None:
        abort(404)
    refresh_premium(db, current_user)

    form = CloserProfileForm(data=account)
    return render_template(
        "dashboard/closer.html",
        closer=account,
        form=form,
        applied=list_applied_offers(db, current_user.account_id),
    )


@bp.post("/closer/update")
@role_required(ROLE_CLOSER)
def closer_update():
    db = current_app.db
    form = CloserProfileForm()
    if not form.validate():
        flash("Merci de corriger le formulaire.", "warning")
        account = get_account(db, current_user.account_id, role=ROLE_CLOSER)
        return render_template(
            "dashboard/closer.html",
            closer=account,
            form=form,
            applied=list_applied_offers(db, current_user.account_id),
        ), 400

    updates = form.profile_data()
    photo_url = save_upload(form.photo.data, "photo")
    if photo_url:  # Si nouvelle photo
        updates["photo_url"] = photo_url

    update_closer_profile(db, current_user.account_id, updates)
    flash("Profil mis à jour.", "success")
    return redirect(url_for("dashboard.closer"))


# -------------------- DASHBOARD ENTREPRISE --------------------
@bp.get("/company")
@role_required(ROLE_COMPANY)
def company():
    db = current_app.db
    return render_template(
        "dashboard/company.html",
        offers=list_company_offers(db, current_user.account_id),
    )
