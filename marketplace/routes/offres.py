# marketplace/routes/offres.py

# Job board : les entreprises publient, les closeurs candidatent.
# Une offre qui n'existe pas et l'offre d'une autre entreprise -> même 404.

from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app, abort
from flask_login import current_user

from marketplace.access import role_required
from marketplace.accounts import to_object_id
from marketplace.forms.offer_forms import OfferForm
from marketplace.models.closer import MISSION_TYPES
from marketplace.models.user import ROLE_CLOSER, ROLE_COMPANY
from marketplace import offers as offers_store

bp = Blueprint("offres", __name__, url_prefix="/offers")


##### -------------------- LISTE --------------------     ##############
@bp.get("/")
@role_required()
def liste():
    mission_type = request.args.get("missionType")
    rows = offers_store.list_offers(current_app.db, mission_type)
    me = to_object_id(current_user.account_id) if current_user.is_closer else None
    return render_template(
        "offres/liste.html",
        offers=rows,
        me=me,
        mission_types=MISSION_TYPES,
        mission_type=mission_type if mission_type in MISSION_TYPES else None,
    )


# -------------------- CRÉATION (entreprise) --------------------
@bp.route("/new", methods=["GET", "POST"])
@role_required(ROLE_COMPANY)
def new():
    form = OfferForm()
    if request.method == "POST":
        if not form.validate():
            flash("Merci de corriger le formulaire.", "warning")
            return render_template("offres/new.html", form=form), 400
        offer = offers_store.create_offer(current_app.db, current_user.account_id, form.data)
        if offer is None:
            abort(404)
        flash("Offre publiée.", "success")
        return redirect(url_for("dashboard.company"))
    return render_template("offres/new.html", form=form)


# -------------------- CANDIDATURE (closeur) --------------------
@bp.post("/<offer_id>/apply")
@role_required(ROLE_CLOSER)
def apply(offer_id):
    if offers_store.apply(current_app.db, offer_id, current_user.account_id):
        flash("Candidature envoyée.", "success")
    else:
        flash("Cette offre n'existe plus.", "warning")
    return redirect(url_for("offres.liste"))


# -------------------- CANDIDATS (entreprise propriétaire) --------------------
@bp.get("/<offer_id>/applicants")
@role_required(ROLE_COMPANY)
def applicants(offer_id):
    found = offers_store.list_applicants(current_app.db, offer_id, current_user.account_id)
    if found is None:
        abort(404)
    offer, closers = found
    return render_template("offres/applicants.html", offer=offer, closers=closers)


# -------------------- SUPPRESSION (entreprise propriétaire) --------------------
@bp.post("/<offer_id>/delete")
@role_required(ROLE_COMPANY)
def delete(offer_id):
    if not offers_store.delete_owned_offer(current_app.db, offer_id, current_user.account_id):
        abort(404)
    flash("Offre supprimée.", "success")
    return redirect(url_for("dashboard.company"))
