# marketplace/offers.py
# -----------------------------------------------------------------------------
# Job board : offres publiées par les entreprises, candidatures des closeurs.
#
#   - company_name est recopié à la création (pas resynchronisé ensuite).
#   - Candidater = $addToSet atomique : deux fois = une fois, et deux
#     candidatures simultanées ne s'écrasent pas.
#   - Une entreprise ne voit / supprime que SES offres : l'offre d'un autre
#     et une offre inexistante donnent exactement le même résultat (None).
# -----------------------------------------------------------------------------

from datetime import datetime, timezone
from flask import current_app

from marketplace.accounts import to_object_id, get_account, PRIVATE_FIELDS
from marketplace.models.closer import MISSION_TYPES
from marketplace.models.user import ROLE_CLOSER, ROLE_COMPANY


def create_offer(db, company_id, data: dict):
    company = get_account(db, company_id, role=ROLE_COMPANY)
    if company is None:
        return None
    mission_type = data.get("mission_type")
    doc = {
        "company_id": company["_id"],
        "company_name": company.get("company_name", ""),
        "title": (data.get("title") or "").strip(),
        "description": (data.get("description") or "").strip(),
        "remuneration": (data.get("remuneration") or "").strip(),
        "niche": (data.get("niche") or "").strip(),
        "mission_type": mission_type if mission_type in MISSION_TYPES else "LongTerm",
        "applicants": [],
        "created_at": datetime.now(timezone.utc),
    }
    res = db.offers.insert_one(doc)
    doc["_id"] = res.inserted_id
    current_app.logger.info(f"[Offers] offre {res.inserted_id} créée par {company['_id']}")
    return doc


def list_offers(db, mission_type=None) -> list:
    query = {}
    if mission_type in MISSION_TYPES:
        query["mission_type"] = mission_type
    return list(db.offers.find(query).sort([("created_at", -1), ("_id", -1)]))


def list_company_offers(db, company_id) -> list:
    oid = to_object_id(company_id)
    if oid is None:
        return []
    return list(db.offers.find({"company_id": oid}).sort([("created_at", -1), ("_id", -1)]))


def list_applied_offers(db, closer_id) -> list:
    oid = to_object_id(closer_id)
    if oid is None:
        return []
    return list(db.offers.find({"applicants": oid}).sort([("created_at", -1), ("_id", -1)]))


def apply(db, offer_id, closer_id) -> bool:
    """
    Ajoute le closeur aux candidats. Renvoie False si l'offre n'existe pas
    (pas d'erreur), True sinon, y compris quand il avait déjà candidaté.
    """
    offer_oid = to_object_id(offer_id)
    closer_oid = to_object_id(closer_id)
    if offer_oid is None or closer_oid is None:
        return False
    res = db.offers.update_one({"_id": offer_oid}, {"$addToSet": {"applicants": closer_oid}})
    return res.matched_count == 1


def find_owned_offer(db, offer_id, company_id):
    offer_oid = to_object_id(offer_id)
    company_oid = to_object_id(company_id)
    if offer_oid is None or company_oid is None:
        return None
    return db.offers.find_one({"_id": offer_oid, "company_id": company_oid})


def list_applicants(db, offer_id, company_id):
    """
    (offre, profils des candidats) si l'offre appartient à l'entreprise,
    sinon None : même réponse pour "inexistante" et "pas à toi".
    """
    offer = find_owned_offer(db, offer_id, company_id)
    if offer is None:
        return None
    ids = offer.get("applicants") or []
    if not ids:
        return offer, []
    closers = list(db.accounts.find({"_id": {"$in": ids}, "role": ROLE_CLOSER}, PRIVATE_FIELDS))
    return offer, closers


def delete_owned_offer(db, offer_id, company_id) -> bool:
    # propriété vérifiée dans le même filtre que la suppression
    offer_oid = to_object_id(offer_id)
    company_oid = to_object_id(company_id)
    if offer_oid is None or company_oid is None:
        return False
    res = db.offers.delete_one({"_id": offer_oid, "company_id": company_oid})
    if res.deleted_count:
        current_app.logger.info(f"[Offers] offre {offer_oid} supprimée")
    return res.deleted_count == 1
