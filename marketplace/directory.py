# marketplace/directory.py
# -----------------------------------------------------------------------------
# Annuaire des closeurs : transforme les paramètres de la query string
# (non fiables) en filtre Mongo sûr + tri déterministe.
#
#   - Les valeurs sont lues UNE fois ici (DirectoryFilters.from_params) :
#     valeur unique ou liste, tout devient une liste de chaînes.
#   - Seules des chaînes arrivent dans la requête, échappées pour les regex :
#     pas d'injection d'opérateur ($ne, $where...).
#   - Valeur absente, vide ou mal formée -> pas de contrainte, jamais d'erreur.
#   - Clé inconnue -> ignorée.
#   - Premium toujours en premier, quel que soit le tri.
# -----------------------------------------------------------------------------

import re
from dataclasses import dataclass, field

from marketplace.accounts import PRIVATE_FIELDS
from marketplace.models.closer import PROFILE_TYPES, MARKETS, MISSION_TYPES
from marketplace.models.user import ROLE_CLOSER

SORT_DEFAULT = "default"
SORT_BEST = "best"

SORTS = {
    SORT_BEST: [("is_premium", -1), ("total_closed", -1), ("_id", -1)],
    SORT_DEFAULT: [("is_premium", -1), ("created_at", -1), ("_id", -1)],
}

# clé du formulaire -> (champ Mongo, valeurs autorisées)
ENUM_FILTERS = {
    "profileType": ("profile_type", PROFILE_TYPES),
    "market": ("market", MARKETS),
    "missionType": ("mission_type", MISSION_TYPES),
}

MAX_INT64 = 2**63 - 1

# seuils minimums ("au moins N")
MIN_FILTERS = {
    "yearsExperience": "years_experience",
    "totalClosed": "total_closed",
    "revenueMin": "total_closed",
}


def _values(params, key) -> list:
    """Toutes les valeurs non vides d'une clé, que params soit un MultiDict ou un dict."""
    if params is None:
        return []
    if hasattr(params, "getlist"):
        raw = params.getlist(key)
    else:
        raw = params.get(key)
        if raw is None:
            raw = []
        elif not isinstance(raw, (list, tuple, set)):
            raw = [raw]
    out = []
    for v in raw:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str) and v.strip():
            out.append(v.strip())
    return out


def _first(params, key):
    vals = _values(params, key)
    return vals[0] if vals else None


def _parse_min(value):
    """Entier >= 0, ou None si la valeur n'en est pas un."""
    if value is None:
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    # au-delà d'un int64, BSON ne sait pas encoder la valeur
    return n if 0 <= n <= MAX_INT64 else None


def _contains(value: str) -> dict:
    return {"$regex": re.escape(value), "$options": "i"}


@dataclass
class DirectoryFilters:
    product: str = None
    skill: str = None
    profile_type: str = None
    market: str = None
    mission_type: str = None
    product_types: list = field(default_factory=list)
    contract_type: str = None
    minimums: dict = field(default_factory=dict)
    sort: str = SORT_DEFAULT

    @classmethod
    def from_params(cls, params):
        enums = {}
        for key, (_, allowed) in ENUM_FILTERS.items():
            value = _first(params, key)
            enums[key] = value if value in allowed else None

        minimums = {}
        for key in MIN_FILTERS:
            n = _parse_min(_first(params, key))
            if n is not None:
                minimums[key] = n

        sort = _first(params, "sort")
        return cls(
            product=_first(params, "product"),
            skill=_first(params, "skill"),
            profile_type=enums["profileType"],
            market=enums["market"],
            mission_type=enums["missionType"],
            # dédoublonné, ordre conservé
            product_types=list(dict.fromkeys(_values(params, "productTypes"))),
            contract_type=_first(params, "contractType"),
            minimums=minimums,
            sort=sort if sort in SORTS else SORT_DEFAULT,
        )

    def to_query(self) -> dict:
        clauses = []
        if self.product:
            clauses.append({"product_types": _contains(self.product)})
        if self.skill:
            clauses.append({"product_types": _contains(self.skill)})
        for key, (mongo_field, _) in ENUM_FILTERS.items():
            value = self._enum_value(key)
            if value:
                clauses.append({mongo_field: value})
        if self.product_types:
            clauses.append({"product_types": {"$in": self.product_types}})
        if self.contract_type:
            clauses.append({"contract_types": _contains(self.contract_type)})
        for key, n in self.minimums.items():
            clauses.append({MIN_FILTERS[key]: {"$gte": n}})

        query = {"role": ROLE_CLOSER}
        if clauses:
            query["$and"] = clauses
        return query

    def sort_spec(self) -> list:
        return SORTS[self.sort]

    def _enum_value(self, key):
        return {
            "profileType": self.profile_type,
            "market": self.market,
            "missionType": self.mission_type,
        }[key]

    def as_dict(self) -> dict:
        """Pour ré-afficher les filtres actifs dans le formulaire."""
        out = {
            "product": self.product,
            "skill": self.skill,
            "profileType": self.profile_type,
            "market": self.market,
            "missionType": self.mission_type,
            "productTypes": self.product_types,
            "contractType": self.contract_type,
            "sort": self.sort,
        }
        out.update(self.minimums)
        return out


def find_closers(db, params) -> list:
    """Closeurs filtrés et triés, sans les champs privés (hash, Stripe)."""
    filters = params if isinstance(params, DirectoryFilters) else DirectoryFilters.from_params(params)
    cursor = db.accounts.find(filters.to_query(), PRIVATE_FIELDS).sort(filters.sort_spec())
    return list(cursor)
