# marketplace/models/closer.py
# Valeurs autorisées pour les champs "énumérés" d'un profil closeur.
# La clé est stockée en base, le libellé sert aux formulaires.

PROFILE_TYPES = {
    "Commercial": "Commercial",
    "Closeur": "Closeur",
    "Setter": "Setter",
}

MARKETS = {
    "B2B": "B2B",
    "B2C": "B2C",
    "Both": "B2B et B2C",
}

AVAILABILITIES = {
    "FullTime": "Temps plein",
    "HalfTime": "Mi-temps",
}

MISSION_TYPES = {
    "Mission": "Mission",
    "LongTerm": "Long terme",
}

PRODUCT_TYPES = {
    "Formation": "Formation / Infoproduit",
    "Coaching": "Coaching",
    "SaaS": "SaaS / Logiciel",
    "Immobilier": "Immobilier",
    "Assurance": "Assurance / Finance",
    "Energie": "Énergie",
    "HighTicket": "High-Ticket",
    "Ecommerce": "E-commerce",
}

CONTRACT_TYPES = {
    "Freelance": "Freelance",
    "CDI": "CDI",
    "CDD": "CDD",
    "Commission": "Commission seule",
    "Apport": "Apport d'affaires",
}

# Champs qu'un closeur peut modifier lui-même depuis son dashboard.
# Jamais : email, mot de passe, rôle, is_premium, références Stripe.
EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "photo_url",
    "profile_type",
    "market",
    "availability",
    "years_experience",
    "total_closed",
    "product_types",
    "past_clients",
    "contract_types",
    "desired_income",
    "mission_type",
    "vision",
)


def choices(mapping):
    """Transforme un dict {code: libellé} en liste de choix WTForms."""
    return list(mapping.items())
