# marketplace/models/user.py
# Adaptateur léger pour utiliser un document "sessions" comme "User" avec Flask-Login.

from flask_login import UserMixin

ROLE_CLOSER = "closer"
ROLE_COMPANY = "company"
ROLES = (ROLE_CLOSER, ROLE_COMPANY)


class SessionUser(UserMixin):
    """
    UserMixin fournit :
      - is_authenticated / is_active / is_anonymous
      - get_id() -> ici on expose le jeton de session, pas l'id du compte.
    Flask-Login stocke ce jeton opaque dans le cookie signé ; tout le reste
    (rôle, nom, premium) reste côté serveur dans la collection "sessions".
    """
    def __init__(self, doc):
        self.token = doc["_id"]
        self.account_id = str(doc["account_id"])
        self.role = doc["role"]
        self.name = doc.get("name", "")
        self.is_premium = bool(doc.get("is_premium", False))

    def get_id(self):
        return self.token

    @property
    def is_closer(self) -> bool:
        return self.role == ROLE_CLOSER

    @property
    def is_company(self) -> bool:
        return self.role == ROLE_COMPANY
