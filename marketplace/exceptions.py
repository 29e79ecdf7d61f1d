# marketplace/exceptions.py
# Erreurs métier levées par les modules du cœur et converties en
# flash + redirection (ou code HTTP) par les routes.


class MarketplaceError(Exception):
    """Base de toutes les erreurs métier de l'application."""


class EmailAlreadyUsed(MarketplaceError):
    def __init__(self, email: str):
        super().__init__(f"Email déjà utilisé : {email}")
        self.email = email


class InvalidCredentials(MarketplaceError):
    """Email inconnu ou mot de passe faux : on ne dit jamais lequel."""

    def __init__(self):
        super().__init__("Identifiants invalides.")


class BillingUnavailable(MarketplaceError):
    """Stripe injoignable, mal configuré ou signature de webhook invalide."""
