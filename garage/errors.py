"""
Erreurs metier / Domain errors.

Les routes laissent remonter ces exceptions ; main.py les traduit en reponses HTTP.
Routes let these propagate; main.py maps them to HTTP responses.
"""


class GarageError(Exception):
    """Erreur de base / Base error."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(GarageError):
    """Entree invalide, rien n'est persiste / Invalid input, nothing persisted."""

    status_code = 422


class NotFoundError(GarageError):
    """Enregistrement introuvable / Referenced record does not exist."""

    status_code = 404


class StoreUnavailableError(GarageError):
    """La base de donnees ne repond pas / Record store call failed."""

    status_code = 503


class MediaHostError(GarageError):
    """Echec de l'envoi vers l'hebergeur media / Media host upload failed."""

    status_code = 502


class IdentityError(GarageError):
    """Jeton d'identite refuse / Identity provider rejected the sign-in."""

    status_code = 401
