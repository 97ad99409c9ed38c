"""
Erreurs métier levées par les services.

Chaque erreur porte le code HTTP correspondant ; main.py les convertit
en réponse JSON {"detail": ...} via un exception handler unique.
"""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Champ obligatoire vide ou trop court, données incohérentes."""
    status_code = 422


class NotFoundError(ServiceError):
    """Document référencé introuvable."""
    status_code = 404


class ForbiddenError(ServiceError):
    """L'appelant n'est pas le propriétaire du document."""
    status_code = 403


class ConflictError(ServiceError):
    """Activité déjà existante pour cette classe à cette date."""
    status_code = 409
