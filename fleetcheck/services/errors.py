"""Erreurs metier checklist / Checklist domain errors.

Traduites en 409 / 422 / 404 par les handlers de main.py.
Mapped to 409 / 422 / 404 by the handlers in main.py.
"""


class ChecklistError(Exception):
    """Erreur metier de base / Base domain error."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(ChecklistError):
    """Etat incompatible (checklist deja ouvert, deja ferme...) / Conflicting state."""

    status_code = 409


class ChecklistValidationError(ChecklistError):
    """Donnees invalides (km, items manquants...) / Invalid input."""

    status_code = 422


class NotFoundError(ChecklistError):
    """Checklist, vehicule ou template introuvable / Entity not found."""

    status_code = 404
