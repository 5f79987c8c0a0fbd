"""
Exceptions métier du moteur de catalogue.

Chaque échec est terminal pour l'action en cours : aucune relance
automatique n'est effectuée, l'utilisateur doit relancer l'action.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Exception de base pour toutes les erreurs du catalogue."""


class ValidationError(CatalogError):
    """Donnée saisie invalide (EAN mal formé, statut inconnu...)."""


class LookupFailure(CatalogError):
    """Le service de métadonnées n'a pas pu répondre ; aucun livre n'est créé."""


class StoreFailure(CatalogError):
    """La couche de persistance a refusé une lecture ou une écriture."""


class PartialBatchFailure(CatalogError):
    """Une opération groupée a échoué en cours de route.

    Les enregistrements déjà traités ne sont pas annulés.
    """

    def __init__(self, succeeded: int, failed: int, cause: Exception | None = None):
        self.succeeded = succeeded
        self.failed = failed
        self.cause = cause
        super().__init__(f"{succeeded} livre(s) traité(s), {failed} en échec : {cause}")
