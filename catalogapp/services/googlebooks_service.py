"""
Service pour interroger l'API Google Books.

Ce module fournit l'adaptateur d'enrichissement : à partir d'un EAN, il
renvoie une fiche pré-remplie (titre, auteurs, premier genre) prête à être
enregistrée. Les erreurs de transport ou de décodage ne remontent jamais
sous forme d'exception : le résultat est alors absent (`None`) et aucun
livre ne doit être créé.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Protocol

import requests

from .config_service import GOOGLE_BOOKS_URL
from .types import DEFAULT_TITRE, BookRecord, Statut
from .utils import coerce_genre

logger = logging.getLogger("catalog.services.googlebooks")


class MetadataLookup(Protocol):
    """Capacité injectée : EAN -> fiche pré-remplie, ou None en cas d'échec."""

    def lookup(self, code: str) -> BookRecord | None: ...


class GoogleBooksAdapter:
    """
    Adapte la réponse de l'API Google Books au format `BookRecord`.

    La structure de la réponse est imbriquée ; l'adaptateur extrait les
    informations utiles de manière sûre.
    """

    def __init__(self, item: dict):
        self.item = item
        self.volume_info = item.get("volumeInfo", {}) or {}

    def to_record(self, ean: str, today: date) -> BookRecord:
        """Convertit les données de l'API en fiche à cataloguer."""
        return BookRecord(
            ean=ean,
            titre=self.volume_info.get("title") or DEFAULT_TITRE,
            auteur=", ".join(self.volume_info.get("authors") or []),
            genre=self._get_genre(),
            cote="",
            statut=Statut.a_cataloguer,
            date_entree=today,
        )

    def _get_genre(self):
        """Premier genre fourni par l'API, s'il fait partie des genres reconnus."""
        categories = self.volume_info.get("categories") or []
        if not categories:
            return None
        genre = coerce_genre(categories[0])
        if genre is None:
            logger.debug("Catégorie Google Books non reconnue ignorée: %s", categories[0])
        return genre


def placeholder_record(ean: str, today: date) -> BookRecord:
    """Fiche minimale quand l'API ne connaît pas l'EAN."""
    return BookRecord(ean=ean, titre=DEFAULT_TITRE, date_entree=today)


class GoogleBooksService:
    """Service client pour l'API Google Books."""

    def __init__(
        self,
        timeout: int = 10,
        api_url: str = GOOGLE_BOOKS_URL,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialise le service.

        Args:
            timeout (int): Timeout en secondes pour les requêtes HTTP.
            api_url (str): Point d'accès de l'API (modifiable pour les tests).
            today: Horloge donnant la date d'entrée des nouvelles fiches.
        """
        self.timeout = timeout
        self.api_url = api_url
        self.today = today

    def lookup(self, code: str) -> BookRecord | None:
        """
        Recherche un livre par son EAN.

        Returns:
            Une fiche pré-remplie (fiche minimale si l'EAN est inconnu de
            l'API), ou `None` si l'appel lui-même a échoué.
        """
        params = {"q": f"isbn:{code}"}
        try:
            response = requests.get(self.api_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error("Erreur de connexion à l'API Google Books: %s", e)
            return None
        except ValueError as e:
            logger.error("Réponse Google Books illisible pour %s: %s", code, e)
            return None

        items = data.get("items") if isinstance(data, dict) else None
        if not items:
            logger.warning("Aucun résultat Google Books pour l'EAN %s", code)
            return placeholder_record(code, self.today())

        return GoogleBooksAdapter(items[0]).to_record(code, self.today())
