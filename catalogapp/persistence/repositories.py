"""
Implémentation du "Repository Pattern" pour l'accès aux données.

Le repository encapsule les requêtes SQLAlchemy sur la table `books` afin de
découpler la logique métier de l'accès direct aux données.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models_sa import Book


class BookRepository:
    """Gestionnaire d'accès aux objets Book dans la base de données."""

    def __init__(self, session: Session):
        """Initialise le repository avec une session SQLAlchemy."""
        self.session = session

    def list(self) -> list[Book]:
        """Retourne tous les livres, sans ordre garanti."""
        return list(self.session.execute(select(Book)).scalars().all())

    def get(self, ean: str) -> Book | None:
        """Récupère un livre par son EAN."""
        return self.session.get(Book, ean)

    def put(self, book: Book) -> Book:
        """
        Insère ou remplace un livre (upsert sur la clé `ean`).

        `merge` recopie tous les attributs de l'objet transmis sur la ligne
        existante, ou crée la ligne si l'EAN est inconnu.
        """
        return self.session.merge(book)

    def delete(self, book: Book) -> None:
        """Supprime un livre de la session."""
        self.session.delete(book)
