"""
Implémentation du pattern "Unit of Work" pour la gestion des transactions.

Ce module fournit une classe `UnitOfWork` qui agit comme un context manager
pour encapsuler une transaction de base de données complète. Elle garantit
que toutes les opérations effectuées dans un bloc `with` sont atomiques.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager

from sqlalchemy.orm import Session

from .repositories import BookRepository


class UnitOfWork(AbstractContextManager):
    """
    Gestionnaire de transaction et d'unité de travail.

    Exemple d'utilisation :
        with UnitOfWork(db.session) as uow:
            book = uow.books.get("9782070612758")
            book.cote = "R SAI"

    Attributs après entrée dans le contexte :
        session (Session): La session SQLAlchemy active pour la transaction.
        books (BookRepository): Le repository pour les livres.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialise l'unité de travail avec une factory de session."""
        self._session_factory = session_factory
        self.session: Session | None = None
        self.books: BookRepository | None = None

    def __enter__(self):
        """Ouvre une session et initialise le repository avec celle-ci."""
        self.session = self._session_factory()
        self.books = BookRepository(self.session)
        return self

    def __exit__(self, exc_type, exc_val, traceback):
        """
        Termine la transaction.

        Effectue un commit si aucune exception n'a été levée dans le bloc `with`.
        Sinon, effectue un rollback. La session est toujours fermée.
        """
        try:
            if exc_type is None:
                self.session.commit()
            else:
                self.session.rollback()
        finally:
            self.session.close()
