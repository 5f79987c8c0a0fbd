"""
Magasin persistant des fiches de livres.

`RecordStore` expose les primitives put / get / get_all / delete, plus la
mise à jour partielle `update` (lecture, fusion, écriture dans une même
transaction). Chaque appel est une transaction indépendante : une suite
d'appels n'est donc pas atomique.

Toute erreur SQLAlchemy est convertie en `StoreFailure`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from ..services.errors import StoreFailure
from ..services.types import BookRecord, FieldPatch
from .database import Database
from .models_sa import Book
from .unit_of_work import UnitOfWork

logger = logging.getLogger("catalog.persistence.store")


def to_record(book: Book) -> BookRecord:
    """Convertit une ligne ORM en fiche immuable."""
    return BookRecord(
        ean=book.ean,
        titre=book.titre,
        auteur=book.auteur or "",
        genre=book.genre,
        cote=book.cote or "",
        statut=book.statut,
        date_entree=book.date_entree,
    )


def to_row(record: BookRecord) -> Book:
    """Convertit une fiche en objet ORM (tous les champs sont recopiés)."""
    return Book(
        ean=record.ean,
        titre=record.titre,
        auteur=record.auteur,
        genre=record.genre,
        cote=record.cote,
        statut=record.statut,
        date_entree=record.date_entree,
    )


class RecordStore:
    """Persistance clé/valeur des fiches, indexée par EAN."""

    def __init__(self, database: Database):
        self.database = database

    @contextmanager
    def _transaction(self, action: str) -> Iterator[UnitOfWork]:
        try:
            with UnitOfWork(self.database.session) as uow:
                yield uow
        except SQLAlchemyError as e:
            logger.error("Échec de l'opération '%s' sur la base: %s", action, e)
            raise StoreFailure(f"Échec de l'opération '{action}' : {e}") from e

    def put(self, record: BookRecord) -> None:
        """Insère ou remplace entièrement la fiche de même EAN."""
        with self._transaction("put") as uow:
            uow.books.put(to_row(record))
        logger.debug("put %s", record.ean)

    def get(self, ean: str) -> BookRecord | None:
        """Retourne la fiche, ou None si l'EAN est inconnu."""
        with self._transaction("get") as uow:
            book = uow.books.get(ean)
            return to_record(book) if book is not None else None

    def get_all(self) -> list[BookRecord]:
        """Retourne toutes les fiches, sans ordre garanti."""
        with self._transaction("get_all") as uow:
            return [to_record(b) for b in uow.books.list()]

    def update(self, ean: str, *patches: FieldPatch) -> BookRecord | None:
        """
        Fusionne des modifications de champ sur une fiche existante.

        Sans effet (retourne None) si l'EAN est inconnu.
        """
        with self._transaction("update") as uow:
            book = uow.books.get(ean)
            if book is None:
                logger.debug("update ignoré, EAN inconnu: %s", ean)
                return None
            record = to_record(book)
            for patch in patches:
                record = patch.apply(record)
            uow.books.put(to_row(record))
        return record

    def delete(self, ean: str) -> None:
        """Supprime la fiche (sans effet si l'EAN est inconnu)."""
        with self._transaction("delete") as uow:
            book = uow.books.get(ean)
            if book is not None:
                uow.books.delete(book)
