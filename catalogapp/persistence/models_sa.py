"""Définition des modèles de données SQLAlchemy.

Une seule table : `books`, clé primaire `ean`. Les genres et statuts sont
stockés sous leur libellé français afin que la base reste lisible avec un
simple client SQLite.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Enum, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..services.types import DEFAULT_TITRE, Genre, Statut


class Base(DeclarativeBase):
    pass


def _labels(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Book(Base):
    """Modèle ORM pour une fiche de livre à cataloguer."""

    __tablename__ = "books"

    ean: Mapped[str] = mapped_column(String(13), primary_key=True)
    titre: Mapped[str] = mapped_column(String, nullable=False, default=DEFAULT_TITRE)
    auteur: Mapped[str] = mapped_column(String, nullable=False, default="")
    genre: Mapped[Genre | None] = mapped_column(
        Enum(Genre, values_callable=_labels, native_enum=False), nullable=True
    )
    cote: Mapped[str] = mapped_column(String, nullable=False, default="")
    statut: Mapped[Statut] = mapped_column(
        Enum(Statut, values_callable=_labels, native_enum=False),
        nullable=False,
        default=Statut.a_cataloguer,
    )
    date_entree: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        Index("ix_books_statut", "statut"),
        Index("ix_books_date_entree", "date_entree"),
    )

    def __repr__(self):
        return f"<Book(ean={self.ean}, statut={self.statut})>"
