"""
Définitions des types du domaine et des DTOs (Data Transfer Objects).

Ce module centralise le modèle d'un livre à cataloguer, les énumérations
de genres et de statuts, les modifications de champ typées (une classe par
champ éditable) et les structures de résultat de l'import.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from datetime import date
from typing import ClassVar, Literal, Protocol

DEFAULT_TITRE = "(Titre inconnu)"

SortOrder = Literal["asc", "desc"]
Partition = Literal["pending", "completed"]


class Genre(str, enum.Enum):
    """Genres reconnus pour le classement."""

    mangas = "Mangas"
    albums = "Albums"
    atp_bebe = "ATP/BEBE"
    ti = "TI"
    conte = "Conte"
    livres_sonores = "Livres sonores"
    livres_cd = "Livres CD"


class Statut(str, enum.Enum):
    """Étapes du circuit de catalogage."""

    a_cataloguer = "À cataloguer"
    en_cours = "En cours"
    catalogue = "Catalogué"


GENRES: tuple[str, ...] = tuple(g.value for g in Genre)
STATUTS: tuple[str, ...] = tuple(s.value for s in Statut)


@dataclass(frozen=True, slots=True)
class BookRecord:
    """Fiche d'un livre, clé primaire `ean` (13 chiffres)."""

    ean: str
    titre: str = DEFAULT_TITRE
    auteur: str = ""
    genre: Genre | None = None
    cote: str = ""
    statut: Statut = Statut.a_cataloguer
    date_entree: date | None = field(default_factory=date.today)

    @property
    def is_completed(self) -> bool:
        return self.statut is Statut.catalogue


class EditableField(str, enum.Enum):
    """Champs modifiables en ligne ou par lot."""

    titre = "titre"
    auteur = "auteur"
    genre = "genre"
    cote = "cote"
    statut = "statut"
    date_entree = "date_entree"


# --- Modifications typées : une variante par champ éditable ---


@dataclass(frozen=True, slots=True)
class TitrePatch:
    value: str
    field: ClassVar[EditableField] = EditableField.titre

    def apply(self, record: BookRecord) -> BookRecord:
        return replace(record, titre=self.value)


@dataclass(frozen=True, slots=True)
class AuteurPatch:
    value: str
    field: ClassVar[EditableField] = EditableField.auteur

    def apply(self, record: BookRecord) -> BookRecord:
        return replace(record, auteur=self.value)


@dataclass(frozen=True, slots=True)
class GenrePatch:
    value: Genre | None
    field: ClassVar[EditableField] = EditableField.genre

    def apply(self, record: BookRecord) -> BookRecord:
        return replace(record, genre=self.value)


@dataclass(frozen=True, slots=True)
class CotePatch:
    value: str
    field: ClassVar[EditableField] = EditableField.cote

    def apply(self, record: BookRecord) -> BookRecord:
        return replace(record, cote=self.value)


@dataclass(frozen=True, slots=True)
class StatutPatch:
    value: Statut
    field: ClassVar[EditableField] = EditableField.statut

    def apply(self, record: BookRecord) -> BookRecord:
        return replace(record, statut=self.value)


@dataclass(frozen=True, slots=True)
class DateEntreePatch:
    value: date | None
    field: ClassVar[EditableField] = EditableField.date_entree

    def apply(self, record: BookRecord) -> BookRecord:
        return replace(record, date_entree=self.value)


FieldPatch = TitrePatch | AuteurPatch | GenrePatch | CotePatch | StatutPatch | DateEntreePatch


# --- Vue dérivée ---


@dataclass(frozen=True, slots=True)
class ViewFilters:
    """Filtres appliqués à la partition « à traiter »."""

    genre: Genre | None = None
    statut: Statut | None = None
    sort_cote: SortOrder | None = None


@dataclass(frozen=True, slots=True)
class CatalogViewModel:
    """Vue dérivée lue par la couche de rendu."""

    pending: tuple[BookRecord, ...]
    completed: tuple[BookRecord, ...]

    def partition(self, name: Partition) -> tuple[BookRecord, ...]:
        return self.pending if name == "pending" else self.completed


@dataclass(frozen=True, slots=True)
class EditCursor:
    """Le seul champ en cours d'édition, avec sa valeur saisie."""

    ean: str
    field: EditableField
    buffer: str


class Selection(Protocol):
    """Ensemble des EAN sélectionnés pour une action groupée."""

    def toggle(self, ean: str) -> None: ...

    def select_all(self, eans: Iterable[str]) -> None: ...

    def clear(self) -> None: ...

    def discard(self, ean: str) -> None: ...

    def retain(self, eans: Iterable[str]) -> None: ...

    def __contains__(self, ean: object) -> bool: ...

    def __iter__(self) -> Iterator[str]: ...

    def __len__(self) -> int: ...


# --- Import ---


@dataclass(slots=True)
class ImportErrorItem:
    """Message de validation/erreur remonté au rapport."""

    row_index: int
    field: str | None
    message: str
    severity: Literal["warning", "error"] = "warning"


@dataclass(slots=True)
class ImportResult:
    """Statistiques d'upsert + lignes ignorées ou corrigées."""

    inserted: int
    updated: int
    skipped: int
    errors: list[ImportErrorItem]

    @property
    def imported(self) -> int:
        return self.inserted + self.updated
