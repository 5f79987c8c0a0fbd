"""
Moteur de vue du catalogue.

`CatalogView` détient l'ensemble de travail (toutes les fiches chargées
depuis le magasin) et en dérive la vue lue par la couche de rendu :

- `pending` : fiches dont le statut n'est pas « Catalogué », filtrables par
  genre et statut, éventuellement triées par cote ;
- `completed` : fiches « Catalogué », toujours complètes, dans l'ordre de base.

L'ordre de base est la date d'entrée décroissante ; une date absente passe
après toutes les autres. Aucun cache n'est invalidé implicitement : après
chaque modification, l'appelant doit appeler `reload()`.
"""

from __future__ import annotations

import logging

from ..persistence.store import RecordStore
from .errors import StoreFailure
from .types import BookRecord, CatalogViewModel, ViewFilters

logger = logging.getLogger("catalog.services.view")


def _date_key(record: BookRecord) -> str:
    return record.date_entree.isoformat() if record.date_entree else ""


def base_order(records) -> list[BookRecord]:
    """Trie par date d'entrée décroissante (dates absentes en dernier)."""
    return sorted(records, key=_date_key, reverse=True)


def derive_view(records, filters: ViewFilters | None = None) -> CatalogViewModel:
    """Partitionne et filtre un ensemble de fiches."""
    filters = filters or ViewFilters()
    ordered = base_order(records)

    pending = [r for r in ordered if not r.is_completed]
    completed = [r for r in ordered if r.is_completed]

    if filters.genre is not None:
        pending = [r for r in pending if r.genre == filters.genre]
    if filters.statut is not None:
        pending = [r for r in pending if r.statut == filters.statut]
    if filters.sort_cote:
        pending.sort(key=lambda r: r.cote, reverse=filters.sort_cote == "desc")

    return CatalogViewModel(pending=tuple(pending), completed=tuple(completed))


class CatalogView:
    """Ensemble de travail en mémoire, source de vérité pour l'affichage."""

    def __init__(self, store: RecordStore):
        self.store = store
        self._records: dict[str, BookRecord] = {}

    @property
    def records(self) -> tuple[BookRecord, ...]:
        return tuple(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def find(self, ean: str) -> BookRecord | None:
        return self._records.get(ean)

    def reload(self) -> None:
        """
        Recharge l'ensemble de travail depuis le magasin.

        En cas d'échec (`StoreFailure`), l'ensemble de travail est conservé
        tel quel.
        """
        records = self.store.get_all()
        self._records = {r.ean: r for r in records}
        logger.debug("Ensemble de travail rechargé: %s fiche(s)", len(records))

    def reload_after_write(self) -> bool:
        """
        Recharge après une écriture déjà effectuée.

        Un échec de lecture est journalisé sans être propagé : l'écriture a
        eu lieu et ne doit pas être signalée comme ratée. L'ensemble de
        travail reste alors celui d'avant.

        Returns:
            True si le rechargement a réussi.
        """
        try:
            self.reload()
        except StoreFailure as e:
            logger.error("Rechargement après écriture impossible: %s", e)
            return False
        return True

    def derive_view(self, filters: ViewFilters | None = None) -> CatalogViewModel:
        return derive_view(self._records.values(), filters)
