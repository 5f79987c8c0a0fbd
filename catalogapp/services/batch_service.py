"""
Sélection et modifications groupées.

La sélection est un unique ensemble d'EAN partagé entre les deux
partitions (« à traiter » et « catalogués ») : une sélection peut donc les
chevaucher. Elle est encapsulée derrière le protocole `Selection` pour
qu'une politique plus stricte puisse la remplacer sans toucher aux
appelants.

Les opérations groupées écrivent fiche par fiche, dans l'ordre de
sélection, puis rechargent la vue une seule fois. Elles ne sont pas
atomiques : un échec en cours de route laisse les fiches déjà traitées
modifiées (ou supprimées) et les suivantes intactes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from ..persistence.store import RecordStore
from .errors import PartialBatchFailure, StoreFailure
from .types import EditableField, Selection
from .utils import parse_patch
from .view_service import CatalogView

logger = logging.getLogger("catalog.services.batch")


class SharedSelectionSet:
    """Ensemble ordonné d'EAN (ordre d'ajout conservé)."""

    def __init__(self, eans: Iterable[str] = ()):
        self._eans: dict[str, None] = dict.fromkeys(eans)

    def toggle(self, ean: str) -> None:
        if ean in self._eans:
            del self._eans[ean]
        else:
            self._eans[ean] = None

    def select_all(self, eans: Iterable[str]) -> None:
        """Remplace la sélection par les EAN donnés."""
        self._eans = dict.fromkeys(eans)

    def clear(self) -> None:
        self._eans.clear()

    def discard(self, ean: str) -> None:
        self._eans.pop(ean, None)

    def retain(self, eans: Iterable[str]) -> None:
        """Ne garde que les EAN encore présents dans `eans`."""
        keep = set(eans)
        self._eans = {e: None for e in self._eans if e in keep}

    def __contains__(self, ean: object) -> bool:
        return ean in self._eans

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._eans))

    def __len__(self) -> int:
        return len(self._eans)

    def __repr__(self):
        return f"SharedSelectionSet({list(self._eans)!r})"


class BatchMutationEngine:
    """Applique une même modification, ou une suppression, à toute la sélection."""

    def __init__(self, store: RecordStore, view: CatalogView, selection: Selection | None = None):
        self.store = store
        self.view = view
        self.selection: Selection = selection if selection is not None else SharedSelectionSet()

    def toggle(self, ean: str) -> None:
        self.selection.toggle(ean)

    def select_all(self, eans: Iterable[str]) -> None:
        self.selection.select_all(eans)

    def clear(self) -> None:
        self.selection.clear()

    def _run(self, action: str, step: Callable[[str], object]) -> int:
        eans = list(self.selection)
        done: list[str] = []
        try:
            for ean in eans:
                step(ean)
                done.append(ean)
        except StoreFailure as e:
            logger.error("%s interrompu après %s/%s fiche(s): %s", action, len(done), len(eans), e)
            for ean in done:
                self.selection.discard(ean)
            self.view.reload_after_write()
            raise PartialBatchFailure(len(done), len(eans) - len(done), e) from e

        self.selection.clear()
        self.view.reload_after_write()
        logger.info("%s: %s fiche(s)", action, len(done))
        return len(done)

    def apply_bulk(self, field: EditableField | str, raw_value: str) -> int:
        """
        Applique `field = raw_value` à chaque fiche sélectionnée.

        La valeur est convertie une seule fois (date JJ/MM/AAAA -> canonique).

        Returns:
            Le nombre de fiches modifiées.
        """
        patch = parse_patch(EditableField(field), raw_value)
        return self._run(
            f"MAJ groupée {patch.field.value}", lambda ean: self.store.update(ean, patch)
        )

    def delete_selected(self) -> int:
        """Supprime toutes les fiches sélectionnées ; retourne leur nombre."""
        return self._run("Suppression groupée", self.store.delete)
