"""
Point d'entrée unique du moteur de catalogue pour la couche de rendu.

`CatalogService` assemble le magasin, le service de métadonnées, l'import,
la vue, l'édition en ligne et les opérations groupées. Il expose les
intentions de l'utilisateur (ajout par EAN, import, édition, sélection,
modification groupée, suppression, filtres) et les modèles de lecture
(vue dérivée, sélection, curseur d'édition).

Chaque intention s'exécute sous un verrou unique : une action, rechargement
compris, se termine avant que la suivante ne commence. C'est ce qui évite
qu'une fusion lecture/écriture (`update`) en entrelace une autre.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..persistence.database import Database
from ..persistence.store import RecordStore
from .batch_service import BatchMutationEngine
from .config_service import AppConfig, database_url, load_config
from .edit_controller import InlineEditController
from .errors import LookupFailure, ValidationError
from .googlebooks_service import GoogleBooksService, MetadataLookup
from .import_service import ImportService, read_rows
from .types import (
    BookRecord,
    CatalogViewModel,
    EditableField,
    EditCursor,
    ImportResult,
    Partition,
    Selection,
    ViewFilters,
)
from .utils import coerce_genre, normalize_ean, parse_statut
from .view_service import CatalogView

logger = logging.getLogger("catalog.services.catalog")


def _serialized(method):
    """Exécute la méthode sous le verrou du service."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


def build_filters(
    genre: str | None = None, statut: str | None = None, sort_cote: str | None = None
) -> ViewFilters:
    """
    Construit des filtres à partir des libellés choisis dans l'interface.

    Une valeur vide désactive le filtre correspondant.

    Raises:
        ValidationError: Libellé de genre, de statut ou d'ordre inconnu.
    """
    genre_value = None
    if genre:
        genre_value = coerce_genre(genre)
        if genre_value is None:
            raise ValidationError(f"Genre inconnu : {genre!r}")
    statut_value = parse_statut(statut) if statut else None
    if sort_cote not in (None, "", "asc", "desc"):
        raise ValidationError(f"Ordre de tri inconnu : {sort_cote!r}")
    return ViewFilters(genre=genre_value, statut=statut_value, sort_cote=sort_cote or None)


class CatalogService:
    """Façade du moteur de catalogue."""

    def __init__(
        self,
        store: RecordStore,
        lookup: MetadataLookup,
        selection: Selection | None = None,
        importer: ImportService | None = None,
    ):
        self.store = store
        self.lookup = lookup
        self.view = CatalogView(store)
        self.editor = InlineEditController(store, self.view)
        self.batch = BatchMutationEngine(store, self.view, selection)
        self.importer = importer or ImportService(store)
        self.filters = ViewFilters()
        self._lock = threading.RLock()

    # --- Modèles de lecture ---

    @property
    def selection(self) -> Selection:
        return self.batch.selection

    @property
    def edit_cursor(self) -> EditCursor | None:
        return self.editor.cursor

    def derive_view(self) -> CatalogViewModel:
        """Vue dérivée de l'ensemble de travail avec les filtres courants."""
        return self.view.derive_view(self.filters)

    def all_selected(self, partition: Partition) -> bool:
        """Vrai si toutes les fiches d'une partition non vide sont sélectionnées."""
        records = self.derive_view().partition(partition)
        return bool(records) and all(r.ean in self.selection for r in records)

    def _prune_selection(self) -> None:
        model = self.derive_view()
        self.selection.retain(r.ean for r in model.pending + model.completed)

    # --- Intentions ---

    @_serialized
    def reload(self) -> CatalogViewModel:
        self.view.reload()
        self._prune_selection()
        return self.derive_view()

    @_serialized
    def set_filter(
        self, genre: str | None = None, statut: str | None = None, sort_cote: str | None = None
    ) -> CatalogViewModel:
        self.filters = build_filters(genre, statut, sort_cote)
        self._prune_selection()
        return self.derive_view()

    @_serialized
    def add_by_code(self, code: str) -> BookRecord:
        """
        Ajoute (ou remplace) un livre à partir de son EAN.

        Raises:
            ValidationError: Code mal formé ; aucun appel réseau ni écriture.
            LookupFailure: Le service de métadonnées n'a pas répondu.
            StoreFailure: L'écriture a été refusée ; la vue est inchangée.
        """
        ean = normalize_ean(code)
        record = self.lookup.lookup(ean)
        if record is None:
            raise LookupFailure(f"Impossible d'obtenir les informations de l'EAN {ean}")
        self.store.put(record)
        logger.info("Ajout livre: %s - %s", record.ean, record.titre)
        self.view.reload_after_write()
        self._prune_selection()
        return record

    @_serialized
    def import_rows(self, rows: Iterable[Mapping[str, Any]]) -> ImportResult:
        """Importe des lignes déjà lues puis recharge la vue une seule fois."""
        try:
            return self.importer.import_rows(rows)
        finally:
            self.view.reload_after_write()
            self._prune_selection()

    def import_file(self, file_path: str | Path) -> ImportResult:
        """Lit un fichier CSV/XLSX et importe ses lignes."""
        return self.import_rows(read_rows(file_path))

    @_serialized
    def begin_edit(self, ean: str, field: EditableField | str) -> EditCursor:
        """Ouvre une cellule en édition ; l'édition précédente est validée d'abord."""
        try:
            return self.editor.begin_edit(ean, field)
        finally:
            self._prune_selection()

    @_serialized
    def stage_edit(self, value: str) -> None:
        self.editor.stage(value)

    @_serialized
    def commit_edit(self) -> bool:
        written = self.editor.commit()
        if written:
            self._prune_selection()
        return written

    @_serialized
    def cancel_edit(self) -> None:
        self.editor.cancel()

    @_serialized
    def toggle_select(self, ean: str) -> None:
        self.batch.toggle(ean)

    @_serialized
    def select_all(self, partition: Partition) -> None:
        """Sélectionne toutes les fiches visibles d'une partition."""
        self.batch.select_all(r.ean for r in self.derive_view().partition(partition))

    @_serialized
    def clear_selection(self) -> None:
        self.batch.clear()

    @_serialized
    def apply_bulk(self, field: EditableField | str, raw_value: str) -> int:
        try:
            return self.batch.apply_bulk(field, raw_value)
        finally:
            self._prune_selection()

    @_serialized
    def delete_selected(self) -> int:
        try:
            return self.batch.delete_selected()
        finally:
            self._prune_selection()

    @_serialized
    def delete(self, ean: str) -> None:
        """Supprime un livre. En cas d'échec, la fiche reste visible."""
        self.store.delete(ean)
        logger.info("Suppression livre: %s", ean)
        cursor = self.editor.cursor
        if cursor is not None and cursor.ean == ean:
            self.editor.cancel()
        self.selection.discard(ean)
        self.view.reload_after_write()
        self._prune_selection()


@contextmanager
def open_catalog(config: AppConfig | None = None) -> Iterator[CatalogService]:
    """
    Ouvre la base, assemble le service et charge l'ensemble de travail.

    La base est fermée à la sortie du bloc `with`.
    """
    config = config or load_config()
    with Database(database_url(config)) as db:
        lookup = GoogleBooksService(timeout=config.lookup_timeout, api_url=config.google_books_url)
        service = CatalogService(RecordStore(db), lookup)
        service.reload()
        yield service
