"""
Contrôleur d'édition en ligne.

Un seul couple (EAN, champ) peut être en édition à la fois. Transitions :

    VIEWING -> EDITING            begin_edit(ean, field)
    EDITING -> COMMITTING -> VIEWING   commit()
    EDITING -> CANCELLING -> VIEWING   cancel()

Démarrer une édition alors qu'une autre est en cours valide d'abord la
précédente (mêmes règles que `commit`).
"""

from __future__ import annotations

import enum
import logging

from ..persistence.store import RecordStore
from .errors import CatalogError, ValidationError
from .types import EditableField, EditCursor
from .utils import current_value, display_value, parse_patch
from .view_service import CatalogView

logger = logging.getLogger("catalog.services.edit")


class EditState(str, enum.Enum):
    viewing = "viewing"
    editing = "editing"
    committing = "committing"
    cancelling = "cancelling"


class InlineEditController:
    """Machine à états de l'édition d'une cellule."""

    def __init__(self, store: RecordStore, view: CatalogView):
        self.store = store
        self.view = view
        self.state = EditState.viewing
        self._cursor: EditCursor | None = None

    @property
    def cursor(self) -> EditCursor | None:
        """Le champ en cours d'édition et sa valeur saisie, ou None."""
        return self._cursor

    def is_editing(self, ean: str, field: EditableField) -> bool:
        c = self._cursor
        return c is not None and c.ean == ean and c.field is field

    def begin_edit(self, ean: str, field: EditableField | str) -> EditCursor:
        """
        Passe la cellule (ean, field) en édition.

        La valeur actuelle est placée dans la zone de saisie ; la date est
        présentée sous la forme JJ/MM/AAAA.

        Raises:
            ValidationError: Si l'EAN n'est pas dans l'ensemble de travail.
        """
        field = EditableField(field)
        if self.is_editing(ean, field):
            return self._cursor
        if self._cursor is not None:
            self.commit()

        record = self.view.find(ean)
        if record is None:
            raise ValidationError(f"Aucun livre avec l'EAN {ean}")

        self._cursor = EditCursor(ean=ean, field=field, buffer=display_value(record, field))
        self.state = EditState.editing
        return self._cursor

    def stage(self, value: str) -> None:
        """Remplace la valeur saisie de l'édition en cours."""
        if self._cursor is None:
            raise ValidationError("Aucune édition en cours.")
        self._cursor = EditCursor(self._cursor.ean, self._cursor.field, value)

    def commit(self) -> bool:
        """
        Valide l'édition en cours.

        La fiche n'est écrite (puis la vue rechargée) que si la valeur
        convertie diffère de la valeur actuelle. En cas d'échec, l'édition
        reste ouverte avec la saisie intacte.

        Returns:
            True si une écriture a eu lieu.
        """
        cursor = self._cursor
        if cursor is None:
            return False

        self.state = EditState.committing
        try:
            patch = parse_patch(cursor.field, cursor.buffer)
            record = self.view.find(cursor.ean)
            written = False
            if record is None:
                logger.warning("Édition abandonnée, livre disparu: %s", cursor.ean)
            elif patch.value != current_value(record, cursor.field):
                self.store.update(cursor.ean, patch)
                written = True
                logger.info("MAJ livre %s: %s", cursor.ean, cursor.field.value)
                self.view.reload_after_write()
        except CatalogError:
            self.state = EditState.editing
            raise

        self._cursor = None
        self.state = EditState.viewing
        return written

    def cancel(self) -> None:
        """Abandonne la saisie, sans écriture."""
        if self._cursor is None:
            return
        self.state = EditState.cancelling
        self._cursor = None
        self.state = EditState.viewing
