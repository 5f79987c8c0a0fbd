"""
Service d'import de livres depuis un tableur (CSV ou XLSX).

Le pipeline se déroule en deux temps :
1.  **Validation** (`build_records`): chaque ligne déjà lue (dictionnaire
    indexé par les en-têtes `EAN`, `Titre`, `Auteur`, `Genre`, `Cote`,
    `Statut`, `Date d'entrée`) devient une fiche complète ; les valeurs
    manquantes prennent les mêmes valeurs par défaut qu'un ajout manuel.
2.  **Upsert** (`import_rows`): les fiches sont écrites une à une dans le
    magasin ; un EAN déjà présent est remplacé (la dernière ligne gagne).

La lecture du fichier lui-même (`read_rows`) est volontairement mince :
elle ne fait que transformer le fichier en lignes.
"""

from __future__ import annotations

import csv
import logging
import unicodedata
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import date
from pathlib import Path
from typing import Any, Protocol

from openpyxl import load_workbook

from ..persistence.store import RecordStore
from .errors import PartialBatchFailure, StoreFailure
from .types import DEFAULT_TITRE, BookRecord, ImportErrorItem, ImportResult, Statut
from .utils import coerce_genre, is_valid_ean, parse_date_any

logger = logging.getLogger("catalog.services.import")

# Les fichiers d'origine utilisent l'apostrophe typographique
DATE_KEYS = ("Date d'entrée", "Date d’entrée", "DateEntree")


class BaseImporter(Protocol):
    """Protocole définissant l'interface pour tous les lecteurs de fichiers."""

    def extract_rows(self, file_path: Path) -> Iterator[dict[str, Any]]: ...


class CsvImporter:
    """Lecteur pour les fichiers CSV (séparateur `,` ou `;`)."""

    def extract_rows(self, file_path: Path) -> Iterator[dict[str, Any]]:
        with file_path.open(mode="r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(4096)
            f.seek(0)
            try:
                dialect = csv.Sniffer().sniff(sample, delimiters=",;\t")
            except csv.Error:
                dialect = csv.excel
            yield from csv.DictReader(f, dialect=dialect)


class ExcelImporter:
    """Lecteur pour les fichiers Excel (première feuille, en-têtes en ligne 1)."""

    def extract_rows(self, file_path: Path) -> Iterator[dict[str, Any]]:
        workbook = load_workbook(filename=str(file_path), read_only=True, data_only=True)
        try:
            sheet = workbook.active
            rows = sheet.iter_rows(values_only=True)
            header_row = next(rows, None)
            if header_row is None:
                return
            headers = [str(h).strip() if h is not None else "" for h in header_row]
            for values in rows:
                if all(v in (None, "") for v in values):
                    continue
                yield {headers[i]: v for i, v in enumerate(values) if i < len(headers)}
        finally:
            workbook.close()


def get_importer_for_file(file_path: Path) -> BaseImporter:
    """Retourne le lecteur approprié pour le type de fichier."""
    extension = file_path.suffix.lower()
    if extension == ".csv":
        return CsvImporter()
    elif extension == ".xlsx":
        return ExcelImporter()
    else:
        raise ValueError(f"Type de fichier non supporté: {extension}")


def read_rows(file_path: str | Path) -> list[dict[str, Any]]:
    """Lit un fichier CSV/XLSX et retourne ses lignes indexées par en-tête."""
    path = Path(file_path)
    return list(get_importer_for_file(path).extract_rows(path))


def _cell_text(value: Any) -> str:
    """Texte d'une cellule ; les nombres entiers d'Excel perdent leur `.0`."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return unicodedata.normalize("NFC", str(value)).strip()


def _date_cell(row: Mapping[str, Any]) -> Any:
    for key in DATE_KEYS:
        if row.get(key) not in (None, ""):
            return row[key]
    return None


class ImportService:
    """Transforme des lignes de tableur en fiches enregistrées."""

    def __init__(self, store: RecordStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def build_records(
        self, rows: Iterable[Mapping[str, Any]]
    ) -> tuple[list[BookRecord], list[ImportErrorItem], int]:
        """
        Valide les lignes et construit les fiches correspondantes.

        Returns:
            (fiches valides, erreurs/avertissements, nombre de lignes ignorées)
        """
        records: list[BookRecord] = []
        errors: list[ImportErrorItem] = []
        skipped = 0
        # Ligne 1 = en-têtes
        for i, row in enumerate(rows, start=2):
            ean = _cell_text(row.get("EAN"))
            if not ean:
                skipped += 1
                continue
            if not is_valid_ean(ean):
                errors.append(ImportErrorItem(i, "EAN", f"EAN invalide: {ean}", "error"))
                skipped += 1
                continue

            statut = Statut.a_cataloguer
            statut_label = _cell_text(row.get("Statut"))
            if statut_label:
                try:
                    statut = Statut(statut_label)
                except ValueError:
                    errors.append(
                        ImportErrorItem(i, "Statut", f"Statut invalide: {statut_label}", "warning")
                    )

            genre_label = _cell_text(row.get("Genre"))
            genre = coerce_genre(genre_label)
            if genre_label and genre is None:
                errors.append(
                    ImportErrorItem(i, "Genre", f"Genre inconnu ignoré: {genre_label}", "warning")
                )

            date_entree = self.today()
            raw_date = _date_cell(row)
            if raw_date is not None:
                parsed = parse_date_any(raw_date)
                if parsed is None:
                    errors.append(
                        ImportErrorItem(
                            i, "Date d'entrée", f"Date illisible: {raw_date}", "warning"
                        )
                    )
                else:
                    date_entree = parsed

            records.append(
                BookRecord(
                    ean=ean,
                    titre=_cell_text(row.get("Titre")) or DEFAULT_TITRE,
                    auteur=_cell_text(row.get("Auteur")),
                    genre=genre,
                    cote=_cell_text(row.get("Cote")),
                    statut=statut,
                    date_entree=date_entree,
                )
            )
        return records, errors, skipped

    def import_rows(self, rows: Iterable[Mapping[str, Any]]) -> ImportResult:
        """
        Valide puis enregistre toutes les lignes, dans l'ordre.

        Raises:
            PartialBatchFailure: Si le magasin refuse une écriture ; les
                fiches déjà écrites restent enregistrées.
        """
        records, errors, skipped = self.build_records(rows)
        for item in errors:
            logger.warning("Import ligne %s (%s): %s", item.row_index, item.field, item.message)

        existing = {r.ean for r in self.store.get_all()}
        inserted = updated = 0
        for record in records:
            try:
                self.store.put(record)
            except StoreFailure as e:
                done = inserted + updated
                logger.error("Import interrompu après %s fiche(s): %s", done, e)
                raise PartialBatchFailure(done, len(records) - done, e) from e
            if record.ean in existing:
                updated += 1
            else:
                existing.add(record.ean)
                inserted += 1

        logger.info(
            "Import terminé: %s ajout(s), %s mise(s) à jour, %s ligne(s) ignorée(s)",
            inserted,
            updated,
            skipped,
        )
        return ImportResult(inserted=inserted, updated=updated, skipped=skipped, errors=errors)
