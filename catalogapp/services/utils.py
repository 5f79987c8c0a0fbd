"""
Boîte à outils de fonctions utilitaires partagées.

Ce module contient de petites fonctions pures et réutilisables : validation
des EAN, conversions de dates entre la forme affichée (JJ/MM/AAAA) et la
forme canonique (date calendaire), et conversion d'une saisie brute en
modification typée pour un champ donné.
"""

from __future__ import annotations

import enum
import re
from datetime import date, datetime

from .errors import ValidationError
from .types import (
    AuteurPatch,
    BookRecord,
    CotePatch,
    DateEntreePatch,
    EditableField,
    FieldPatch,
    Genre,
    GenrePatch,
    Statut,
    StatutPatch,
    TitrePatch,
)

_EAN_RE = re.compile(r"[0-9]{13}")


def is_valid_ean(code: str | None) -> bool:
    """Vrai si le code est composé d'exactement 13 chiffres ASCII."""
    return code is not None and _EAN_RE.fullmatch(code) is not None


def normalize_ean(code: str) -> str:
    """
    Nettoie un code saisi ou scanné et vérifie son format.

    Raises:
        ValidationError: Si le code n'est pas composé de 13 chiffres.
    """
    cleaned = (code or "").strip()
    if not is_valid_ean(cleaned):
        raise ValidationError(f"EAN invalide (13 chiffres attendus) : {code!r}")
    return cleaned


def format_date_display(value: date | None) -> str:
    """Convertit une date canonique en JJ/MM/AAAA (chaîne vide si absente)."""
    if value is None:
        return ""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def parse_date_display(text: str | None) -> date | None:
    """
    Convertit une saisie JJ/MM/AAAA en date canonique.

    Une saisie qui ne se découpe pas en trois composantes non vides, ou qui
    ne forme pas une date calendaire, donne une valeur vide (None).
    """
    parts = (text or "").strip().split("/")
    if len(parts) < 3:
        return None
    day, month, year = (p.strip() for p in parts[:3])
    if not day or not month or not year:
        return None
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_date_any(value: object) -> date | None:
    """
    Interprète une date venant d'un fichier importé.

    Accepte les objets date/datetime (cellules Excel), la forme ISO
    AAAA-MM-JJ et la forme affichée JJ/MM/AAAA. Retourne None si la
    valeur n'est pas reconnue.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    if "/" in text:
        return parse_date_display(text)
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def coerce_genre(label: str | None) -> Genre | None:
    """Retourne le genre correspondant au libellé, ou None s'il est inconnu ou vide."""
    label = (label or "").strip()
    for g in Genre:
        if g.value == label:
            return g
    return None


def parse_statut(label: str) -> Statut:
    """
    Convertit un libellé de statut.

    Raises:
        ValidationError: Si le libellé ne fait pas partie des trois statuts.
    """
    try:
        return Statut(label.strip())
    except ValueError as e:
        raise ValidationError(f"Statut inconnu : {label!r}") from e


def parse_patch(field: EditableField, raw: str) -> FieldPatch:
    """
    Construit la modification typée correspondant à une saisie brute.

    La date est convertie de la forme affichée vers la forme canonique ;
    les autres champs texte sont conservés tels quels.

    Raises:
        ValidationError: Genre ou statut hors des valeurs autorisées.
    """
    raw = raw or ""
    if field is EditableField.titre:
        return TitrePatch(raw)
    if field is EditableField.auteur:
        return AuteurPatch(raw)
    if field is EditableField.cote:
        return CotePatch(raw)
    if field is EditableField.date_entree:
        return DateEntreePatch(parse_date_display(raw))
    if field is EditableField.statut:
        return StatutPatch(parse_statut(raw))
    if field is EditableField.genre:
        genre = coerce_genre(raw)
        if raw.strip() and genre is None:
            raise ValidationError(f"Genre inconnu : {raw!r}")
        return GenrePatch(genre)
    raise ValidationError(f"Champ non modifiable : {field!r}")


def display_value(record: BookRecord, field: EditableField) -> str:
    """Valeur d'un champ telle que présentée dans la zone d'édition."""
    if field is EditableField.date_entree:
        return format_date_display(record.date_entree)
    value = getattr(record, field.value)
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return value.value
    return value


def current_value(record: BookRecord, field: EditableField) -> object:
    """Valeur canonique actuelle d'un champ (pour comparer avant écriture)."""
    return getattr(record, field.value)
