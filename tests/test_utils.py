"""Tests des fonctions utilitaires (EAN, dates, conversion des saisies)."""

from datetime import date, datetime

import pytest
from conftest import make_record

from catalogapp.services.errors import ValidationError
from catalogapp.services.types import (
    DateEntreePatch,
    EditableField,
    Genre,
    GenrePatch,
    Statut,
    StatutPatch,
    TitrePatch,
)
from catalogapp.services.utils import (
    display_value,
    format_date_display,
    is_valid_ean,
    normalize_ean,
    parse_date_any,
    parse_date_display,
    parse_patch,
)


def test_is_valid_ean():
    assert is_valid_ean("9782070612758")
    assert not is_valid_ean("978207061275")
    assert not is_valid_ean("97820706127589")
    assert not is_valid_ean("978207061275X")
    assert not is_valid_ean("")
    assert not is_valid_ean(None)
    # Chiffres arabo-indiens : pas des chiffres ASCII
    assert not is_valid_ean("٩٧٨٢٠٧٠٦١٢٧٥٨")


def test_normalize_ean_strips_whitespace():
    assert normalize_ean("  9782070612758\n") == "9782070612758"


@pytest.mark.parametrize("code", ["", "   ", "978-2-07-061275-8", "abc", "12345"])
def test_normalize_ean_rejects_malformed_codes(code):
    with pytest.raises(ValidationError):
        normalize_ean(code)


def test_date_display_round_trip():
    for text in ("05/01/2024", "31/12/1999", "29/02/2024"):
        assert format_date_display(parse_date_display(text)) == text


def test_parse_date_display_pads_components():
    assert parse_date_display("5/1/2024") == date(2024, 1, 5)


@pytest.mark.parametrize("text", ["", "12/2024", "//2024", "31/02/2024", "aa/bb/cccc", None])
def test_parse_date_display_invalid_gives_empty(text):
    assert parse_date_display(text) is None


def test_format_date_display_empty():
    assert format_date_display(None) == ""


def test_parse_date_any():
    assert parse_date_any("2024-03-12") == date(2024, 3, 12)
    assert parse_date_any("12/03/2024") == date(2024, 3, 12)
    assert parse_date_any(datetime(2024, 3, 12, 10, 30)) == date(2024, 3, 12)
    assert parse_date_any(date(2024, 3, 12)) == date(2024, 3, 12)
    assert parse_date_any("mardi") is None
    assert parse_date_any("") is None


def test_parse_patch_by_field():
    assert parse_patch(EditableField.titre, "Candide") == TitrePatch("Candide")
    assert parse_patch(EditableField.date_entree, "12/03/2024") == DateEntreePatch(
        date(2024, 3, 12)
    )
    assert parse_patch(EditableField.date_entree, "n'importe") == DateEntreePatch(None)
    assert parse_patch(EditableField.statut, "Catalogué") == StatutPatch(Statut.catalogue)
    assert parse_patch(EditableField.genre, "Mangas") == GenrePatch(Genre.mangas)
    assert parse_patch(EditableField.genre, "") == GenrePatch(None)


def test_parse_patch_rejects_unknown_labels():
    with pytest.raises(ValidationError):
        parse_patch(EditableField.statut, "Perdu")
    with pytest.raises(ValidationError):
        parse_patch(EditableField.genre, "Roman")


def test_display_value():
    record = make_record("9782070612758", genre=None, statut=Statut.en_cours)

    assert display_value(record, EditableField.date_entree) == "01/01/2024"
    assert display_value(record, EditableField.genre) == ""
    assert display_value(record, EditableField.statut) == "En cours"
    assert display_value(record, EditableField.titre) == "(Titre inconnu)"
