"""Tests de la façade : intentions de l'utilisateur de bout en bout."""

from __future__ import annotations

import pytest

from catalogapp.__main__ import main
from catalogapp.services.catalog_service import build_filters
from catalogapp.services.errors import (
    LookupFailure,
    PartialBatchFailure,
    StoreFailure,
    ValidationError,
)
from catalogapp.services.types import Genre, Statut, ViewFilters


def test_add_by_code_creates_record(catalog, store, lookup):
    record = catalog.add_by_code(" 9782070612758 ")

    assert lookup.calls == ["9782070612758"]
    assert store.get("9782070612758") == record
    assert [r.ean for r in catalog.derive_view().pending] == ["9782070612758"]


def test_add_by_code_twice_updates_single_record(catalog, store):
    catalog.add_by_code("9782070612758")
    catalog.add_by_code("9782070612758")

    assert len(store.get_all()) == 1


@pytest.mark.parametrize("code", ["", "978207061275", "97820706127589", "978207061275a", "ean"])
def test_malformed_code_performs_no_write(catalog, store, lookup, code):
    with pytest.raises(ValidationError):
        catalog.add_by_code(code)

    assert store.writes() == 0
    assert lookup.calls == []


def test_lookup_failure_creates_nothing(catalog, store, lookup):
    lookup.fail = True

    with pytest.raises(LookupFailure):
        catalog.add_by_code("9780000000002")

    assert store.get("9780000000002") is None
    assert store.writes() == 0


def test_store_failure_leaves_view_unchanged(catalog, store, seeded):
    catalog.reload()
    store.fail_on = {"9780000000009"}

    with pytest.raises(StoreFailure):
        catalog.add_by_code("9780000000009")

    assert len(catalog.view) == len(seeded)


def test_import_rows_reloads_once(catalog, store):
    before = store.calls["get_all"]

    result = catalog.import_rows(
        [{"EAN": "1234567890123", "Titre": "Foo"}, {"EAN": "", "Titre": "Bar"}]
    )

    assert result.imported == 1
    # Une lecture pour détecter les EAN existants, une pour le rechargement
    assert store.calls["get_all"] == before + 2
    assert [(r.ean, r.titre) for r in catalog.derive_view().pending] == [("1234567890123", "Foo")]


def test_bulk_catalogue_scenario(catalog, seeded):
    catalog.reload()
    catalog.toggle_select("9780000000001")
    catalog.toggle_select("9780000000003")

    catalog.apply_bulk("statut", "Catalogué")

    view = catalog.derive_view()
    assert [r.ean for r in view.pending] == ["9780000000002"]
    assert {"9780000000001", "9780000000003"} <= {r.ean for r in view.completed}
    assert len(catalog.selection) == 0


def test_select_all_per_partition(catalog, seeded):
    catalog.reload()

    catalog.select_all("completed")
    assert set(catalog.selection) == {"9780000000004", "9780000000005"}
    assert catalog.all_selected("completed")
    assert not catalog.all_selected("pending")

    catalog.select_all("pending")
    assert list(catalog.selection) == ["9780000000002", "9780000000001", "9780000000003"]


def test_selection_can_span_both_partitions(catalog, seeded):
    catalog.reload()
    catalog.toggle_select("9780000000001")
    catalog.toggle_select("9780000000004")

    assert catalog.delete_selected() == 2
    assert len(catalog.view) == 3


def test_filter_change_prunes_hidden_selection(catalog, seeded):
    catalog.reload()
    catalog.toggle_select("9780000000001")
    catalog.toggle_select("9780000000002")

    catalog.set_filter(genre="Mangas")

    assert list(catalog.selection) == ["9780000000001"]
    assert [r.ean for r in catalog.derive_view().pending] == ["9780000000001", "9780000000003"]


def test_set_filter_validates_labels(catalog):
    with pytest.raises(ValidationError):
        catalog.set_filter(genre="Roman")
    with pytest.raises(ValidationError):
        catalog.set_filter(sort_cote="up")


def test_build_filters():
    assert build_filters() == ViewFilters()
    assert build_filters("ATP/BEBE", "En cours", "desc") == ViewFilters(
        genre=Genre.atp_bebe, statut=Statut.en_cours, sort_cote="desc"
    )


def test_delete_single_record(catalog, store, seeded):
    catalog.reload()
    catalog.toggle_select("9780000000001")
    catalog.begin_edit("9780000000001", "titre")

    catalog.delete("9780000000001")

    assert store.get("9780000000001") is None
    assert "9780000000001" not in catalog.selection
    assert catalog.edit_cursor is None
    assert catalog.view.find("9780000000001") is None


def test_failed_delete_keeps_record_visible(catalog, store, seeded):
    catalog.reload()
    store.fail_on = {"9780000000001"}

    with pytest.raises(StoreFailure):
        catalog.delete("9780000000001")

    assert catalog.view.find("9780000000001") is not None


def test_inline_edit_through_facade(catalog, store, seeded):
    catalog.reload()
    catalog.begin_edit("9780000000002", "statut")
    catalog.stage_edit("Catalogué")

    assert catalog.commit_edit() is True

    assert "9780000000002" in {r.ean for r in catalog.derive_view().completed}

    catalog.begin_edit("9780000000001", "cote")
    catalog.stage_edit("Z")
    catalog.cancel_edit()
    assert store.get("9780000000001").cote == "M KIS"


def test_cli_import_and_list(isolated_env, capsys):
    csv_path = isolated_env / "livres.csv"
    csv_path.write_text(
        "EAN,Titre,Statut\n1234567890123,Foo,Catalogué\n,Sans code,\n9780000000002,Bar,\n",
        encoding="utf-8",
    )

    assert main(["import", str(csv_path)]) == 0
    assert "2 livre(s) importé(s)" in capsys.readouterr().out

    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "À cataloguer / En cours (1)" in out
    assert "Catalogués (1)" in out


def test_cli_rejects_malformed_code(isolated_env, capsys):
    assert main(["add", "123"]) == 1
    assert "EAN invalide" in capsys.readouterr().err


def test_bulk_failure_counts_survive_failed_reload(catalog, store, seeded):
    catalog.reload()
    catalog.select_all("pending")
    store.fail_on = {"9780000000003"}
    store.get_all_ok = 0

    with pytest.raises(PartialBatchFailure) as exc:
        catalog.apply_bulk("cote", "X")

    assert (exc.value.succeeded, exc.value.failed) == (2, 1)
    assert list(catalog.selection) == ["9780000000003"]


def test_import_failure_counts_survive_failed_reload(catalog, store):
    rows = [{"EAN": "1111111111111"}, {"EAN": "2222222222222"}, {"EAN": "3333333333333"}]
    store.fail_on = {"3333333333333"}
    # Seule la lecture des EAN existants réussit
    store.get_all_ok = 1

    with pytest.raises(PartialBatchFailure) as exc:
        catalog.import_rows(rows)

    assert (exc.value.succeeded, exc.value.failed) == (2, 1)
    assert store.get("2222222222222") is not None


def test_switching_edit_prunes_record_leaving_the_view(catalog, seeded):
    catalog.reload()
    catalog.set_filter(genre="Mangas")
    catalog.select_all("pending")
    catalog.begin_edit("9780000000001", "genre")
    catalog.stage_edit("TI")

    catalog.begin_edit("9780000000003", "cote")

    assert list(catalog.selection) == ["9780000000003"]
    assert [r.ean for r in catalog.derive_view().pending] == ["9780000000003"]


def test_add_is_kept_when_reload_fails(catalog, store, seeded):
    catalog.reload()
    store.get_all_ok = 0

    record = catalog.add_by_code("9780000000009")

    assert store.get("9780000000009") == record
    assert catalog.view.find("9780000000009") is None


def test_delete_is_kept_when_reload_fails(catalog, store, seeded):
    catalog.reload()
    catalog.toggle_select("9780000000004")
    store.get_all_ok = 0

    catalog.delete("9780000000004")

    assert store.get("9780000000004") is None
    assert "9780000000004" not in catalog.selection
