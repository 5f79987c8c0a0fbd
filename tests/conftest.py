import os
import sys
from datetime import date

import pytest

# Ajoute la racine du dépôt (celle qui contient catalogapp/) au PYTHONPATH
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from catalogapp.persistence.database import Database  # noqa: E402
from catalogapp.persistence.store import RecordStore  # noqa: E402
from catalogapp.services.catalog_service import CatalogService  # noqa: E402
from catalogapp.services.errors import StoreFailure  # noqa: E402
from catalogapp.services.types import BookRecord, Genre, Statut  # noqa: E402


class CountingStore(RecordStore):
    """Magasin instrumenté : compte les appels et peut échouer sur certains EAN."""

    def __init__(self, database):
        super().__init__(database)
        self.calls: dict[str, int] = {"put": 0, "update": 0, "delete": 0, "get_all": 0}
        self.fail_on: set[str] = set()
        # Nombre de lectures complètes encore autorisées (None = illimité)
        self.get_all_ok: int | None = None

    def _check(self, ean):
        if ean in self.fail_on:
            raise StoreFailure(f"écriture refusée pour {ean}")

    def put(self, record):
        self._check(record.ean)
        self.calls["put"] += 1
        return super().put(record)

    def update(self, ean, *patches):
        self._check(ean)
        self.calls["update"] += 1
        return super().update(ean, *patches)

    def delete(self, ean):
        self._check(ean)
        self.calls["delete"] += 1
        return super().delete(ean)

    def get_all(self):
        if self.get_all_ok is not None:
            if self.get_all_ok <= 0:
                raise StoreFailure("lecture refusée")
            self.get_all_ok -= 1
        self.calls["get_all"] += 1
        return super().get_all()

    def writes(self) -> int:
        return self.calls["put"] + self.calls["update"] + self.calls["delete"]


class FakeLookup:
    """Service de métadonnées sans réseau."""

    def __init__(self):
        self.calls: list[str] = []
        self.fail = False

    def lookup(self, code):
        self.calls.append(code)
        if self.fail:
            return None
        return BookRecord(
            ean=code, titre=f"Livre {code}", auteur="Anonyme", date_entree=date(2024, 1, 1)
        )


def make_record(ean, **fields) -> BookRecord:
    fields.setdefault("date_entree", date(2024, 1, 1))
    return BookRecord(ean=ean, **fields)


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Isole dossiers de données, configuration et base dans tmp_path."""
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    db_file = tmp_path / "catalog_env.db"
    monkeypatch.setenv("DATABASE_URL", "sqlite:///" + str(db_file).replace("\\", "/"))
    return tmp_path


@pytest.fixture
def database(tmp_path):
    db = Database("sqlite:///" + str(tmp_path / "catalog_test.db").replace("\\", "/"))
    db.open()
    yield db
    db.close()


@pytest.fixture
def store(database):
    return CountingStore(database)


@pytest.fixture
def lookup():
    return FakeLookup()


@pytest.fixture
def catalog(store, lookup):
    return CatalogService(store, lookup)


@pytest.fixture
def seeded(store):
    """Cinq livres : trois à traiter, deux catalogués."""
    records = [
        make_record(
            "9780000000001", titre="Naruto 1", genre=Genre.mangas, cote="M KIS",
            date_entree=date(2024, 3, 1),
        ),
        make_record(
            "9780000000002", titre="Tchoupi", genre=Genre.albums, cote="A COU",
            statut=Statut.en_cours, date_entree=date(2024, 3, 5),
        ),
        make_record(
            "9780000000003", titre="One Piece 1", genre=Genre.mangas, cote="M ODA",
            date_entree=None,
        ),
        make_record(
            "9780000000004", titre="Le Petit Prince", genre=Genre.conte, cote="C SAI",
            statut=Statut.catalogue, date_entree=date(2024, 2, 1),
        ),
        make_record(
            "9780000000005", titre="Pierre et le loup", genre=Genre.livres_cd, cote="CD PRO",
            statut=Statut.catalogue, date_entree=date(2024, 4, 1),
        ),
    ]
    for r in records:
        RecordStore.put(store, r)
    return records
