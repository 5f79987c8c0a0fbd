"""
Migration du schéma de la base SQLite.

La version du schéma est stockée dans `PRAGMA user_version`. La migration
est exécutée une seule fois, à l'ouverture de la base, et ne perd aucune
fiche :

- version 2 : ajout des colonnes `cote` et `genre` si elles manquent,
  conversion des dates d'entrée saisies en JJ/MM/AAAA vers AAAA-MM-JJ,
  remise à un libellé connu des statuts et genres hors énumération.

Usage :
    python -m catalogapp.persistence.migrate --upgrade
"""

from __future__ import annotations

import logging
import sys

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from ..services.types import GENRES, STATUTS, Statut

logger = logging.getLogger("catalog.persistence.migrate")

SCHEMA_VERSION = 2


def schema_version(conn: Connection) -> int:
    """Lit la version du schéma enregistrée dans la base."""
    return int(conn.execute(text("PRAGMA user_version")).scalar_one())


def column_exists(conn: Connection, table: str, col: str) -> bool:
    """Vérifie si une colonne existe dans une table donnée."""
    rows = conn.execute(text(f"PRAGMA table_info({table})")).fetchall()
    return any(r[1] == col for r in rows)


def _in_list(labels) -> str:
    return ", ".join("'" + label.replace("'", "''") + "'" for label in labels)


def _upgrade_to_v2(conn: Connection) -> None:
    if not column_exists(conn, "books", "cote"):
        conn.execute(text("ALTER TABLE books ADD COLUMN cote VARCHAR NOT NULL DEFAULT ''"))
    if not column_exists(conn, "books", "genre"):
        conn.execute(text("ALTER TABLE books ADD COLUMN genre VARCHAR(14)"))

    # Dates saisies à la française par les anciens imports
    conn.execute(
        text(
            "UPDATE books SET date_entree = substr(date_entree, 7, 4) || '-' "
            "|| substr(date_entree, 4, 2) || '-' || substr(date_entree, 1, 2) "
            "WHERE date_entree LIKE '__/__/____'"
        )
    )
    conn.execute(
        text(
            "UPDATE books SET date_entree = NULL WHERE date_entree IS NOT NULL "
            "AND date_entree NOT GLOB '[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]'"
        )
    )
    conn.execute(
        text(
            f"UPDATE books SET statut = :default WHERE statut IS NULL "
            f"OR statut NOT IN ({_in_list(STATUTS)})"
        ),
        {"default": Statut.a_cataloguer.value},
    )
    conn.execute(
        text(f"UPDATE books SET genre = NULL WHERE genre NOT IN ({_in_list(GENRES)})")
    )


def current_version(engine: Engine) -> int:
    """Version du schéma d'une base déjà ouverte."""
    with engine.connect() as conn:
        return schema_version(conn)


def upgrade(engine: Engine) -> int:
    """
    Applique les migrations nécessaires et retourne la version finale.

    Sans effet si la base est déjà à jour.
    """
    with engine.begin() as conn:
        current = schema_version(conn)
        if current >= SCHEMA_VERSION:
            return current

        logger.info("Migration du schéma : v%s -> v%s", current, SCHEMA_VERSION)
        if current < 2:
            _upgrade_to_v2(conn)
        conn.execute(text(f"PRAGMA user_version = {SCHEMA_VERSION}"))

    return SCHEMA_VERSION


if __name__ == "__main__":
    if "--upgrade" in sys.argv:
        from ..services.config_service import database_url, load_config
        from .database import Database

        with Database(database_url(load_config())) as db:
            print(f"Schéma à jour (version {current_version(db.engine)}).")
    else:
        print("Usage: python -m catalogapp.persistence.migrate --upgrade")
