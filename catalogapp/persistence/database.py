"""
Module de gestion de la connexion à la base de données.

La base est une base SQLite locale. Plutôt qu'un moteur global créé à
l'import du module, l'application construit explicitement un `Database`,
l'ouvre (création des tables + migration éventuelle) puis le transmet
aux services qui en ont besoin.

Exemple d'utilisation :
    with Database("sqlite:///catalog.db") as db:
        store = RecordStore(db)
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..services.errors import StoreFailure
from .migrate import upgrade
from .models_sa import Base

logger = logging.getLogger("catalog.persistence.database")


class Database:
    """Poignée explicite sur la base : moteur + factory de sessions."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StoreFailure("La base de données n'est pas ouverte.")
        return self._engine

    def open(self) -> Database:
        """
        Ouvre la base, crée les tables manquantes et applique les migrations.

        Raises:
            StoreFailure: Si la base ne peut pas être ouverte ou migrée.
        """
        if self._engine is not None:
            return self

        engine = create_engine(self.url, echo=self.echo, future=True)
        try:
            Base.metadata.create_all(bind=engine)
            upgrade(engine)
        except SQLAlchemyError as e:
            engine.dispose()
            logger.error("Ouverture de la base impossible (%s): %s", self.url, e)
            raise StoreFailure(f"Ouverture de la base impossible : {e}") from e

        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True
        )
        logger.info("Base de données ouverte : %s", self.url)
        return self

    def close(self) -> None:
        """Libère les connexions du moteur."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Base de données fermée : %s", self.url)

    def session(self) -> Session:
        """Fournit une nouvelle session SQLAlchemy."""
        if self._session_factory is None:
            raise StoreFailure("La base de données n'est pas ouverte.")
        return self._session_factory()

    def __enter__(self) -> Database:
        return self.open()

    def __exit__(self, exc_type, exc_val, traceback):
        self.close()
