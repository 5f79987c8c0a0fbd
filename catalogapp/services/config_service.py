"""
Service de gestion de la configuration de l'application.

Ce module centralise les paramètres qui ne changent pas au fil d'une
session (emplacement de la base, timeout réseau, niveau de log).
L'idée est d'avoir une "source de vérité" unique pour ces paramètres.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass

from ..utils.paths import db_path, user_config_file

logger = logging.getLogger("catalog.services.config")

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"


@dataclass(frozen=True)
class AppConfig:
    """Paramètres de l'application."""

    database_path: str | None = None
    lookup_timeout: int = 10
    log_level: str = "INFO"
    console_logging: bool = False
    google_books_url: str = GOOGLE_BOOKS_URL


def load_config() -> AppConfig:
    """Charge la configuration, ou les valeurs par défaut si le fichier est absent ou invalide."""
    config_path = user_config_file()
    if not config_path.exists():
        logger.info("Fichier de configuration absent, utilisation des valeurs par défaut.")
        return AppConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.error(
                "Configuration invalide (%s): objet JSON attendu. Valeurs par défaut.", config_path
            )
            return AppConfig()
        # Les clés inconnues (anciennes versions) sont ignorées
        known = AppConfig.__dataclass_fields__.keys()
        return AppConfig(**{k: v for k, v in data.items() if k in known})
    except (OSError, json.JSONDecodeError, TypeError) as e:
        logger.error(
            "Lecture de la configuration impossible (%s): %s. Valeurs par défaut.", config_path, e
        )
        return AppConfig()


def save_config(config: AppConfig) -> None:
    """Sauvegarde la configuration dans le fichier JSON."""
    config_path = user_config_file()
    try:
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(asdict(config), f, indent=4)
        logger.info("Configuration sauvegardée dans %s", config_path)
    except OSError as e:
        logger.error("Écriture de la configuration impossible (%s): %s", config_path, e)


def database_url(config: AppConfig) -> str:
    """
    Construit l'URL SQLAlchemy de la base.

    Priorité : variable d'environnement `DATABASE_URL`, puis
    `database_path` de la configuration, puis l'emplacement par défaut.
    """
    env_url = os.environ.get("DATABASE_URL")
    if env_url:
        return env_url
    if config.database_path:
        return f"sqlite:///{config.database_path}"
    return f"sqlite:///{db_path().as_posix()}"
