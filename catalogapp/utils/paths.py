"""
Gestion centralisée des chemins de fichiers de l'application.

Ce module fournit des fonctions pour obtenir les chemins d'accès aux
répertoires et fichiers de données de l'application de manière
fiable et multi-plateforme, en utilisant le dossier de données de
l'utilisateur (ex: %LOCALAPPDATA% sur Windows, ~/.local/share sur Linux).
"""

from __future__ import annotations

import os
from pathlib import Path

_APP_NAME = "Catalog-Tracker"
_AUTHOR = "Bibliotheque"


def _get_app_dir() -> Path:
    """Détermine le dossier de données de l'application en fonction de l'OS."""
    if os.name == "nt":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    else:
        # Suit la convention XDG pour Linux
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))

    return base / _AUTHOR / _APP_NAME


def user_data_dir() -> Path:
    """Retourne le chemin vers le dossier principal des données utilisateur."""
    p = _get_app_dir()
    p.mkdir(parents=True, exist_ok=True)
    return p


def user_config_file() -> Path:
    """Retourne le chemin vers le fichier de configuration JSON."""
    return user_data_dir() / "config.json"


def db_path() -> Path:
    """Retourne le chemin vers le fichier de la base de données SQLite."""
    p = user_data_dir() / "db" / "catalog.db"
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def logs_path() -> Path:
    """Retourne le chemin vers le dossier destiné à stocker les logs."""
    p = user_data_dir() / "logs"
    p.mkdir(parents=True, exist_ok=True)
    return p
