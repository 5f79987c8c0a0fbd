"""Configuration centralisée du logging pour l'application."""

import logging
import logging.handlers

from ..utils.paths import logs_path

LOG_FILE_NAME = "catalog.log"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Handlers posés par setup_app_logging, retirés à l'appel suivant
_installed: list[logging.Handler] = []


def setup_app_logging(log_level: str = "INFO", console_output: bool = False) -> logging.Logger:
    """Configure le logging de toute l'application (fichier tournant + console optionnelle).

    Un nouvel appel remplace les handlers posés précédemment, sans toucher
    à ceux installés par ailleurs (pytest, application hôte).

    Args:
        log_level: Niveau de log (DEBUG, INFO, WARNING, ERROR)
        console_output: Si True, affiche aussi en console

    Returns:
        Logger racine configuré
    """
    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    log_file = logs_path() / LOG_FILE_NAME
    # 10MB, 5 fichiers
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10_000_000, backupCount=5, encoding="utf-8"
    )
    _installed.append(file_handler)

    if console_output:
        _installed.append(logging.StreamHandler())

    for handler in _installed:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Bruit SQL uniquement en DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if root.level <= logging.DEBUG else logging.WARNING
    )

    root.info("Logging configuré - fichier: %s", log_file)
    return root
