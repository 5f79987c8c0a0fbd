"""Suivi des livres à cataloguer : moteur d'état du catalogue."""

__version__ = "1.0.0"
