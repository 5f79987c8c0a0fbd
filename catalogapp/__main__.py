"""
Interface en ligne de commande du suivi de catalogage.

Usage :
    python -m catalogapp add 9782070612758
    python -m catalogapp import livres.csv
    python -m catalogapp list --statut "En cours" --sort-cote asc
    python -m catalogapp delete 9782070612758
    python -m catalogapp migrate
"""

from __future__ import annotations

import argparse
import sys

from .services.catalog_service import open_catalog
from .services.config_service import AppConfig, load_config
from .services.errors import CatalogError, PartialBatchFailure
from .services.logging_config import setup_app_logging
from .services.types import GENRES, STATUTS, BookRecord
from .services.utils import format_date_display


def _print_records(title: str, records: tuple[BookRecord, ...]) -> None:
    print(f"{title} ({len(records)})")
    for b in records:
        genre = b.genre.value if b.genre else ""
        print(
            f"  {b.ean}  {format_date_display(b.date_entree):10}  {b.titre}"
            f" | {b.auteur} | {b.cote} | {genre} | {b.statut.value}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m catalogapp", description="Suivi des livres à cataloguer"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Affiche les logs en console")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Ajouter un livre par son EAN")
    add.add_argument("ean")

    imp = sub.add_parser("import", help="Importer un fichier CSV ou XLSX")
    imp.add_argument("file")

    lst = sub.add_parser("list", help="Afficher les livres")
    lst.add_argument("--genre", choices=GENRES)
    lst.add_argument("--statut", choices=STATUTS)
    lst.add_argument("--sort-cote", choices=("asc", "desc"))

    delete = sub.add_parser("delete", help="Supprimer un livre")
    delete.add_argument("ean")

    sub.add_parser("migrate", help="Ouvrir la base et appliquer les migrations")
    return parser


def run(args: argparse.Namespace, config: AppConfig) -> int:
    with open_catalog(config) as catalog:
        if args.command == "add":
            record = catalog.add_by_code(args.ean)
            print(f"Ajouté : {record.ean} - {record.titre}")
        elif args.command == "import":
            result = catalog.import_file(args.file)
            print(
                f"{result.imported} livre(s) importé(s) "
                f"({result.inserted} nouveau(x), {result.updated} remplacé(s), "
                f"{result.skipped} ligne(s) ignorée(s))"
            )
            for item in result.errors:
                print(f"  ligne {item.row_index} [{item.severity}] {item.field}: {item.message}")
        elif args.command == "list":
            catalog.set_filter(genre=args.genre, statut=args.statut, sort_cote=args.sort_cote)
            view = catalog.derive_view()
            _print_records("À cataloguer / En cours", view.pending)
            _print_records("Catalogués", view.completed)
        elif args.command == "delete":
            catalog.delete(args.ean)
            print(f"Supprimé : {args.ean}")
        elif args.command == "migrate":
            print(f"Base à jour : {catalog.store.database.url}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()
    setup_app_logging(config.log_level, console_output=args.verbose or config.console_logging)
    try:
        return run(args, config)
    except PartialBatchFailure as e:
        print(f"Erreur : {e.succeeded} livre(s) traité(s), {e.failed} en échec", file=sys.stderr)
        return 1
    except (CatalogError, ValueError) as e:
        print(f"Erreur : {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
