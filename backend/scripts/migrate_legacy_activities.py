"""
Migration unique des activités exportées au format historique.

Usage : python backend/scripts/migrate_legacy_activities.py export_activities.json
Le fichier contient une liste JSON de documents d'activité (ou {"activities": [...]}).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import classbook.models  # noqa: F401 — enregistre les tables avant la création du schéma
from classbook.database import Base, SessionLocal, engine
from classbook.services.legacy_activity import import_legacy_activities


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Importe des activités au format historique.")
    parser.add_argument("export", type=Path, help="Fichier JSON exporté")
    parser.add_argument("--create-tables", action="store_true",
                        help="Crée les tables manquantes avant l'import")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s : %(message)s")

    documents = json.loads(args.export.read_text(encoding="utf-8"))
    if isinstance(documents, dict):
        documents = documents.get("activities", [])

    if args.create_tables:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        report = import_legacy_activities(db, documents)
    finally:
        db.close()

    for error in report.errors:
        logging.warning(error)
    print(
        f"{report.inserted}/{report.total} activités importées "
        f"({report.conflicts} doublons, {report.invalid} invalides)"
    )
    return 0 if report.invalid == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
