"""
Service d'import d'élèves dans une classe depuis un tableur (CSV ou Excel .xlsx).
Gère le parsing, la validation et l'insertion bulk.

Colonnes reconnues (insensibles à la casse, espaces/tirets/underscores ignorés) :
- `name` (obligatoire)
- `rollNumber`, `email` (optionnelles)
Les autres colonnes sont ignorées.
"""

import csv
import io
import logging
import re
import uuid
import zipfile
from typing import Any, Iterator, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.orm import Session

from classbook.exceptions import ValidationError
from classbook.models.student import Student
from classbook.schemas.student import ImportIssue, StudentImportReport, StudentImportRow
from classbook.services.class_service import get_owned_class

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"name"}
OPTIONAL_COLUMNS = {"rollnumber", "email"}
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
EXCEL_EXTENSIONS = (".xlsx", ".xlsm")


def _normalize_header(raw: Any) -> str:
    """Normalise un nom de colonne : `Roll Number`, `roll_number`, `rollNumber` → `rollnumber`."""
    if raw is None:
        return ""
    return re.sub(r"[\s_\-]", "", str(raw)).lower()


def _detect_separator(sample: str) -> str:
    """Détecte le séparateur CSV (virgule ou point-virgule)."""
    if sample.count(";") > sample.count(","):
        return ";"
    return ","


def _cell_to_str(value: Any) -> str:
    """Convertit une cellule en texte. Excel renvoie 12.0 pour un numéro saisi 12."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _read_csv(content: bytes) -> tuple[list[str], Iterator[list[Any]]]:
    try:
        text = content.decode("utf-8-sig")  # utf-8-sig gère le BOM Excel
    except UnicodeDecodeError:
        raise ValidationError("Fichier illisible : encodage UTF-8 attendu.")
    lines = text.splitlines()
    separator = _detect_separator(lines[0] if lines else "")
    reader = csv.reader(io.StringIO(text), delimiter=separator)
    header = next(reader, None)
    return header or [], reader


def _read_excel(content: bytes) -> tuple[list[Any], Iterator[tuple]]:
    """Lit la première feuille du classeur."""
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise ValidationError(f"Fichier Excel illisible : {e}")
    sheet = workbook.worksheets[0]
    rows = sheet.iter_rows(values_only=True)
    header = next(rows, None)
    return list(header or []), rows


def read_rows(content: bytes, filename: str) -> tuple[list[Any], Iterator]:
    """Retourne (en-tête, itérateur de lignes) selon l'extension du fichier."""
    if filename.lower().endswith(EXCEL_EXTENSIONS):
        return _read_excel(content)
    return _read_csv(content)


def parse_rows(content: bytes, filename: str) -> tuple[list[StudentImportRow], list[ImportIssue], int]:
    """
    Parse le fichier et valide chaque ligne.

    Règles :
    - Lignes entièrement vides : ignorées sans erreur
    - `name` vide : ligne ignorée et signalée
    - Email invalide : l'élève est importé sans email, l'anomalie est signalée

    Retourne (lignes valides, anomalies, nombre de lignes non vides).
    """
    header, rows = read_rows(content, filename)
    field_map = {_normalize_header(h): i for i, h in enumerate(header) if _normalize_header(h)}

    missing = REQUIRED_COLUMNS - field_map.keys()
    if missing:
        raise ValidationError(
            f"Colonnes manquantes : {', '.join(sorted(missing))}. "
            f"Colonnes trouvées : {', '.join(str(h) for h in header if h is not None) or 'aucune'}"
        )

    def cell(row, column: str) -> str:
        index = field_map.get(column)
        if index is None or index >= len(row):
            return ""
        return _cell_to_str(row[index])

    valid_rows: list[StudentImportRow] = []
    issues: list[ImportIssue] = []
    total_rows = 0

    for row_num, row in enumerate(rows, start=2):  # ligne 1 = en-tête
        if not any(_cell_to_str(v) for v in row):
            continue
        total_rows += 1

        raw_name = cell(row, "name")
        raw_roll = cell(row, "rollnumber")
        raw_email = cell(row, "email")

        if not raw_name:
            issues.append(ImportIssue(
                row=row_num,
                content=", ".join(_cell_to_str(v) for v in row),
                reason="Nom manquant : ligne ignorée",
            ))
            continue

        email: Optional[str] = raw_email or None
        if email and not EMAIL_REGEX.match(email):
            issues.append(ImportIssue(
                row=row_num,
                content=f"{raw_name}, {raw_email}",
                reason=f"Format email invalide, importé sans email : {raw_email}",
            ))
            email = None

        valid_rows.append(StudentImportRow(
            name=raw_name,
            roll_number=raw_roll or None,
            email=email,
        ))

    return valid_rows, issues, total_rows


def import_students(
    db: Session, class_id: uuid.UUID, content: bytes, filename: str, teacher_id: str
) -> StudentImportReport:
    """
    Importe les élèves du fichier dans la classe.
    Toutes les lignes valides sont insérées dans une seule transaction :
    un échec n'insère aucun élève.
    """
    get_owned_class(db, class_id, teacher_id)

    valid_rows, issues, total_rows = parse_rows(content, filename)

    if valid_rows:
        db.bulk_insert_mappings(Student, [
            {
                "name": r.name,
                "roll_number": r.roll_number,
                "email": r.email,
                "class_id": class_id,
            }
            for r in valid_rows
        ])
        db.commit()

    logger.info(
        "Import élèves classe %s : %d lignes, %d insérés, %d ignorés",
        class_id, total_rows, len(valid_rows), total_rows - len(valid_rows),
    )

    return StudentImportReport(
        total_rows=total_rows,
        inserted=len(valid_rows),
        skipped=total_rows - len(valid_rows),
        errors=issues,
    )
