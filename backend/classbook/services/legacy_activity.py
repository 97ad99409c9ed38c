"""
Migration unique des activités au format historique.

Une ancienne version du client enregistrait les activités avec d'autres noms de champs :
- `lessonTitle` au lieu de `title`
- par élève, `attendance` (booléen ou "present"/"absent") au lieu de `isPresent`
  et `classwork` au lieu de `remarks`

Ces documents (export JSON de la base documentaire, champs en camelCase) sont convertis
au format courant puis insérés. L'API ne sert jamais l'ancien format.
"""

import uuid
import logging
import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from classbook.models.activity import Activity
from classbook.models.school_class import SchoolClass
from classbook.schemas.activity import clean_remarks
from classbook.services.activity_service import find_activity_on_day, normalize_date

logger = logging.getLogger(__name__)

# Espace de noms des identifiants hérités : un id de document non-UUID est converti
# de façon déterministe, les classes et élèves migrés reçoivent le même UUID.
LEGACY_NAMESPACE = uuid.UUID("6f1c3a4e-2b7d-4c1e-9a55-0d3e8b7f2a10")

PRESENT_VALUES = {"present", "présent", "p", "yes", "true", "1"}
ABSENT_VALUES = {"absent", "a", "no", "false", "0"}


class LegacyMigrationReport(BaseModel):
    total: int
    inserted: int
    conflicts: int
    invalid: int
    errors: list[str]


def legacy_uuid(value: Any) -> uuid.UUID:
    """UUID tel quel s'il est valide, sinon uuid5 de l'identifiant d'origine."""
    text = str(value).strip()
    if not text:
        raise ValueError("Identifiant vide.")
    try:
        return uuid.UUID(text)
    except ValueError:
        return uuid.uuid5(LEGACY_NAMESPACE, text)


def _parse_instant(value: Any) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Date invalide : {value!r}")
    # fromisoformat n'accepte le suffixe Z qu'à partir de Python 3.11
    return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))


def _parse_presence(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in PRESENT_VALUES:
        return True
    if text in ABSENT_VALUES:
        return False
    raise ValueError(f"Valeur de présence inconnue : {value!r}")


def _upgrade_student(raw: dict) -> dict:
    presence = raw["isPresent"] if "isPresent" in raw else raw.get("attendance")
    remarks = raw["remarks"] if "remarks" in raw else raw.get("classwork")
    return {
        "id": str(legacy_uuid(raw["id"])),
        "name": raw["name"],
        "roll_number": raw.get("rollNumber"),
        "is_present": _parse_presence(presence),
        "remarks": clean_remarks(remarks),
    }


def upgrade_legacy_activity(doc: dict) -> dict:
    """
    Convertit un document d'activité (ancien ou courant) en champs du modèle Activity.
    Lève ValueError ou KeyError si le document est inexploitable.
    """
    title = doc.get("title") or doc.get("lessonTitle")
    if not title or not str(title).strip():
        raise ValueError("Titre manquant (title / lessonTitle).")

    teacher_id = str(doc.get("teacherId") or "").strip()
    if not teacher_id:
        raise ValueError("Enseignant manquant (teacherId).")

    date = normalize_date(_parse_instant(doc["date"]))
    created_at: Optional[dt.datetime] = None
    if doc.get("createdAt"):
        created_at = normalize_date(_parse_instant(doc["createdAt"]))

    return {
        "title": str(title).strip(),
        "date": date,
        "day": date.date(),
        "class_id": legacy_uuid(doc["classId"]),
        "class_name": doc.get("className") or "",
        "teacher_id": teacher_id,
        "students": [_upgrade_student(s) for s in doc.get("students") or []],
        "created_at": created_at,
    }


def import_legacy_activities(db: Session, documents: list[dict]) -> LegacyMigrationReport:
    """
    Insère les documents convertis dont le couple (classe, jour) est libre.
    Les documents invalides, ceux d'une classe inconnue ou d'un autre enseignant
    et les doublons sont ignorés et comptés.
    """
    inserted = conflicts = invalid = 0
    errors: list[str] = []
    taken: set[tuple[uuid.UUID, dt.date]] = set()

    for index, doc in enumerate(documents):
        try:
            fields = upgrade_legacy_activity(doc)
        except (KeyError, TypeError, ValueError) as e:
            invalid += 1
            errors.append(f"Document {index} : {e!r}")
            continue

        school_class = db.get(SchoolClass, fields["class_id"])
        if school_class is None:
            invalid += 1
            errors.append(f"Document {index} : classe {fields['class_id']} introuvable")
            continue
        if school_class.teacher_id != fields["teacher_id"]:
            invalid += 1
            errors.append(
                f"Document {index} : la classe {school_class.id} n'appartient pas à {fields['teacher_id']}"
            )
            continue

        key = (fields["class_id"], fields["day"])
        if key in taken or find_activity_on_day(db, *key) is not None:
            conflicts += 1
            errors.append(f"Document {index} : activité déjà présente le {fields['day']}")
            continue
        taken.add(key)

        if not fields["class_name"]:
            fields["class_name"] = school_class.name
        if fields["created_at"] is None:
            del fields["created_at"]
        db.add(Activity(**fields))
        inserted += 1

    db.commit()
    logger.info(
        "Migration activités : %d documents, %d insérés, %d doublons, %d invalides",
        len(documents), inserted, conflicts, invalid,
    )
    return LegacyMigrationReport(
        total=len(documents),
        inserted=inserted,
        conflicts=conflicts,
        invalid=invalid,
        errors=errors,
    )
