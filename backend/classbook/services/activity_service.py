"""
Service métier pour les activités (présences + remarques d'une séance de classe).

Règles :
- Une seule activité par classe et par jour calendaire : vérification préalable
  sur l'intervalle [début du jour, fin du jour], doublée de la contrainte
  uq_activity_class_day (deux créations simultanées ne passent pas toutes les deux).
- Les élèves sont copiés dans l'activité à sa création (snapshot) ; la composition
  n'est jamais resynchronisée avec la classe.
- Les compteurs de présence sont calculés à la lecture, jamais stockés.
"""

import math
import uuid
import logging
import datetime as dt
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classbook.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from classbook.models.activity import Activity
from classbook.models.student import Student
from classbook.schemas.activity import (
    ActivityCreate,
    ActivityResponse,
    ActivityStudent,
    ActivityUpdate,
    DashboardResponse,
    StudentAttendance,
    clean_remarks,
)
from classbook.services.class_service import get_owned_class

logger = logging.getLogger(__name__)

RECENT_ACTIVITIES_LIMIT = 5
DUPLICATE_MESSAGE = "Une activité existe déjà pour cette classe à cette date."


def day_bounds(day: dt.date) -> tuple[dt.datetime, dt.datetime]:
    """Retourne [début du jour, fin du jour] pour un jour calendaire."""
    return dt.datetime.combine(day, dt.time.min), dt.datetime.combine(day, dt.time.max)


def normalize_date(value: dt.datetime) -> dt.datetime:
    """
    Les dates sont stockées sans fuseau, à l'heure murale de l'enseignant :
    le jour calendaire est celui de la date telle que saisie.
    """
    return value.replace(tzinfo=None)


def attendance_summary(students: list[dict]) -> tuple[int, int, int]:
    """
    Calcule (présents, absents, pourcentage de présence arrondi).
    Arrondi au plus proche, 0,5 vers le haut (12,5 % → 13 %). Une liste vide donne 0 %.
    """
    total = len(students)
    present = sum(1 for s in students if s.get("is_present"))
    absent = total - present
    percent = math.floor(present * 100 / total + 0.5) if total else 0
    return present, absent, percent


def find_activity_on_day(db: Session, class_id: uuid.UUID, day: dt.date) -> Optional[uuid.UUID]:
    """Retourne l'ID de l'activité existante de la classe pour ce jour, ou None."""
    start, end = day_bounds(day)
    return db.execute(
        select(Activity.id)
        .where(
            Activity.class_id == class_id,
            Activity.date >= start,
            Activity.date <= end,
        )
        .limit(1)
    ).scalar()


def _apply_attendance(snapshot: list[dict], marks: list[StudentAttendance]) -> list[dict]:
    """Reporte présences et remarques sur le snapshot, dans l'ordre du snapshot."""
    known_ids = {s["id"] for s in snapshot}
    by_id: dict[str, StudentAttendance] = {}
    for mark in marks:
        key = str(mark.id)
        if key not in known_ids:
            raise ValidationError(f"L'élève {mark.id} ne fait pas partie de cette activité.")
        if key in by_id:
            raise ValidationError(f"L'élève {mark.id} apparaît plusieurs fois.")
        by_id[key] = mark

    result = []
    for entry in snapshot:
        mark = by_id.get(entry["id"])
        if mark is None:
            result.append(dict(entry))
        else:
            result.append({
                **entry,
                "is_present": mark.is_present,
                "remarks": clean_remarks(mark.remarks),
            })
    return result


def create_activity(db: Session, data: ActivityCreate, teacher_id: str) -> ActivityResponse:
    """
    Crée l'activité du jour pour une classe.

    Étapes :
    1. Vérifier la propriété de la classe et copier ses élèves (tous présents, sans remarque)
    2. Appliquer la saisie initiale éventuelle
    3. Refuser s'il existe déjà une activité pour cette classe ce jour-là (ConflictError)
    4. Insérer ; une violation de la contrainte d'unicité au commit donne aussi ConflictError
    """
    school_class = get_owned_class(db, data.class_id, teacher_id)

    roster = db.execute(
        select(Student)
        .where(Student.class_id == school_class.id)
        .order_by(Student.name)
    ).scalars().all()
    if not roster:
        raise ValidationError("Impossible de créer une activité pour une classe sans élève.")

    snapshot = [
        {
            "id": str(s.id),
            "name": s.name,
            "roll_number": s.roll_number,
            "is_present": True,
            "remarks": None,
        }
        for s in roster
    ]
    if data.students:
        snapshot = _apply_attendance(snapshot, data.students)

    date = normalize_date(data.date)
    day = date.date()

    if find_activity_on_day(db, school_class.id, day) is not None:
        raise ConflictError(DUPLICATE_MESSAGE)

    activity = Activity(
        title=data.title,
        date=date,
        day=day,
        class_id=school_class.id,
        class_name=school_class.name,
        teacher_id=teacher_id,
        students=snapshot,
    )
    db.add(activity)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_MESSAGE)
    db.refresh(activity)

    logger.info(
        "Activité créée : %s (%s) — classe %s le %s, %d élèves",
        activity.title, activity.id, school_class.id, day, len(snapshot),
    )
    return _to_response(activity)


def get_owned_activity(db: Session, activity_id: uuid.UUID, teacher_id: str) -> Activity:
    activity = db.get(Activity, activity_id)
    if activity is None:
        raise NotFoundError("Activité introuvable.")
    if activity.teacher_id != teacher_id:
        raise ForbiddenError("Vous n'avez pas accès à cette activité.")
    return activity


def get_activity(db: Session, activity_id: uuid.UUID, teacher_id: str) -> ActivityResponse:
    return _to_response(get_owned_activity(db, activity_id, teacher_id))


def get_activities(
    db: Session, teacher_id: str, class_id: Optional[uuid.UUID] = None
) -> list[ActivityResponse]:
    """Retourne les activités de l'enseignant, de la plus récente à la plus ancienne."""
    query = select(Activity).where(Activity.teacher_id == teacher_id)
    if class_id is not None:
        query = query.where(Activity.class_id == class_id)
    activities = db.execute(query.order_by(Activity.date.desc())).scalars().all()
    return [_to_response(a) for a in activities]


def update_activity(
    db: Session, activity_id: uuid.UUID, data: ActivityUpdate, teacher_id: str
) -> ActivityResponse:
    """
    Remplace les présences et remarques de tous les élèves de l'activité.
    Chaque élève du snapshot doit figurer exactement une fois ; le dernier enregistrement l'emporte.
    """
    activity = get_owned_activity(db, activity_id, teacher_id)

    submitted = {str(m.id) for m in data.students}
    expected = {s["id"] for s in activity.students}
    if len(data.students) != len(expected) or submitted != expected:
        raise ValidationError(
            "La liste doit contenir exactement les élèves de l'activité, une fois chacun."
        )

    # Réaffectation complète : la colonne JSON n'est pas suivie en cas de mutation sur place
    activity.students = _apply_attendance(activity.students, data.students)
    db.commit()
    db.refresh(activity)
    return _to_response(activity)


def delete_activity(db: Session, activity_id: uuid.UUID, teacher_id: str) -> None:
    activity = get_owned_activity(db, activity_id, teacher_id)
    db.delete(activity)
    db.commit()
    logger.info("Activité supprimée : %s", activity_id)


def get_dashboard(db: Session, teacher_id: str, today: Optional[dt.date] = None) -> DashboardResponse:
    """Activités du jour et les dernières activités avant aujourd'hui."""
    today = today or dt.date.today()
    start, end = day_bounds(today)

    todays = db.execute(
        select(Activity)
        .where(
            Activity.teacher_id == teacher_id,
            Activity.date >= start,
            Activity.date <= end,
        )
        .order_by(Activity.date.desc())
    ).scalars().all()

    recent = db.execute(
        select(Activity)
        .where(
            Activity.teacher_id == teacher_id,
            Activity.date < start,
        )
        .order_by(Activity.date.desc())
        .limit(RECENT_ACTIVITIES_LIMIT)
    ).scalars().all()

    return DashboardResponse(
        today=[_to_response(a) for a in todays],
        recent=[_to_response(a) for a in recent],
    )


def _to_response(activity: Activity) -> ActivityResponse:
    """Construit le schéma de réponse avec les compteurs de présence."""
    students = activity.students or []
    present, absent, percent = attendance_summary(students)
    return ActivityResponse(
        id=activity.id,
        title=activity.title,
        date=activity.date,
        class_id=activity.class_id,
        class_name=activity.class_name,
        teacher_id=activity.teacher_id,
        students=[ActivityStudent(**s) for s in students],
        total_students=len(students),
        present_count=present,
        absent_count=absent,
        attendance_percent=percent,
        created_at=activity.created_at,
    )
