"""
Service métier pour la gestion des classes d'un enseignant.
"""

import uuid
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from classbook.exceptions import ForbiddenError, NotFoundError
from classbook.models.activity import Activity
from classbook.models.school_class import SchoolClass
from classbook.models.student import Student
from classbook.schemas.school_class import ClassCreate, ClassResponse, ClassUpdate

logger = logging.getLogger(__name__)


def get_owned_class(db: Session, class_id: uuid.UUID, teacher_id: str) -> SchoolClass:
    """
    Retourne la classe si elle appartient à l'enseignant.
    Lève NotFoundError si inexistante, ForbiddenError si elle appartient à un autre enseignant.
    """
    school_class = db.get(SchoolClass, class_id)
    if school_class is None:
        raise NotFoundError("Classe introuvable.")
    if school_class.teacher_id != teacher_id:
        raise ForbiddenError("Vous n'avez pas accès à cette classe.")
    return school_class


def create_class(db: Session, data: ClassCreate, teacher_id: str) -> ClassResponse:
    """Crée une nouvelle classe (0 élève) appartenant à l'enseignant."""
    school_class = SchoolClass(
        name=data.name,
        description=data.description,
        subject=data.subject,
        teacher_id=teacher_id,
    )
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    logger.info("Classe créée : %s (%s) par %s", school_class.name, school_class.id, teacher_id)
    return _to_response(db, school_class)


def get_classes(db: Session, teacher_id: str) -> list[ClassResponse]:
    """Retourne les classes de l'enseignant dans l'ordre de création."""
    classes = db.execute(
        select(SchoolClass)
        .where(SchoolClass.teacher_id == teacher_id)
        .order_by(SchoolClass.created_at, SchoolClass.name)
    ).scalars().all()
    return [_to_response(db, c) for c in classes]


def get_class(db: Session, class_id: uuid.UUID, teacher_id: str) -> ClassResponse:
    return _to_response(db, get_owned_class(db, class_id, teacher_id))


def update_class(db: Session, class_id: uuid.UUID, data: ClassUpdate, teacher_id: str) -> ClassResponse:
    """Met à jour les champs fournis d'une classe (nom, description, matière)."""
    school_class = get_owned_class(db, class_id, teacher_id)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(school_class, field, value)

    db.commit()
    db.refresh(school_class)
    return _to_response(db, school_class)


def delete_class(db: Session, class_id: uuid.UUID, teacher_id: str) -> None:
    """
    Supprime une classe avec ses élèves et ses activités.
    Les trois suppressions sont faites dans une seule transaction :
    un échec en cours de route ne laisse aucun élève ni activité orphelin.
    """
    school_class = get_owned_class(db, class_id, teacher_id)

    nb_students = db.execute(
        delete(Student).where(Student.class_id == class_id)
    ).rowcount
    nb_activities = db.execute(
        delete(Activity).where(Activity.class_id == class_id)
    ).rowcount
    db.delete(school_class)
    db.commit()

    logger.info(
        "Classe supprimée : %s — %d élèves et %d activités supprimés",
        class_id, nb_students, nb_activities,
    )


def count_students(db: Session, class_id: uuid.UUID) -> int:
    return db.execute(
        select(func.count())
        .select_from(Student)
        .where(Student.class_id == class_id)
    ).scalar() or 0


def _to_response(db: Session, school_class: SchoolClass) -> ClassResponse:
    """Construit le schéma de réponse avec le nombre d'élèves compté à la lecture."""
    return ClassResponse(
        id=school_class.id,
        name=school_class.name,
        description=school_class.description,
        subject=school_class.subject,
        teacher_id=school_class.teacher_id,
        student_count=count_students(db, school_class.id),
        created_at=school_class.created_at,
        updated_at=school_class.updated_at,
    )
