"""
Service métier pour les élèves d'une classe (saisie manuelle, modification, suppression).
La propriété d'un élève est vérifiée à travers sa classe.
"""

import uuid
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from classbook.exceptions import ForbiddenError, NotFoundError
from classbook.models.school_class import SchoolClass
from classbook.models.student import Student
from classbook.schemas.student import StudentCreate, StudentUpdate
from classbook.services.class_service import get_owned_class

logger = logging.getLogger(__name__)


def list_students(db: Session, class_id: uuid.UUID, teacher_id: str) -> list[Student]:
    """Retourne les élèves de la classe, triés par nom."""
    get_owned_class(db, class_id, teacher_id)
    return list(db.execute(
        select(Student)
        .where(Student.class_id == class_id)
        .order_by(Student.name)
    ).scalars().all())


def add_student(db: Session, class_id: uuid.UUID, data: StudentCreate, teacher_id: str) -> Student:
    """Ajoute un élève à la classe. Le compteur de la classe est calculé, aucune seconde écriture."""
    get_owned_class(db, class_id, teacher_id)
    student = Student(
        name=data.name,
        roll_number=data.roll_number,
        email=data.email,
        class_id=class_id,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info("Élève ajouté : %s (%s) dans la classe %s", student.name, student.id, class_id)
    return student


def get_student(db: Session, student_id: uuid.UUID, teacher_id: str) -> Student:
    """
    Retourne l'élève si sa classe appartient à l'enseignant.
    Lève NotFoundError si l'élève est inexistant, ForbiddenError sinon.
    """
    student = db.get(Student, student_id)
    if student is None:
        raise NotFoundError("Élève introuvable.")
    school_class = db.get(SchoolClass, student.class_id)
    if school_class is None or school_class.teacher_id != teacher_id:
        raise ForbiddenError("Vous n'avez pas accès à cet élève.")
    return student


def update_student(db: Session, student_id: uuid.UUID, data: StudentUpdate, teacher_id: str) -> Student:
    """Met à jour les champs fournis d'un élève. La classe d'appartenance ne change jamais."""
    student = get_student(db, student_id, teacher_id)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(student, field, value)

    db.commit()
    db.refresh(student)
    return student


def delete_student(db: Session, student_id: uuid.UUID, teacher_id: str) -> None:
    """
    Supprime définitivement un élève.
    Les activités déjà enregistrées gardent leur copie de l'élève (snapshot).
    """
    student = get_student(db, student_id, teacher_id)
    db.delete(student)
    db.commit()
    logger.info("Élève supprimé : %s", student_id)
