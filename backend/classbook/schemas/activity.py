"""
Schémas Pydantic pour les activités.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import uuid
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, field_validator


def clean_remarks(v: Optional[str]) -> Optional[str]:
    """Remarque vide ou composée d'espaces → None."""
    if v is None:
        return None
    return v.strip() or None


class ActivityStudent(BaseModel):
    """Entrée du snapshot d'élèves d'une activité."""
    id: uuid.UUID
    name: str
    roll_number: Optional[str] = None
    is_present: bool = True
    remarks: Optional[str] = None

    @field_validator("remarks")
    @classmethod
    def normalize_remarks(cls, v: Optional[str]) -> Optional[str]:
        return clean_remarks(v)


class StudentAttendance(BaseModel):
    """Présence et remarque saisies pour un élève du snapshot."""
    id: uuid.UUID
    is_present: bool
    remarks: Optional[str] = None

    @field_validator("remarks")
    @classmethod
    def normalize_remarks(cls, v: Optional[str]) -> Optional[str]:
        return clean_remarks(v)


class ActivityCreate(BaseModel):
    title: str
    date: dt.datetime
    class_id: uuid.UUID
    # Saisie initiale facultative ; les élèves absents de la liste restent présents
    students: Optional[List[StudentAttendance]] = None

    @field_validator("title")
    @classmethod
    def title_min_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Le titre de l'activité doit contenir au moins 2 caractères.")
        return v.strip()


class ActivityUpdate(BaseModel):
    """Remplacement complet des présences : chaque élève du snapshot doit figurer une fois."""
    students: List[StudentAttendance]


class ActivityResponse(BaseModel):
    id: uuid.UUID
    title: str
    date: dt.datetime
    class_id: uuid.UUID
    class_name: str
    teacher_id: str
    students: List[ActivityStudent]
    total_students: int
    present_count: int
    absent_count: int
    attendance_percent: int
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class DashboardResponse(BaseModel):
    """Activités du jour et dernières activités (hors aujourd'hui)."""
    today: List[ActivityResponse]
    recent: List[ActivityResponse]
