"""
Schémas Pydantic pour les classes.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

MIN_NAME_LENGTH = 2


def _check_min_length(v: str, label: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"{label} ne peut pas être vide.")
    if len(v) < MIN_NAME_LENGTH:
        raise ValueError(f"{label} doit contenir au moins {MIN_NAME_LENGTH} caractères.")
    return v


class ClassCreate(BaseModel):
    name: str
    description: Optional[str] = None
    subject: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_valid(cls, v: str) -> str:
        return _check_min_length(v, "Le nom de la classe")

    @field_validator("subject")
    @classmethod
    def subject_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_min_length(v, "La matière")

    @field_validator("description")
    @classmethod
    def description_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class ClassUpdate(BaseModel):
    """Champs absents non modifiés ; la matière et la description peuvent être effacées (null), pas le nom."""
    name: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_not_null(cls, v):
        # Appelé seulement si le champ est fourni
        if v is None:
            raise ValueError("Le nom de la classe ne peut pas être effacé.")
        return v

    @field_validator("name")
    @classmethod
    def name_valid(cls, v: str) -> str:
        return _check_min_length(v, "Le nom de la classe")

    @field_validator("subject")
    @classmethod
    def subject_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_min_length(v, "La matière")


class ClassResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    subject: Optional[str]
    teacher_id: str
    student_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
