"""
Schémas Pydantic pour les élèves.
"""

import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, field_validator


class StudentCreate(BaseModel):
    """Schéma de création manuelle d'un élève (POST /classes/{id}/students)."""
    name: str
    roll_number: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de l'élève ne peut pas être vide.")
        return v.strip()

    @field_validator("roll_number")
    @classmethod
    def strip_roll_number(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class StudentUpdate(BaseModel):
    """Schéma de mise à jour d'un élève (PUT /students/{id}). Les champs absents ne sont pas modifiés."""
    name: Optional[str] = None
    roll_number: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_not_null(cls, v):
        if v is None:
            raise ValueError("Le nom de l'élève ne peut pas être effacé.")
        return v

    @field_validator("name")
    @classmethod
    def min_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Le nom de l'élève doit contenir au moins 2 caractères.")
        return v.strip()

    @field_validator("roll_number")
    @classmethod
    def strip_roll_number(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class StudentResponse(BaseModel):
    id: uuid.UUID
    name: str
    roll_number: Optional[str]
    email: Optional[str]
    class_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class StudentImportRow(BaseModel):
    """Représente une ligne valide du fichier après parsing."""
    name: str
    roll_number: Optional[str] = None
    email: Optional[str] = None


class ImportIssue(BaseModel):
    """Détail d'une ligne ignorée ou corrigée lors de l'import."""
    row: int
    content: str
    reason: str


class StudentImportReport(BaseModel):
    """Rapport retourné après un import de fichier."""
    total_rows: int
    inserted: int
    skipped: int
    errors: List[ImportIssue]
