"""
Router pour les élèves d'une classe.
Saisie manuelle : POST /api/v1/classes/{class_id}/students
Import tableur  : POST /api/v1/classes/{class_id}/students/upload
Fiche élève     : GET / PUT / DELETE /api/v1/students/{student_id}
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from classbook.config import settings
from classbook.database import get_db
from classbook.schemas.auth import CurrentUser
from classbook.schemas.student import StudentCreate, StudentImportReport, StudentResponse, StudentUpdate
from classbook.security import get_current_user
from classbook.services import student_service
from classbook.services.student_import import import_students

router = APIRouter(prefix="/api/v1", tags=["Élèves"])

ALLOWED_EXTENSIONS = (".csv", ".xlsx")


@router.get("/classes/{class_id}/students", response_model=List[StudentResponse],
            summary="Lister les élèves d'une classe")
def list_students(class_id: uuid.UUID, db: Session = Depends(get_db),
                  user: CurrentUser = Depends(get_current_user)):
    """Retourne les élèves de la classe triés par nom."""
    return student_service.list_students(db, class_id, user.uid)


@router.post("/classes/{class_id}/students", response_model=StudentResponse, status_code=201,
             summary="Ajouter un élève manuellement")
def add_student(class_id: uuid.UUID, data: StudentCreate, db: Session = Depends(get_db),
                user: CurrentUser = Depends(get_current_user)):
    return student_service.add_student(db, class_id, data, user.uid)


@router.post("/classes/{class_id}/students/upload", response_model=StudentImportReport,
             summary="Importer des élèves via CSV ou Excel")
async def upload_students(
    class_id: uuid.UUID,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Importe une liste d'élèves dans la classe depuis un tableur.

    Format attendu :
    - Colonne obligatoire : `name`
    - Colonnes optionnelles : `rollNumber`, `email` (les autres sont ignorées)
    - CSV : séparateur `,` ou `;`, encodage UTF-8 (avec ou sans BOM)
    - Excel : première feuille d'un fichier .xlsx

    Les lignes sans nom sont ignorées et listées dans le rapport.
    """
    filename = file.filename or ""
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail="Format invalide. Seuls les fichiers .csv et .xlsx sont acceptés."
        )

    content = await file.read()

    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Fichier trop volumineux. Taille maximale : {settings.MAX_UPLOAD_SIZE_MB} Mo."
        )

    if not content:
        raise HTTPException(status_code=400, detail="Le fichier est vide.")

    return import_students(db, class_id, content, filename, user.uid)


@router.get("/students/{student_id}", response_model=StudentResponse, summary="Détail d'un élève")
def get_student(student_id: uuid.UUID, db: Session = Depends(get_db),
                user: CurrentUser = Depends(get_current_user)):
    return student_service.get_student(db, student_id, user.uid)


@router.put("/students/{student_id}", response_model=StudentResponse, summary="Modifier un élève")
def update_student(student_id: uuid.UUID, data: StudentUpdate, db: Session = Depends(get_db),
                   user: CurrentUser = Depends(get_current_user)):
    """Met à jour les champs fournis d'un élève. Les champs absents ne sont pas modifiés."""
    return student_service.update_student(db, student_id, data, user.uid)


@router.delete("/students/{student_id}", status_code=204, summary="Supprimer un élève")
def delete_student(student_id: uuid.UUID, db: Session = Depends(get_db),
                   user: CurrentUser = Depends(get_current_user)):
    """Supprime définitivement un élève. Les activités passées conservent leur copie."""
    student_service.delete_student(db, student_id, user.uid)
