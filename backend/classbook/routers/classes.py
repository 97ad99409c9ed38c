"""
Router pour la gestion des classes d'un enseignant.
Toutes les routes sont restreintes aux classes de l'enseignant connecté.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classbook.database import get_db
from classbook.schemas.auth import CurrentUser
from classbook.schemas.school_class import ClassCreate, ClassResponse, ClassUpdate
from classbook.security import get_current_user
from classbook.services import class_service

router = APIRouter(prefix="/api/v1/classes", tags=["Classes"])


@router.post("", response_model=ClassResponse, status_code=201, summary="Créer une classe")
def create_class(data: ClassCreate, db: Session = Depends(get_db),
                 user: CurrentUser = Depends(get_current_user)):
    """Crée une nouvelle classe (nom d'au moins 2 caractères) pour l'enseignant connecté."""
    return class_service.create_class(db, data, user.uid)


@router.get("", response_model=List[ClassResponse], summary="Lister mes classes")
def list_classes(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    """Retourne les classes de l'enseignant avec leur nombre d'élèves."""
    return class_service.get_classes(db, user.uid)


@router.get("/{class_id}", response_model=ClassResponse, summary="Détail d'une classe")
def get_class(class_id: uuid.UUID, db: Session = Depends(get_db),
              user: CurrentUser = Depends(get_current_user)):
    return class_service.get_class(db, class_id, user.uid)


@router.put("/{class_id}", response_model=ClassResponse, summary="Modifier une classe")
def update_class(class_id: uuid.UUID, data: ClassUpdate, db: Session = Depends(get_db),
                 user: CurrentUser = Depends(get_current_user)):
    return class_service.update_class(db, class_id, data, user.uid)


@router.delete("/{class_id}", status_code=204, summary="Supprimer une classe")
def delete_class(class_id: uuid.UUID, db: Session = Depends(get_db),
                 user: CurrentUser = Depends(get_current_user)):
    """Supprime définitivement la classe, ses élèves et ses activités."""
    class_service.delete_class(db, class_id, user.uid)
