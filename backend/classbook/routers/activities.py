"""
Router pour les activités (présences + remarques) et le tableau de bord.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classbook.database import get_db
from classbook.schemas.activity import ActivityCreate, ActivityResponse, ActivityUpdate, DashboardResponse
from classbook.schemas.auth import CurrentUser
from classbook.security import get_current_user
from classbook.services import activity_service

router = APIRouter(prefix="/api/v1", tags=["Activités"])


@router.post("/activities", response_model=ActivityResponse, status_code=201,
             summary="Créer l'activité du jour d'une classe")
def create_activity(data: ActivityCreate, db: Session = Depends(get_db),
                    user: CurrentUser = Depends(get_current_user)):
    """
    Crée une activité à partir des élèves actuels de la classe (tous présents par défaut).

    Contraintes :
    - Une seule activité par classe et par jour (409 sinon)
    - La classe doit contenir au moins un élève
    """
    return activity_service.create_activity(db, data, user.uid)


@router.get("/activities", response_model=List[ActivityResponse], summary="Lister mes activités")
def list_activities(class_id: Optional[uuid.UUID] = None, db: Session = Depends(get_db),
                    user: CurrentUser = Depends(get_current_user)):
    """Activités de l'enseignant, les plus récentes d'abord, filtrables par classe."""
    return activity_service.get_activities(db, user.uid, class_id)


@router.get("/activities/{activity_id}", response_model=ActivityResponse, summary="Détail d'une activité")
def get_activity(activity_id: uuid.UUID, db: Session = Depends(get_db),
                 user: CurrentUser = Depends(get_current_user)):
    return activity_service.get_activity(db, activity_id, user.uid)


@router.put("/activities/{activity_id}", response_model=ActivityResponse,
            summary="Enregistrer les présences et remarques")
def update_activity(activity_id: uuid.UUID, data: ActivityUpdate, db: Session = Depends(get_db),
                    user: CurrentUser = Depends(get_current_user)):
    """
    Remplace les présences et remarques de tous les élèves de l'activité.
    Une remarque vide est enregistrée comme null.
    """
    return activity_service.update_activity(db, activity_id, data, user.uid)


@router.delete("/activities/{activity_id}", status_code=204, summary="Supprimer une activité")
def delete_activity(activity_id: uuid.UUID, db: Session = Depends(get_db),
                    user: CurrentUser = Depends(get_current_user)):
    activity_service.delete_activity(db, activity_id, user.uid)


@router.get("/dashboard", response_model=DashboardResponse, summary="Tableau de bord")
def dashboard(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    """Activités du jour et les 5 dernières activités des jours précédents."""
    return activity_service.get_dashboard(db, user.uid)
