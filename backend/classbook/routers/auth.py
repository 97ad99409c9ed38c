"""
Router de session : expose l'enseignant connecté tel que résolu depuis le jeton.
"""

from fastapi import APIRouter, Depends

from classbook.schemas.auth import CurrentUser
from classbook.security import get_current_user

router = APIRouter(prefix="/api/v1/auth", tags=["Session"])


@router.get("/me", response_model=CurrentUser, summary="Utilisateur connecté")
def read_current_user(user: CurrentUser = Depends(get_current_user)):
    """Retourne l'uid (et l'email s'il est connu) de l'enseignant authentifié."""
    return user
