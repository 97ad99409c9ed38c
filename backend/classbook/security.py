"""
Contrôle de session : résout l'enseignant connecté à partir du jeton Bearer.

Les jetons sont émis par le fournisseur d'identité externe (connexion / déconnexion
gérées de son côté) et signés avec le secret partagé SECRET_KEY. L'uid de
l'enseignant est porté par la claim `sub`. Aucune route métier n'accepte d'appel anonyme.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from classbook.config import settings
from classbook.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(uid: str, email: Optional[str] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    """
    Émet un jeton signé pour un uid donné.
    Utilisé en développement et dans les tests, à la place du fournisseur d'identité.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": uid, "exp": expire}
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> CurrentUser:
    """
    Vérifie la signature et l'expiration du jeton.
    Lève JWTError si le jeton est invalide ou ne porte pas d'uid.
    """
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    uid = payload.get("sub")
    if not uid or not isinstance(uid, str):
        raise JWTError("Claim 'sub' manquante.")
    return CurrentUser(uid=uid, email=payload.get("email"))


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Dépendance FastAPI — 401 si le jeton est absent, invalide ou expiré."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentification requise.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.warning("Jeton refusé : %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Jeton invalide ou expiré.",
            headers={"WWW-Authenticate": "Bearer"},
        )
