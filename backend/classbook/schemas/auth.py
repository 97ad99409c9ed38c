"""
Schéma de l'utilisateur courant, extrait du jeton du fournisseur d'identité.
"""

from typing import Optional

from pydantic import BaseModel


class CurrentUser(BaseModel):
    uid: str
    email: Optional[str] = None
