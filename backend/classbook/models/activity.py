"""
Modèle SQLAlchemy pour les activités (présences + remarques d'une séance).

Snapshot :
- class_name : copie du nom de la classe au moment de la création (jamais resynchronisée)
- students   : copie JSON de la liste d'élèves au moment de la création ;
               les présences/remarques sont modifiées sur place, la composition jamais

Unicité : une seule activité par (classe, jour calendaire), garantie par la contrainte
uq_activity_class_day en plus de la vérification applicative.
"""

import uuid
from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, String, UniqueConstraint, Uuid, func

from classbook.database import Base


class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (
        UniqueConstraint("class_id", "day", name="uq_activity_class_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    date = Column(DateTime, nullable=False)                 # Instant choisi par l'enseignant
    day = Column(Date, nullable=False)                      # Jour calendaire dérivé de date
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    class_name = Column(String(100), nullable=False)
    teacher_id = Column(String(128), nullable=False, index=True)
    students = Column(JSON, nullable=False, default=list)   # [{id, name, roll_number, is_present, remarks}]
    created_at = Column(DateTime, server_default=func.now())
