"""
Modèle SQLAlchemy pour les classes.
Nommé school_class pour éviter le conflit avec le mot-clé Python 'class'.

Le nombre d'élèves n'est pas stocké : il est compté à la lecture
(voir class_service._to_response), il ne peut donc pas diverger.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, Uuid, func

from classbook.database import Base


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    subject = Column(String(100), nullable=True)
    teacher_id = Column(String(128), nullable=False, index=True)  # uid du fournisseur d'identité
    # Horodatage à la microseconde, y compris sous SQLite
    created_at = Column(DateTime, default=datetime.now, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
