"""
Modèle SQLAlchemy pour la table students.
Un élève appartient à une seule classe ; la propriété est héritée de classes.teacher_id.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid, func

from classbook.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    roll_number = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
