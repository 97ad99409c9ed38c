# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles
# (students.class_id → classes.id, activities.class_id → classes.id).

from classbook.models.school_class import SchoolClass  # noqa: F401  — doit précéder student et activity
from classbook.models.student import Student  # noqa: F401
from classbook.models.activity import Activity  # noqa: F401
