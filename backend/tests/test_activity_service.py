"""
Tests du service des activités : unicité par classe et par jour, snapshot des élèves,
enregistrement des présences et compteurs dérivés.
"""

import uuid
import datetime as dt
from unittest.mock import patch

import pytest
from pydantic import ValidationError as SchemaValidationError

from classbook.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from classbook.schemas.activity import ActivityCreate, ActivityUpdate, StudentAttendance
from classbook.schemas.school_class import ClassCreate, ClassUpdate
from classbook.schemas.student import StudentCreate
from classbook.services import activity_service, class_service, student_service
from classbook.services.activity_service import attendance_summary, day_bounds

TEACHER = "teacher-1"
OTHER = "teacher-2"


# --- Helpers ---

@pytest.fixture
def class_10a(db_session):
    """Classe 10A avec deux élèves, Asha et Beni."""
    c = class_service.create_class(db_session, ClassCreate(name="10A"), TEACHER)
    student_service.add_student(db_session, c.id, StudentCreate(name="Beni", roll_number="2"), TEACHER)
    student_service.add_student(db_session, c.id, StudentCreate(name="Asha", roll_number="1"), TEACHER)
    return c


def create(db, class_id, date="2024-03-01T09:00:00", title="Algèbre", **kwargs):
    return activity_service.create_activity(
        db, ActivityCreate(title=title, date=date, class_id=class_id, **kwargs), TEACHER
    )


def marks(activity, **overrides):
    """Construit la saisie complète : {nom: (présent, remarque)} pour les élèves modifiés."""
    result = []
    for s in activity.students:
        is_present, remarks = overrides.get(s.name, (s.is_present, s.remarks))
        result.append(StudentAttendance(id=s.id, is_present=is_present, remarks=remarks))
    return ActivityUpdate(students=result)


# --- attendance_summary ---

def test_summary_tous_presents():
    students = [{"is_present": True}, {"is_present": True}]
    assert attendance_summary(students) == (2, 0, 100)


def test_summary_present_plus_absent_egal_total():
    for pattern in ([True, False, False], [False], [True, True, False, True]):
        present, absent, _ = attendance_summary([{"is_present": p} for p in pattern])
        assert present + absent == len(pattern)


def test_summary_arrondi_demi_vers_le_haut():
    students = [{"is_present": True}] + [{"is_present": False}] * 7  # 12,5 %
    assert attendance_summary(students)[2] == 13


def test_summary_liste_vide():
    assert attendance_summary([]) == (0, 0, 0)


def test_day_bounds():
    start, end = day_bounds(dt.date(2024, 3, 1))
    assert start == dt.datetime(2024, 3, 1, 0, 0, 0)
    assert end.date() == dt.date(2024, 3, 1)
    assert end.hour == 23 and end.minute == 59


# --- Validation des schémas ---

def test_activity_create_titre_trop_court():
    with pytest.raises(SchemaValidationError):
        ActivityCreate(title="A", date="2024-03-01T09:00:00", class_id=uuid.uuid4())


def test_remarque_vide_devient_none():
    mark = StudentAttendance(id=uuid.uuid4(), is_present=True, remarks="   ")
    assert mark.remarks is None


# --- create_activity ---

def test_create_activity_snapshot_des_eleves(db_session, class_10a):
    activity = create(db_session, class_10a.id)

    assert activity.class_name == "10A"
    assert activity.teacher_id == TEACHER
    assert [s.name for s in activity.students] == ["Asha", "Beni"]
    assert all(s.is_present for s in activity.students)
    assert all(s.remarks is None for s in activity.students)
    assert activity.students[0].roll_number == "1"


def test_create_activity_deuxieme_le_meme_jour_refusee(db_session, class_10a):
    create(db_session, class_10a.id, date="2024-03-01T08:00:00")

    with pytest.raises(ConflictError, match="existe déjà"):
        create(db_session, class_10a.id, date="2024-03-01T16:30:00", title="Géométrie")

    assert len(activity_service.get_activities(db_session, TEACHER)) == 1


def test_create_activity_autre_jour_acceptee(db_session, class_10a):
    create(db_session, class_10a.id, date="2024-03-01T09:00:00")
    create(db_session, class_10a.id, date="2024-03-02T09:00:00")
    assert len(activity_service.get_activities(db_session, TEACHER, class_10a.id)) == 2


def test_create_activity_meme_jour_autre_classe_acceptee(db_session, class_10a):
    other = class_service.create_class(db_session, ClassCreate(name="10B"), TEACHER)
    student_service.add_student(db_session, other.id, StudentCreate(name="Chen"), TEACHER)

    create(db_session, class_10a.id)
    create(db_session, other.id)

    assert len(activity_service.get_activities(db_session, TEACHER)) == 2


def test_create_activity_contrainte_unicite_en_base(db_session, class_10a):
    """Si la vérification préalable est contournée (course), la contrainte SQL renvoie ConflictError."""
    create(db_session, class_10a.id)

    with patch("classbook.services.activity_service.find_activity_on_day", return_value=None):
        with pytest.raises(ConflictError):
            create(db_session, class_10a.id, date="2024-03-01T11:00:00")

    assert len(activity_service.get_activities(db_session, TEACHER)) == 1


def test_create_activity_date_avec_fuseau(db_session, class_10a):
    """Le jour retenu est celui de la date telle que saisie."""
    activity = create(db_session, class_10a.id, date="2024-03-01T23:30:00+02:00")

    assert activity.date == dt.datetime(2024, 3, 1, 23, 30)
    with pytest.raises(ConflictError):
        create(db_session, class_10a.id, date="2024-03-01T07:00:00")


def test_create_activity_classe_sans_eleve(db_session):
    c = class_service.create_class(db_session, ClassCreate(name="Vide"), TEACHER)
    with pytest.raises(ValidationError, match="sans élève"):
        create(db_session, c.id)


def test_create_activity_classe_autre_enseignant(db_session, class_10a):
    with pytest.raises(ForbiddenError):
        activity_service.create_activity(
            db_session,
            ActivityCreate(title="Algèbre", date="2024-03-01T09:00:00", class_id=class_10a.id),
            OTHER,
        )


def test_create_activity_saisie_initiale(db_session, class_10a):
    beni = next(s for s in student_service.list_students(db_session, class_10a.id, TEACHER)
                if s.name == "Beni")

    activity = create(
        db_session, class_10a.id,
        students=[StudentAttendance(id=beni.id, is_present=False, remarks=" malade ")],
    )

    by_name = {s.name: s for s in activity.students}
    assert by_name["Asha"].is_present is True
    assert by_name["Beni"].is_present is False
    assert by_name["Beni"].remarks == "malade"
    assert activity.absent_count == 1


def test_create_activity_saisie_eleve_inconnu(db_session, class_10a):
    with pytest.raises(ValidationError):
        create(
            db_session, class_10a.id,
            students=[StudentAttendance(id=uuid.uuid4(), is_present=False)],
        )


def test_snapshot_fige_apres_modification_de_la_classe(db_session, class_10a):
    activity = create(db_session, class_10a.id)

    class_service.update_class(db_session, class_10a.id, ClassUpdate(name="10A bis"), TEACHER)
    student_service.add_student(db_session, class_10a.id, StudentCreate(name="Chen"), TEACHER)

    reloaded = activity_service.get_activity(db_session, activity.id, TEACHER)
    assert reloaded.class_name == "10A"
    assert [s.name for s in reloaded.students] == ["Asha", "Beni"]


# --- update_activity ---

def test_update_activity_remarque_vide_enregistree_null(db_session, class_10a):
    activity = create(db_session, class_10a.id)
    activity = activity_service.update_activity(
        db_session, activity.id, marks(activity, Asha=(True, "good")), TEACHER
    )
    assert activity.students[0].remarks == "good"

    activity = activity_service.update_activity(
        db_session, activity.id, marks(activity, Asha=(True, "")), TEACHER
    )

    stored = activity_service.get_owned_activity(db_session, activity.id, TEACHER)
    assert stored.students[0]["remarks"] is None
    assert activity.students[0].remarks is None


def test_update_activity_remarque_trimee(db_session, class_10a):
    activity = create(db_session, class_10a.id)
    activity = activity_service.update_activity(
        db_session, activity.id, marks(activity, Beni=(False, "  en retard  ")), TEACHER
    )
    assert activity.students[1].remarks == "en retard"


def test_update_activity_eleve_manquant_refuse(db_session, class_10a):
    activity = create(db_session, class_10a.id)
    partial = ActivityUpdate(students=[
        StudentAttendance(id=activity.students[0].id, is_present=False),
    ])
    with pytest.raises(ValidationError):
        activity_service.update_activity(db_session, activity.id, partial, TEACHER)


def test_update_activity_eleve_en_double_refuse(db_session, class_10a):
    activity = create(db_session, class_10a.id)
    first = activity.students[0].id
    duplicated = ActivityUpdate(students=[
        StudentAttendance(id=first, is_present=False),
        StudentAttendance(id=first, is_present=True),
    ])
    with pytest.raises(ValidationError):
        activity_service.update_activity(db_session, activity.id, duplicated, TEACHER)


def test_update_activity_autre_enseignant(db_session, class_10a):
    activity = create(db_session, class_10a.id)
    with pytest.raises(ForbiddenError):
        activity_service.update_activity(db_session, activity.id, marks(activity), OTHER)


# --- delete / get ---

def test_delete_activity(db_session, class_10a):
    activity = create(db_session, class_10a.id)

    activity_service.delete_activity(db_session, activity.id, TEACHER)

    with pytest.raises(NotFoundError):
        activity_service.get_activity(db_session, activity.id, TEACHER)
    # Le jour est de nouveau libre
    create(db_session, class_10a.id)


def test_delete_activity_autre_enseignant(db_session, class_10a):
    activity = create(db_session, class_10a.id)
    with pytest.raises(ForbiddenError):
        activity_service.delete_activity(db_session, activity.id, OTHER)


def test_get_activities_plus_recente_en_premier(db_session, class_10a):
    create(db_session, class_10a.id, date="2024-03-01T09:00:00", title="Premier")
    create(db_session, class_10a.id, date="2024-03-05T09:00:00", title="Dernier")
    create(db_session, class_10a.id, date="2024-03-03T09:00:00", title="Milieu")

    titles = [a.title for a in activity_service.get_activities(db_session, TEACHER)]

    assert titles == ["Dernier", "Milieu", "Premier"]
    assert activity_service.get_activities(db_session, OTHER) == []


# --- Tableau de bord ---

def test_dashboard_aujourdhui_et_recentes(db_session, class_10a):
    today = dt.date(2024, 3, 10)
    create(db_session, class_10a.id, date="2024-03-10T08:00:00", title="Du jour")
    for day in range(1, 8):
        create(db_session, class_10a.id, date=f"2024-03-0{day}T08:00:00", title=f"Jour {day}")

    dashboard = activity_service.get_dashboard(db_session, TEACHER, today=today)

    assert [a.title for a in dashboard.today] == ["Du jour"]
    assert [a.title for a in dashboard.recent] == ["Jour 7", "Jour 6", "Jour 5", "Jour 4", "Jour 3"]


# --- Scénario complet ---

def test_scenario_classe_10a(db_session):
    c = class_service.create_class(db_session, ClassCreate(name="10A"), TEACHER)
    student_service.add_student(db_session, c.id, StudentCreate(name="Asha"), TEACHER)
    student_service.add_student(db_session, c.id, StudentCreate(name="Beni"), TEACHER)
    assert class_service.get_class(db_session, c.id, TEACHER).student_count == 2

    activity = create(db_session, c.id, date="2024-03-01T09:00:00")
    assert (activity.present_count, activity.absent_count, activity.attendance_percent) == (2, 0, 100)

    activity = activity_service.update_activity(
        db_session, activity.id, marks(activity, Beni=(False, None)), TEACHER
    )
    assert (activity.present_count, activity.absent_count, activity.attendance_percent) == (1, 1, 50)
    assert activity.total_students == 2
