"""
Configuration partagée pour tous les tests.

- client    : dépendance get_db mockée (MagicMock), enseignant connecté simulé
- db_session: session SQLAlchemy sur une base SQLite en mémoire, schéma complet
- api       : client HTTP branché sur db_session (tests de scénario de bout en bout)
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

import classbook.models  # noqa: F401
from classbook.database import Base, get_db
from classbook.main import app
from classbook.schemas.auth import CurrentUser
from classbook.security import get_current_user

TEACHER_UID = "teacher-1"
OTHER_TEACHER_UID = "teacher-2"


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée et un enseignant connecté."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(uid=TEACHER_UID)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Session sur une base SQLite en mémoire partagée entre threads (TestClient)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def api(db_session):
    """Client HTTP branché sur la base SQLite ; l'enseignant connecté est modifiable via `login`."""
    app.dependency_overrides[get_db] = lambda: db_session

    def login(uid: str = TEACHER_UID):
        app.dependency_overrides[get_current_user] = lambda: CurrentUser(uid=uid)

    login()
    with TestClient(app) as c:
        c.login = login
        yield c
    app.dependency_overrides.clear()
