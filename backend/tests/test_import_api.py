"""Tests for the CSV import endpoint against the real store."""
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, delete, select

from app import app
from db import create_db_and_tables, engine, get_session
from models import Hearing, UserAccount

ADMIN = {"X-User-Email": "admin@pm.gov"}
VIEWER = {"X-User-Email": "viewer@pm.gov"}

CSV_TEXT = (
    "Data,Horario,Local,Policial,Modalidade\n"
    "01/03/2025,14:30,Forum A,Sgt Silva,PRESENCIAL\n"
    "01/03/2025,15:00,,Sgt Silva,PRESENCIAL\n"
)


@pytest.fixture(scope="function")
def test_session(monkeypatch):
    """Create a test database session."""
    monkeypatch.setenv("ADMIN_EMAILS", "admin@pm.gov")
    create_db_and_tables()
    with Session(engine) as session:
        yield session
        # Clean up all test data after test
        session.exec(delete(Hearing))
        session.exec(delete(UserAccount))
        session.commit()


@pytest.fixture(scope="function")
def client(test_session):
    """Create a test client with dependency override."""

    def get_test_session():
        yield test_session

    app.dependency_overrides[get_session] = get_test_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def upload(client, text, headers=ADMIN, **data):
    files = {"file": ("agenda.csv", text.encode("utf-8"), "text/csv")}
    return client.post("/hearings/import", files=files, data=data, headers=headers)


def test_import_creates_valid_rows_and_counts_failures(client, test_session):
    response = upload(client, CSV_TEXT)
    assert response.status_code == 200
    data = response.json()
    assert data["created"] == 1
    assert data["failed"] == 1
    assert data["ok"] is False
    assert data["message"] == "Import finished: 1 created, 1 failed"

    hearings = test_session.exec(select(Hearing)).all()
    assert len(hearings) == 1
    hearing = hearings[0]
    assert hearing.date_key == "2025-03-01"
    assert hearing.created_by == "admin@pm.gov"
    assert {"forum", "a", "sgt", "silva", "presencial", "14:30"} <= set(hearing.keywords)


def test_import_utf8_bom_and_semicolons(client, test_session):
    text = "\ufeffData;Horário;Local;Posto/Nome Policial;Modalidade;SEI\r\n10/03/2025;9:00;Fórum;Sd. Lima;PRESENCIAL;123\r\n"
    response = upload(client, text)
    assert response.status_code == 200
    assert response.json()["created"] == 1

    hearing = test_session.exec(select(Hearing)).first()
    assert hearing.time == "09:00"
    assert hearing.case_ref == "123"


def test_import_missing_columns_rejected(client, test_session):
    response = upload(client, "Data,Horario,Local\n01/03/2025,14:30,Forum A\n")
    assert response.status_code == 400
    assert "Posto/Nome Policial" in response.json()["detail"]
    assert "Modalidade" in response.json()["detail"]
    assert test_session.exec(select(Hearing)).first() is None


def test_import_empty_file_rejected(client):
    response = upload(client, "")
    assert response.status_code == 400


def test_import_explicit_delimiter(client):
    # Five semicolons in the quoted last header tie with five commas, so
    # detection alone would split on ';'
    text = (
        'Data,Horario,Local,Policial,Modalidade,"Obs;a;b;c;d;e"\n'
        "01/03/2025,14:30,Forum A,Sgt Silva,PRESENCIAL,\n"
    )
    response = upload(client, text)
    assert response.status_code == 400

    response = upload(client, text, delimiter=",")
    assert response.status_code == 200
    assert response.json()["created"] == 1


def test_import_requires_manager_role(client):
    response = upload(client, CSV_TEXT, headers=VIEWER)
    assert response.status_code == 403
