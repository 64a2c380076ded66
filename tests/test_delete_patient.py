import sys

import pytest

from backend.models.audit import AuditEvent
from backend.services.patient_store import PatientStore
from scripts import delete_patient


@pytest.fixture
def seeded(db_session, make_record):
    PatientStore(db_session).create(make_record(identifier="123456789012", department="ENT"))
    db_session.commit()
    return db_session


def test_declined_confirmation_keeps_patient(seeded, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["delete_patient", "123456789012"])
    monkeypatch.setattr("builtins.input", lambda prompt: "n")

    with pytest.raises(SystemExit, match="Aborted"):
        delete_patient.main()

    seeded.expire_all()
    assert PatientStore(seeded).find_by_identifier("123456789012") is not None
    assert seeded.query(AuditEvent).count() == 0


def test_confirmed_delete_is_audited(seeded, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["delete_patient", "1234-5678-9012", "--yes"])

    delete_patient.main()

    seeded.expire_all()
    assert PatientStore(seeded).find_by_identifier("123456789012") is None
    assert seeded.query(AuditEvent).one().entity_type == "Patient"


def test_unknown_patient_exits(db_session, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["delete_patient", "999999999999", "--yes"])

    with pytest.raises(SystemExit, match="Patient not found"):
        delete_patient.main()
