"""Administrative removal of a patient record.

Normal application flow never deletes patients; this is the escape hatch for
records entered in error.

Usage: python -m scripts.delete_patient <identifier> [--yes]
"""

import argparse

from backend.database import session_scope
from backend.models.audit import AuditAction
from backend.services.audit_logger import create_audit_event
from backend.services.patient_store import PatientStore
from backend.services.validators import IDENTIFIER_LENGTH, normalize_identifier


def main() -> None:
    parser = argparse.ArgumentParser(description="Delete a patient record by identifier")
    parser.add_argument("identifier")
    parser.add_argument("--yes", action="store_true", help="skip the confirmation prompt")
    args = parser.parse_args()

    identifier = normalize_identifier(args.identifier)
    if len(identifier) != IDENTIFIER_LENGTH:
        raise SystemExit(f"Identifier must be exactly {IDENTIFIER_LENGTH} digits")

    with session_scope() as db:
        outcome = _delete(db, identifier, confirm=not args.yes)

    if outcome is not None:
        raise SystemExit(outcome)
    print("Patient deleted")


def _delete(db, identifier: str, confirm: bool) -> str | None:
    """Delete the patient and record the audit event. Returns an abort message, or None once deleted."""
    store = PatientStore(db)
    patient = store.find_by_identifier(identifier)
    if patient is None:
        return "Patient not found"
    if confirm:
        answer = input(f"Delete {patient.name} ({patient.visit_count} visits)? [y/N] ")
        if answer.strip().lower() != "y":
            return "Aborted"
    patient_id = str(patient.id)
    store.delete(identifier)
    create_audit_event(
        db,
        actor="ADMIN_SCRIPT",
        action=AuditAction.DELETE,
        entity_type="Patient",
        entity_id=patient_id,
        details={},
        request=None,
        commit=False,
    )
    return None


if __name__ == "__main__":
    main()
