from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import Conflict, InvalidRange, NotFound, StorageError, ValidationError
from ..models.patient import Patient
from .validators import VisitRecord

logger = logging.getLogger(__name__)

# Dialects with a native "INSERT ... ON CONFLICT DO NOTHING".
_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PatientStore:
    """
    Data access for the ``patients`` table.

    Methods flush but never commit; the caller owns the transaction. A
    duplicate ``create`` rolls the session back before raising Conflict.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_identifier(self, identifier: str) -> Patient | None:
        return self.db.query(Patient).filter_by(identifier=identifier).first()

    def get_by_identifier(self, identifier: str) -> Patient:
        patient = self.find_by_identifier(identifier)
        if patient is None:
            raise NotFound("Patient not found")
        return patient

    def create(self, record: VisitRecord) -> Patient:
        _require_department(record.department)
        patient = Patient(**_insert_values(record))
        self.db.add(patient)
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise Conflict("Patient with this identifier already exists") from exc
        logger.info("Created patient %s", record.identifier)
        return patient

    def append_department_visit(self, identifier: str, department: str) -> Patient:
        department = _require_department(department)
        patient = (
            self.db.query(Patient)
            .filter_by(identifier=identifier)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if patient is None:
            raise NotFound("Patient not found")
        if patient.add_department(department):
            self.db.flush()
            logger.info("Added department %s for patient %s", department, identifier)
        else:
            logger.info("Department %s already recorded for patient %s", department, identifier)
        return patient

    def upsert_visit(self, record: VisitRecord) -> tuple[Patient, bool]:
        """Create the patient or append the visit department. Returns (patient, is_new)."""
        _require_department(record.department)
        try:
            insert = _CONFLICT_INSERTS.get(self.db.get_bind().dialect.name)
            if insert is None:
                return self._create_or_append(record)

            stmt = (
                insert(Patient)
                .values(**_insert_values(record))
                .on_conflict_do_nothing(index_elements=["identifier"])
                .returning(Patient.id)
            )
            inserted_id = self.db.execute(stmt).scalar_one_or_none()
            if inserted_id is not None:
                logger.info("Created patient %s", record.identifier)
                return self.get_by_identifier(record.identifier), True
            return self.append_department_visit(record.identifier, record.department), False
        except SQLAlchemyError as exc:
            logger.exception("Upsert failed for patient %s", record.identifier)
            raise StorageError(f"Database error: {exc.__class__.__name__}") from exc

    def _create_or_append(self, record: VisitRecord) -> tuple[Patient, bool]:
        try:
            return self.create(record), True
        except Conflict:
            return self.append_department_visit(record.identifier, record.department), False

    def list_all(self) -> list[Patient]:
        return self.db.query(Patient).order_by(Patient.identifier.asc()).all()

    def list_by_visit_count(self) -> list[Patient]:
        return (
            self.db.query(Patient)
            .order_by(Patient.visit_count.desc(), Patient.identifier.asc())
            .all()
        )

    def list_created_on(self, day: date) -> list[Patient]:
        return self.list_created_between(day, day)

    def list_created_between(self, start: date, end: date) -> list[Patient]:
        if start > end:
            raise InvalidRange("Start date must not be after end date")
        lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
        upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
        return (
            self.db.query(Patient)
            .filter(Patient.created_at >= lower, Patient.created_at < upper)
            .order_by(Patient.created_at.asc(), Patient.identifier.asc())
            .all()
        )

    def count(self) -> int:
        return self.db.query(Patient).count()

    def delete(self, identifier: str) -> bool:
        deleted = self.db.query(Patient).filter_by(identifier=identifier).delete()
        if deleted:
            logger.warning("Deleted patient %s", identifier)
        return bool(deleted)


def _insert_values(record: VisitRecord) -> dict:
    return {
        "identifier": record.identifier,
        "name": record.name,
        "age": record.age,
        "gender": record.gender,
        "address": record.address,
        "phone": record.phone,
        "departments_visited": record.department.strip(),
    }



def _require_department(department: str | None) -> str:
    department = (department or "").strip()
    if not department:
        raise ValidationError("Department (DEPARTMENT_VISITED) is required")
    return department

def utc_today() -> date:
    return datetime.now(timezone.utc).date()
