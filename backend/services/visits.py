from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StorageError, ValidationError
from ..models.patient import Patient
from .batch_processor import BatchProcessor
from .file_parser import file_format_for, parse_visit_file
from .patient_store import PatientStore
from .validators import VisitRecord, record_from_mapping, validate_record

logger = logging.getLogger(__name__)


class VisitService:
    """Entry points for recording visits from manual entry and file uploads."""

    def __init__(self, db: Session):
        self.db = db
        self.store = PatientStore(db)

    def add_visit(self, raw: Mapping[str, Any]) -> tuple[Patient, bool]:
        record = record_from_mapping(raw)
        validation = validate_record(record)
        if not validation.valid:
            raise ValidationError("Validation failed", errors=validation.errors)

        patient, is_new = self.store.upsert_visit(record)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Commit failed for patient %s", record.identifier)
            raise StorageError("Database error while saving visit") from exc
        self.db.refresh(patient)
        return patient, is_new

    def add_bulk_visits(self, raw_items: Sequence[Mapping[str, Any]]) -> dict:
        if not raw_items:
            raise ValidationError("Invalid data. Expected a non-empty array of patients.")

        valid: list[VisitRecord] = []
        validation_errors: list[dict] = []
        for index, raw in enumerate(raw_items):
            record = record_from_mapping(raw)
            validation = validate_record(record)
            if validation.valid:
                valid.append(record)
            else:
                validation_errors.append(
                    {"index": index, "identifier": record.identifier, "errors": validation.errors}
                )

        if not valid:
            raise ValidationError("No valid patient records found", errors=validation_errors)

        logger.info("Processing bulk manual entry: %s records", len(raw_items))
        batch = BatchProcessor(self.db).process(valid)
        response = {
            "summary": {
                "totalReceived": len(raw_items),
                "validRecords": len(valid),
                "invalidRecords": len(validation_errors),
                "newPatients": batch.new_count,
                "updatedPatients": batch.updated_count,
                "processingErrors": len(batch.errors),
            }
        }
        if validation_errors:
            response["validationErrors"] = validation_errors
        if batch.errors:
            response["processingErrors"] = batch.errors
        return response

    def import_file(self, content: bytes, filename: str | None) -> dict:
        parsed = parse_visit_file(content, file_format_for(filename))

        valid: list[VisitRecord] = []
        errors: list[dict] = list(parsed.parse_errors)
        for raw in parsed.records:
            record = record_from_mapping(raw.fields)
            validation = validate_record(record)
            if validation.valid:
                valid.append(record)
            else:
                errors.append(
                    {
                        "line": raw.line,
                        "identifier": record.identifier,
                        "message": "; ".join(validation.errors),
                    }
                )
        errors.sort(key=lambda entry: entry["line"])

        logger.info("Processing uploaded file %s: %s records", filename, len(valid))
        batch = BatchProcessor(self.db).process(valid)
        response = {
            "summary": {
                "totalRecords": parsed.summary["totalLines"],
                "validRecords": len(valid),
                "invalidRecords": len(errors),
                "newPatients": batch.new_count,
                "updatedPatients": batch.updated_count,
                "processingErrors": len(batch.errors),
            }
        }
        if errors:
            response["errors"] = errors
        if batch.errors:
            response["processingErrors"] = batch.errors
        return response
