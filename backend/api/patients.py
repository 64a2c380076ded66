from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..errors import ValidationError
from ..models.audit import AuditAction
from ..models.patient import Patient
from ..services.audit_logger import create_audit_event
from ..services.export_service import EXPORT_VIEWS, ExportService, export_filename
from ..services.patient_store import PatientStore, utc_today
from ..services.validators import IDENTIFIER_LENGTH, normalize_identifier
from ..services.visits import VisitService
from .schemas import BulkVisitsRequest, VisitPayload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["patients"])

ACTOR = "API"


def serialize_patient(patient: Patient) -> dict:
    return {
        "identifier": patient.identifier,
        "name": patient.name,
        "age": patient.age,
        "gender": patient.gender,
        "address": patient.address,
        "phone": patient.phone,
        "departments_visited": patient.departments,
        "visit_count": patient.visit_count,
        "created_at": patient.created_at.isoformat() if patient.created_at else None,
    }


def _listing(patients: list[Patient]) -> dict:
    return {
        "success": True,
        "count": len(patients),
        "data": [serialize_patient(p) for p in patients],
    }


def _parse_day(value: str | None, param: str) -> date:
    if not value:
        raise ValidationError("Both startDate and endDate are required")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{param} must be in YYYY-MM-DD format")


@router.post("/uploadFile")
async def upload_file(
    request: Request,
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
):
    """
    Upload a CSV/TXT file of visit records and upsert every valid row.
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    content = await file.read()
    max_bytes = get_settings().MAX_UPLOAD_BYTES
    if len(content) > max_bytes:
        raise ValidationError(f"File too large. Maximum size is {max_bytes} bytes")

    logger.info("Processing uploaded file: %s", file.filename)
    result = VisitService(db).import_file(content, file.filename)

    create_audit_event(
        db,
        actor=ACTOR,
        action=AuditAction.UPLOAD,
        entity_type="VisitUpload",
        entity_id="upload_file",
        details={"filename": file.filename, "summary": result["summary"]},
        request=request,
    )

    return {"success": True, "message": "File processed successfully", **result}


@router.post("/addVisit")
def add_visit(
    payload: VisitPayload,
    request: Request,
    db: Session = Depends(get_db),
):
    patient, is_new = VisitService(db).add_visit(payload.model_dump())

    create_audit_event(
        db,
        actor=ACTOR,
        action=AuditAction.CREATE if is_new else AuditAction.UPDATE,
        entity_type="Patient",
        entity_id=str(patient.id),
        details={"visit_count": patient.visit_count},
        request=request,
    )

    return JSONResponse(
        status_code=201 if is_new else 200,
        content={
            "success": True,
            "message": "New patient record created" if is_new else "Patient visit updated",
            "isNew": is_new,
            "data": serialize_patient(patient),
        },
    )


@router.post("/addBulkVisits")
def add_bulk_visits(
    payload: BulkVisitsRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    result = VisitService(db).add_bulk_visits([item.model_dump() for item in payload.patients])

    create_audit_event(
        db,
        actor=ACTOR,
        action=AuditAction.UPLOAD,
        entity_type="BulkVisits",
        entity_id="add_bulk_visits",
        details={"summary": result["summary"]},
        request=request,
    )

    return {"success": True, "message": "Bulk records processed successfully", **result}


@router.get("/patient/{identifier}")
def get_patient(identifier: str, db: Session = Depends(get_db)):
    cleaned = normalize_identifier(identifier)
    if len(cleaned) != IDENTIFIER_LENGTH:
        raise ValidationError(f"Invalid identifier. Must be exactly {IDENTIFIER_LENGTH} digits")
    patient = PatientStore(db).get_by_identifier(cleaned)
    return {"success": True, "data": serialize_patient(patient)}


@router.get("/allPatients")
def get_all_patients(db: Session = Depends(get_db)):
    return _listing(PatientStore(db).list_all())


@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    return {"success": True, "stats": {"totalPatients": PatientStore(db).count()}}


@router.get("/patients/sort/by-visits")
def get_patients_by_visits(db: Session = Depends(get_db)):
    return _listing(PatientStore(db).list_by_visit_count())


@router.get("/patients/today")
def get_todays_patients(db: Session = Depends(get_db)):
    return _listing(PatientStore(db).list_created_on(utc_today()))


@router.get("/patients/date-range")
def get_patients_by_date_range(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    start = _parse_day(start_date, "startDate")
    end = _parse_day(end_date, "endDate")
    return _listing(PatientStore(db).list_created_between(start, end))


@router.get("/patients/export")
def export_patients(
    view: str = Query("all"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """
    Download the selected patient listing as CSV.
    """
    if view not in EXPORT_VIEWS:
        raise ValidationError(f"Invalid view: {view}. Expected one of {', '.join(EXPORT_VIEWS)}")
    start = end = None
    if view == "daterange":
        start = _parse_day(start_date, "startDate")
        end = _parse_day(end_date, "endDate")

    content = ExportService(db).build_csv(view, start, end)
    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={export_filename(view, start, end)}"
        },
    )
