from __future__ import annotations

import csv
import io
from datetime import date

from sqlalchemy.orm import Session

from ..errors import ValidationError
from ..models.patient import Patient
from .patient_store import PatientStore, utc_today

EXPORT_COLUMNS = [
    "AADHAR_NO",
    "NAME",
    "AGE",
    "GENDER",
    "ADDRESS",
    "PHONE",
    "DEPARTMENT_VISITED",
    "VISIT_COUNT",
    "CREATED_AT",
]

EXPORT_VIEWS = ("all", "visits", "today", "daterange")


class ExportService:
    def __init__(self, db: Session):
        self.store = PatientStore(db)

    def fetch(self, view: str, start: date | None = None, end: date | None = None) -> list[Patient]:
        if view == "all":
            return self.store.list_all()
        if view == "visits":
            return self.store.list_by_visit_count()
        if view == "today":
            return self.store.list_created_on(utc_today())
        if view == "daterange":
            if start is None or end is None:
                raise ValidationError("Both startDate and endDate are required")
            return self.store.list_created_between(start, end)
        raise ValidationError(f"Invalid view: {view}. Expected one of {', '.join(EXPORT_VIEWS)}")

    def build_csv(self, view: str, start: date | None = None, end: date | None = None) -> str:
        patients = self.fetch(view, start, end)
        return _to_csv(
            EXPORT_COLUMNS,
            [
                {
                    "AADHAR_NO": p.identifier,
                    "NAME": p.name,
                    "AGE": p.age if p.age is not None else "",
                    "GENDER": p.gender or "",
                    "ADDRESS": p.address or "",
                    "PHONE": p.phone or "",
                    "DEPARTMENT_VISITED": p.departments_visited,
                    "VISIT_COUNT": p.visit_count,
                    "CREATED_AT": p.created_at.isoformat() if p.created_at else "",
                }
                for p in patients
            ],
        )


def export_filename(view: str, start: date | None = None, end: date | None = None) -> str:
    today = utc_today().isoformat()
    if view == "today":
        return f"patients_today_{today}.csv"
    if view == "daterange" and start and end:
        return f"patients_{start.isoformat()}_to_{end.isoformat()}.csv"
    return f"patients_report_{today}.csv"


def _to_csv(columns: list[str], rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()
