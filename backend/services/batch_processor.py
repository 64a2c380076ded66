from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy.orm import Session

from .patient_store import PatientStore
from .validators import VisitRecord

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    new_count: int = 0
    updated_count: int = 0
    errors: list[dict] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.new_count + self.updated_count + len(self.errors)


class BatchProcessor:
    """
    Upserts validated visit records one at a time, in input order.

    Each record is committed on its own so later records see the departments
    added by earlier ones; a failing record is rolled back and reported
    without aborting the batch.
    """

    def __init__(self, db: Session):
        self.db = db
        self.store = PatientStore(db)

    def process(self, records: Iterable[VisitRecord]) -> BatchResult:
        result = BatchResult()
        for record in records:
            try:
                _patient, is_new = self.store.upsert_visit(record)
                self.db.commit()
            except Exception as exc:
                self.db.rollback()
                message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
                logger.warning("Failed to process patient %s: %s", record.identifier, message)
                result.errors.append({"identifier": record.identifier, "message": message})
                continue

            if is_new:
                result.new_count += 1
            else:
                result.updated_count += 1

        logger.info(
            "Batch processed: %s new, %s updated, %s failed",
            result.new_count,
            result.updated_count,
            len(result.errors),
        )
        return result
