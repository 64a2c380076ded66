from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

IDENTIFIER_LENGTH = 12
MAX_AGE = 150

# Wire names accepted for each record field, upload column first.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "identifier": ("AADHAR_NO", "identifier", "aadhar", "aadhar_no"),
    "name": ("NAME", "name"),
    "age": ("AGE", "age"),
    "gender": ("GENDER", "gender"),
    "address": ("ADDRESS", "address"),
    "phone": ("PHONE", "phone"),
    "department": ("DEPARTMENT_VISITED", "department", "department_visited"),
}

_NON_DIGITS = re.compile(r"\D")


@dataclass
class VisitRecord:
    identifier: str
    name: str | None = None
    department: str | None = None
    age: int | None = None
    gender: str | None = None
    address: str | None = None
    phone: str | None = None


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def normalize_identifier(raw: Any) -> str:
    if raw is None:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def record_from_mapping(raw: Mapping[str, Any]) -> VisitRecord:
    values = {name: _clean_value(_pick(raw, aliases)) for name, aliases in FIELD_ALIASES.items()}
    return VisitRecord(
        identifier=normalize_identifier(values["identifier"]),
        name=_text(values["name"]),
        department=_text(values["department"]),
        age=_coerce_age(values["age"]),
        gender=_text(values["gender"]),
        address=_text(values["address"]),
        phone=_text(values["phone"]),
    )


def validate_record(record: VisitRecord) -> ValidationResult:
    errors: list[str] = []
    if len(record.identifier) != IDENTIFIER_LENGTH or not record.identifier.isdigit():
        errors.append(f"Identifier (AADHAR_NO) must be exactly {IDENTIFIER_LENGTH} digits")
    if not record.name:
        errors.append("Name (NAME) is required")
    if not record.department:
        errors.append("Department (DEPARTMENT_VISITED) is required")
    elif "," in record.department:
        errors.append("Department (DEPARTMENT_VISITED) must not contain commas")
    return ValidationResult(valid=not errors, errors=errors)


def _pick(raw: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    for alias in aliases:
        value = raw.get(alias)
        if _clean_value(value) is not None:
            return value
    return None


def _clean_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _coerce_age(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        age = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return age if 0 <= age <= MAX_AGE else None


def _text(value: Any) -> str | None:
    return None if value is None else str(value)
