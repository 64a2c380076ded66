import re

_NON_DIGITS = re.compile(r"\D")


def clean_identifier(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def form_errors(identifier: str, name: str, department: str, phone: str) -> list[str]:
    errors = []
    if len(clean_identifier(identifier)) != 12:
        errors.append("Aadhaar number must be exactly 12 digits")
    if not name.strip():
        errors.append("Name is required")
    if not department.strip():
        errors.append("Department is required")
    elif "," in department:
        errors.append("Department must not contain commas")
    if phone.strip() and len(clean_identifier(phone)) != 10:
        errors.append("Phone number must be 10 digits")
    return errors
