from .base import Base
from .patient import Patient
from .audit import AuditEvent, AuditAction

__all__ = [
    "Base",
    "Patient",
    "AuditEvent",
    "AuditAction",
]
