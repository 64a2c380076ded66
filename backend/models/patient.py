from sqlalchemy import Integer, String, Text, case, func
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import mapped_column, validates

from .base import Base, UUIDMixin, TimestampMixin
from .types import EncryptedString

DEPARTMENT_SEPARATOR = ", "


def split_departments(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def department_key(department: str) -> str:
    return department.strip().casefold()


class Patient(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "patients"

    identifier = mapped_column(String(12), nullable=False, unique=True)
    name = mapped_column(String(128), nullable=False)
    age = mapped_column(Integer, nullable=True)
    gender = mapped_column(String(16), nullable=True)
    address = mapped_column(EncryptedString, nullable=True)
    phone = mapped_column(EncryptedString, nullable=True)
    departments_visited = mapped_column(Text, nullable=False, default="")

    @validates("identifier")
    def _validate_identifier(self, key, value):
        if self.identifier is not None and value != self.identifier:
            raise ValueError("identifier is immutable once created")
        return value

    @property
    def departments(self) -> list[str]:
        return split_departments(self.departments_visited)

    @hybrid_property
    def visit_count(self) -> int:
        return len(self.departments)

    @visit_count.expression
    def visit_count(cls):
        stored = func.coalesce(cls.departments_visited, "")
        return case(
            (stored == "", 0),
            else_=func.length(stored) - func.length(func.replace(stored, ",", "")) + 1,
        )

    def has_department(self, department: str) -> bool:
        key = department_key(department)
        return any(department_key(existing) == key for existing in self.departments)

    def add_department(self, department: str) -> bool:
        """Append ``department`` unless already present. Returns True if appended."""
        department = department.strip()
        if not department or self.has_department(department):
            return False
        self.departments_visited = DEPARTMENT_SEPARATOR.join([*self.departments, department])
        return True
