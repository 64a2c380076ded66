from pydantic import BaseModel, ConfigDict
from typing import Optional, Union


class VisitPayload(BaseModel):
    """
    One visit record from manual entry.

    The upload column names (AADHAR_NO, NAME, AGE, GENDER, ADDRESS, PHONE,
    DEPARTMENT_VISITED) are accepted as extra keys alongside these fields.
    """

    model_config = ConfigDict(extra="allow")

    identifier: Optional[Union[str, int]] = None
    aadhar: Optional[Union[str, int]] = None
    name: Optional[str] = None
    age: Optional[Union[int, float, str]] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[Union[str, int]] = None
    department: Optional[str] = None


class BulkVisitsRequest(BaseModel):
    patients: list[VisitPayload]
