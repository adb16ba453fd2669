# jobboard/models/application.py
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


APPLICATION_STATUSES = tuple(s.value for s in ApplicationStatus)


class ExperienceBand(str, Enum):
    FRESHER = "fresher"
    ONE_TO_TWO = "1-2 years"
    THREE_TO_FIVE = "3-5 years"
    FIVE_TO_TEN = "5-10 years"
    TEN_PLUS = "10+ years"


class ApplicationCreate(BaseModel):
    """Applicant-supplied profile snapshot sent with the CV."""

    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    cnic: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    address: str = Field(min_length=1)
    experience: ExperienceBand
    expected_salary: str = Field(min_length=1)
