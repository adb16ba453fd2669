# jobboard/models/job.py
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobboard.models.common import as_naive_utc


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    FREELANCE = "Freelance"


class ExperienceLevel(str, Enum):
    ENTRY = "Entry Level"
    JUNIOR = "Junior"
    MID = "Mid Level"
    SENIOR = "Senior"
    EXECUTIVE = "Executive"


class EducationLevel(str, Enum):
    HIGH_SCHOOL = "High School"
    BACHELORS = "Bachelor's Degree"
    MASTERS = "Master's Degree"
    PHD = "PhD"
    DIPLOMA = "Diploma"
    CERTIFICATE = "Certificate"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    ANY = "Any"
    UNDISCLOSED = "Prefer not to say"


class JobStatus(str, Enum):
    ACTIVE = "Active"
    CLOSED = "Closed"
    DRAFT = "Draft"
    PAUSED = "Paused"
    EXPIRED = "Expired"


JOB_STATUSES = tuple(s.value for s in JobStatus)


def split_skills(value: Any) -> Any:
    """'python, sql,,docker' -> ['python', 'sql', 'docker'] (order kept)."""
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return value


class _JobFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True, extra="ignore")

    @field_validator("skills_required", mode="before", check_fields=False)
    @classmethod
    def _skills(cls, v):
        return split_skills(v)

    @field_validator("application_deadline", check_fields=False)
    @classmethod
    def _deadline(cls, v):
        return as_naive_utc(v) if v is not None else v


class JobCreate(_JobFields):
    position: str = Field(min_length=1)
    category: str = Field(min_length=1)
    job_type: JobType
    experience_level: ExperienceLevel
    location: str = Field(min_length=1)
    education_level: EducationLevel
    salary: str = Field(min_length=1)
    age: str = Field(min_length=1)
    gender: Gender
    requirements: str = Field(min_length=1)
    benefits: str = Field(min_length=1)
    skills_required: List[str] = Field(default_factory=list)
    application_deadline: datetime
    status: JobStatus = Field(JobStatus.ACTIVE, validate_default=True)


class JobUpdate(_JobFields):
    position: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    location: Optional[str] = Field(None, min_length=1)
    education_level: Optional[EducationLevel] = None
    salary: Optional[str] = Field(None, min_length=1)
    age: Optional[str] = Field(None, min_length=1)
    gender: Optional[Gender] = None
    requirements: Optional[str] = Field(None, min_length=1)
    benefits: Optional[str] = Field(None, min_length=1)
    skills_required: Optional[List[str]] = None
    application_deadline: Optional[datetime] = None
    status: Optional[JobStatus] = None


class StatusUpdate(BaseModel):
    # kept as a plain string so the service decides what "invalid" means
    status: str


class JobFilters(BaseModel):
    category: Optional[str] = None
    job_type: Optional[str] = None
    location: Optional[str] = None
    experience_level: Optional[str] = None
    gender: Optional[str] = None
    salary: Optional[str] = None
    age: Optional[str] = None
    status: Optional[str] = None
