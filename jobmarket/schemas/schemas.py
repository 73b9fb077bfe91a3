"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Request models are strict: numbers must arrive as JSON numbers and strings as
JSON strings, nothing is coerced. Update models are partial: a field that is
omitted stays unchanged, a field sent as null is cleared (only where the
column is nullable).
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator, model_validator

from jobmarket.core.tokens import Role


# ============================================================
# ENUMS
# ============================================================

UserRole = Role


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class Education(str, Enum):
    high_school = "high_school"
    associate = "associate"
    bachelor = "bachelor"
    master = "master"
    phd = "phd"


class JobStatus(str, Enum):
    draft = "draft"
    published = "published"
    closed = "closed"
    expired = "expired"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    accepted = "accepted"
    rejected = "rejected"
    withdrawn = "withdrawn"


class VerificationStatus(str, Enum):
    unverified = "unverified"
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


# ============================================================
# STRICT FIELD TYPES
# ============================================================

Id = Annotated[int, Field(strict=True, gt=0)]
NonNegativeInt = Annotated[int, Field(strict=True, ge=0)]
Money = Annotated[float, Field(strict=True, ge=0)]


def _text(min_length: int = 0, max_length: Optional[int] = None) -> Any:
    return Annotated[str, Field(strict=True, min_length=min_length, max_length=max_length)]


class StrictRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class PartialUpdate(StrictRequest):
    """Omitted = unchanged, null = clear. Fields in NOT_NULLABLE reject null."""

    NOT_NULLABLE: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_cleared_required_fields(self):
        for name in sorted(self.model_fields_set & self.NOT_NULLABLE):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict:
        """Only the fields the caller actually sent, enums unwrapped."""
        data = self.model_dump(exclude_unset=True, mode="python")
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(StrictRequest):
    phone: str = Field(..., strict=True, pattern=r"^\d{11}$")
    password: str = Field(..., strict=True, min_length=8, max_length=72)
    role: UserRole
    real_name: Optional[_text(1, 50)] = None
    company_name: Optional[_text(1, 100)] = None
    city_id: Optional[Id] = None
    industry_level1_id: Optional[Id] = None
    industry_level2_id: Optional[Id] = None

    @model_validator(mode="after")
    def _check_role_fields(self):
        if self.role == Role.talent and not self.real_name:
            raise ValueError("real_name is required for talent accounts")
        if self.role == Role.company:
            if not self.company_name:
                raise ValueError("company_name is required for company accounts")
            if self.city_id is None:
                raise ValueError("city_id is required for company accounts")
            if self.industry_level1_id is None:
                raise ValueError("industry_level1_id is required for company accounts")
        return self


class LoginRequest(StrictRequest):
    phone: str = Field(..., strict=True, pattern=r"^\d{11}$")
    password: str = Field(..., strict=True, min_length=1)


class RefreshRequest(StrictRequest):
    refresh_token: str = Field(..., strict=True, min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: int
    role: str


class UserResponse(BaseModel):
    id: int
    phone: str
    role: str
    created_at: datetime
    updated_at: datetime


class CurrentUser(BaseModel):
    id: int
    user_name: str
    role: str


class CurrentUserResponse(BaseModel):
    user: Optional[CurrentUser] = None


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class TalentResponse(BaseModel):
    id: int
    user_id: int
    real_name: str
    gender: Optional[str] = None
    birth_date: Optional[datetime] = None
    city_id: Optional[int] = None
    work_experience_years: int = 0
    education: Optional[str] = None
    major: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    phone_verified: bool = False
    created_at: datetime
    updated_at: datetime


class TalentUpdate(PartialUpdate):
    NOT_NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"real_name", "work_experience_years"})

    real_name: Optional[_text(1, 50)] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    city_id: Optional[Id] = None
    work_experience_years: Optional[NonNegativeInt] = None
    education: Optional[Education] = None
    major: Optional[_text(0, 100)] = None
    bio: Optional[_text(0, 2000)] = None
    avatar: Optional[HttpUrl] = None

    def changes(self) -> dict:
        data = super().changes()
        if data.get("avatar") is not None:
            data["avatar"] = str(data["avatar"])
        if data.get("birth_date") is not None:
            data["birth_date"] = datetime.combine(data["birth_date"], datetime.min.time())
        return data


class CompanyResponse(BaseModel):
    id: int
    user_id: int
    company_name: str
    company_size: Optional[str] = None
    city_id: int
    industry_level1_id: int
    industry_level2_id: Optional[int] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    business_license: Optional[str] = None
    verification_status: VerificationStatus
    verification_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class CompanyUpdate(PartialUpdate):
    NOT_NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"company_name", "city_id", "industry_level1_id"})

    company_name: Optional[_text(1, 100)] = None
    company_size: Optional[_text(0, 50)] = None
    city_id: Id
    industry_level1_id: Optional[Id] = None
    industry_level2_id: Optional[Id] = None
    description: Optional[_text(0, 5000)] = None
    logo: Optional[HttpUrl] = None
    website: Optional[HttpUrl] = None
    business_license: Optional[_text(0, 255)] = None

    def changes(self) -> dict:
        data = super().changes()
        for key in ("logo", "website"):
            if data.get(key) is not None:
                data[key] = str(data[key])
        return data


class UserProfileResponse(BaseModel):
    user: UserResponse
    talent: Optional[TalentResponse] = None
    company: Optional[CompanyResponse] = None


# ============================================================
# REFERENCE DATA SCHEMAS
# ============================================================

class ProvinceResponse(BaseModel):
    id: int
    name: str
    code: str


class CityResponse(BaseModel):
    id: int
    name: str
    province_id: int
    code: str


class IndustryLevel1Response(BaseModel):
    id: int
    name: str
    code: str
    description: Optional[str] = None


class IndustryLevel2Response(BaseModel):
    id: int
    name: str
    industry_level1_id: int
    code: str
    description: Optional[str] = None


class SkillResponse(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str] = None


class NamedRef(BaseModel):
    id: int
    name: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(StrictRequest):
    position_name: _text(1, 100)
    description: _text(10)
    industry_level1_id: Id
    industry_level2_id: Optional[Id] = None
    salary_min: Optional[Money] = None
    salary_max: Optional[Money] = None
    city_id: Id
    work_experience_required: NonNegativeInt = 0
    education_required: Optional[Education] = None
    position_count: Id = 1
    skill_ids: List[Id] = []
    expired_at: Optional[datetime] = None
    status: JobStatus = JobStatus.published

    @field_validator("status")
    @classmethod
    def _initial_status(cls, v: JobStatus) -> JobStatus:
        if v not in (JobStatus.draft, JobStatus.published):
            raise ValueError("a new job must be draft or published")
        return v

    @model_validator(mode="after")
    def _salary_range(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValueError("salary_min must not exceed salary_max")
        return self


class JobUpdate(PartialUpdate):
    NOT_NULLABLE: ClassVar[FrozenSet[str]] = frozenset({
        "position_name", "description", "industry_level1_id", "city_id",
        "work_experience_required", "position_count", "status", "skill_ids",
    })

    position_name: Optional[_text(1, 100)] = None
    description: Optional[_text(10)] = None
    industry_level1_id: Optional[Id] = None
    industry_level2_id: Optional[Id] = None
    salary_min: Optional[Money] = None
    salary_max: Optional[Money] = None
    city_id: Optional[Id] = None
    work_experience_required: Optional[NonNegativeInt] = None
    education_required: Optional[Education] = None
    position_count: Optional[Id] = None
    status: Optional[JobStatus] = None
    expired_at: Optional[datetime] = None
    skill_ids: Optional[List[Id]] = None

    @model_validator(mode="after")
    def _salary_range(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValueError("salary_min must not exceed salary_max")
        return self


class JobSkillResponse(BaseModel):
    skill_id: int
    name: str
    category: str
    is_required: bool = True


class JobResponse(BaseModel):
    id: int
    company_id: int
    position_name: str
    description: str
    industry_level1_id: int
    industry_level2_id: Optional[int] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    city_id: int
    work_experience_required: int
    education_required: Optional[str] = None
    position_count: int
    status: str
    published_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    company: Optional[NamedRef] = None
    city: Optional[NamedRef] = None
    industry_level1: Optional[NamedRef] = None
    industry_level2: Optional[NamedRef] = None
    skills: List[JobSkillResponse] = []

    @field_validator("salary_min", "salary_max", mode="before")
    @classmethod
    def _decimal_to_float(cls, v):
        if isinstance(v, Decimal):
            return float(v)
        return v


class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    page: int
    limit: int


class JobCreatedResponse(BaseModel):
    job_id: int


class FavoriteJobResponse(JobResponse):
    favorited_at: datetime


# ============================================================
# COMPANY DIRECTORY SCHEMAS
# ============================================================

class CompanyListItem(BaseModel):
    id: int
    company_name: str
    company_size: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    verification_status: VerificationStatus
    city: Optional[NamedRef] = None
    province: Optional[NamedRef] = None
    industry_level1: Optional[NamedRef] = None
    industry_level2: Optional[NamedRef] = None
    job_count: int = 0


class CompanyDetailResponse(CompanyListItem):
    jobs: List[JobResponse] = []


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(StrictRequest):
    job_position_id: Id


class ApplicationStatusUpdate(StrictRequest):
    status: ApplicationStatus
    company_reply: Optional[_text(1, 2000)] = None


class ApplicationCreatedResponse(BaseModel):
    application_id: int


class ApplicationResponse(BaseModel):
    id: int
    talent_id: int
    job_position_id: int
    status: str
    applied_at: datetime
    reviewed_at: Optional[datetime] = None
    company_reply: Optional[str] = None
    reply_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ApplicantSummary(BaseModel):
    id: int
    real_name: str
    gender: Optional[str] = None
    education: Optional[str] = None
    work_experience_years: int = 0
    major: Optional[str] = None


class ApplicationWithJob(BaseModel):
    application: ApplicationResponse
    job: NamedRef
    company: NamedRef


class ApplicationWithApplicant(ApplicationWithJob):
    talent: ApplicantSummary


class ResumeDetailResponse(BaseModel):
    application: ApplicationResponse
    job: NamedRef
    company: NamedRef
    talent: TalentResponse
    city: Optional[NamedRef] = None
    province: Optional[NamedRef] = None


class HasAppliedResponse(BaseModel):
    has_applied: bool


# ============================================================
# FAVORITE SCHEMAS
# ============================================================

class FavoriteToggle(StrictRequest):
    job_id: Id


class FavoriteStatusResponse(BaseModel):
    is_favorite: bool


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    detail: str
    code: str
