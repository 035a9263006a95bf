"""
Pydantic Schemas - Request Validation

All API request schemas in one file for simplicity.
Responses use the envelope {"success": bool, "message"?, "data"?, "errors"?}.
"""

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from typing import Annotated, Optional
from datetime import date
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    job_seeker = "job_seeker"
    job_poster = "job_poster"
    alumni = "alumni"
    student = "student"
    admin = "admin"


class RegisterRole(str, Enum):
    """Roles open to self-registration (admin is not)."""
    job_seeker = "job_seeker"
    job_poster = "job_poster"
    alumni = "alumni"
    student = "student"


class UserStatus(str, Enum):
    active = "active"
    suspended = "suspended"
    pending = "pending"


class JobType(str, Enum):
    full_time = "full_time"
    part_time = "part_time"
    contract = "contract"
    internship = "internship"
    freelance = "freelance"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"
    pending = "pending"
    rejected = "rejected"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    shortlisted = "shortlisted"
    rejected = "rejected"
    accepted = "accepted"


class ChapterStatus(str, Enum):
    active = "active"
    blocked = "blocked"
    pending = "pending"


class MemberDecision(str, Enum):
    approved = "approved"
    rejected = "rejected"


class PostType(str, Enum):
    job = "job"
    internship = "internship"
    announcement = "announcement"
    event = "event"
    mentoring = "mentoring"


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


# Required text: rejects empty and whitespace-only strings
NonEmptyStr = Annotated[str, AfterValidator(_not_blank)]


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    name: NonEmptyStr = Field(..., max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=15)
    password: str = Field(..., min_length=6)
    role: RegisterRole

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


# ============================================================
# USER / PROFILE SCHEMAS
# ============================================================

class ProfileUpdate(BaseModel):
    name: Optional[NonEmptyStr] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=15)
    education: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None
    bio: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    location: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None


class StatusUpdate(BaseModel):
    """Admin status change for users."""
    status: UserStatus


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: NonEmptyStr = Field(..., max_length=200)
    company: NonEmptyStr = Field(..., max_length=150)
    description: NonEmptyStr
    salary: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    skills: Optional[str] = None
    job_type: JobType = JobType.full_time
    experience_level: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    deadline: Optional[date] = None

class JobUpdate(BaseModel):
    title: Optional[NonEmptyStr] = Field(None, max_length=200)
    company: Optional[NonEmptyStr] = Field(None, max_length=150)
    description: Optional[NonEmptyStr] = None
    salary: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    skills: Optional[str] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=100)
    deadline: Optional[date] = None
    status: Optional[JobStatus] = None

class JobStatusUpdate(BaseModel):
    status: JobStatus


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


# ============================================================
# CHAPTER SCHEMAS
# ============================================================

class ChapterCreate(BaseModel):
    chapter_name: NonEmptyStr = Field(..., max_length=200)
    college_name: NonEmptyStr = Field(..., max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    batch: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None

class ChapterStatusUpdate(BaseModel):
    status: ChapterStatus

class MemberStatusUpdate(BaseModel):
    status: MemberDecision

class ChapterPostCreate(BaseModel):
    type: PostType
    title: NonEmptyStr = Field(..., max_length=200)
    description: NonEmptyStr
    target_audience: Optional[str] = Field(None, max_length=100)
    expiry_date: Optional[date] = None
    company: Optional[str] = Field(None, max_length=150)
    location: Optional[str] = Field(None, max_length=100)
    salary: Optional[str] = Field(None, max_length=50)
    skills: Optional[str] = None


# ============================================================
# CAREER TOOL SCHEMAS
# ============================================================

class ResumeAnalysisRequest(BaseModel):
    # length rule (>= 20 trimmed chars) lives in career_scoring.analyze_resume
    model_config = ConfigDict(populate_by_name=True)

    resume_text: Optional[str] = Field(None, alias="resumeText")

class MockInterviewRequest(BaseModel):
    # presence rules live in career_scoring.validate_interview_input
    prompt: Optional[str] = None
    response: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
