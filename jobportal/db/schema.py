"""
Table definitions.

Handlers talk to the store with raw parameterized SQL; these Core tables only
describe the DDL so it can be created on PostgreSQL (production) and SQLite
(tests) alike. Enum columns are CHECK constraints.

Unique constraints here are the real duplicate guards:
- users(email)
- applications(job_id, user_id)
- chapter_members(chapter_id, user_id)
"""

from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Text, Boolean, Date, DateTime,
    ForeignKey, UniqueConstraint, CheckConstraint, Index, func, false
)

metadata = MetaData()


def _in(column: str, values) -> CheckConstraint:
    quoted = ", ".join(f"'{v}'" for v in values)
    return CheckConstraint(f"{column} IN ({quoted})")


USER_ROLES = ("job_seeker", "job_poster", "alumni", "student", "admin")
USER_STATUSES = ("active", "suspended", "pending")
JOB_TYPES = ("full_time", "part_time", "contract", "internship", "freelance")
JOB_STATUSES = ("active", "closed", "pending", "rejected")
APPLICATION_STATUSES = ("pending", "reviewed", "shortlisted", "rejected", "accepted")
CHAPTER_STATUSES = ("active", "blocked", "pending")
MEMBER_ROLES = ("admin", "member")
MEMBER_STATUSES = ("pending", "approved", "rejected")
POST_TYPES = ("job", "internship", "announcement", "event", "mentoring")
POST_STATUSES = ("active", "expired", "removed")


def _timestamps():
    return [
        Column("created_at", DateTime, server_default=func.current_timestamp(), nullable=False),
        Column("updated_at", DateTime, server_default=func.current_timestamp(), nullable=False),
    ]


users = Table(
    "users", metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(100), nullable=False, unique=True),
    Column("phone", String(15)),
    Column("password", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("email_verified", Boolean, nullable=False, server_default=false()),
    *_timestamps(),
    _in("role", USER_ROLES),
    _in("status", USER_STATUSES),
    Index("idx_users_role", "role"),
    Index("idx_users_status", "status"),
)

profiles = Table(
    "profiles", metadata,
    Column("profile_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("education", Text),
    Column("skills", Text),
    Column("experience", Text),
    Column("resume", String(255)),
    Column("bio", Text),
    Column("linkedin", String(255)),
    Column("github", String(255)),
    Column("portfolio", String(255)),
    Column("location", String(100)),
    Column("date_of_birth", Date),
    Column("gender", String(10)),
    *_timestamps(),
    CheckConstraint("gender IS NULL OR gender IN ('male', 'female', 'other')"),
)

jobs = Table(
    "jobs", metadata,
    Column("job_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("title", String(200), nullable=False),
    Column("company", String(150), nullable=False),
    Column("salary", String(50)),
    Column("location", String(100)),
    Column("description", Text, nullable=False),
    Column("skills", Text),
    Column("job_type", String(20), nullable=False, server_default="full_time"),
    Column("experience_level", String(50)),
    Column("category", String(100)),
    Column("deadline", Date),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("views", Integer, nullable=False, server_default="0"),
    Column("applications_count", Integer, nullable=False, server_default="0"),
    *_timestamps(),
    _in("job_type", JOB_TYPES),
    _in("status", JOB_STATUSES),
    CheckConstraint("applications_count >= 0"),
    Index("idx_jobs_user", "user_id"),
    Index("idx_jobs_status", "status"),
    Index("idx_jobs_location", "location"),
)

applications = Table(
    "applications", metadata,
    Column("application_id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("resume", String(255)),
    Column("cover_letter", Text),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("applied_at", DateTime, server_default=func.current_timestamp(), nullable=False),
    Column("updated_at", DateTime, server_default=func.current_timestamp(), nullable=False),
    UniqueConstraint("job_id", "user_id", name="unique_application"),
    _in("status", APPLICATION_STATUSES),
    Index("idx_applications_user", "user_id"),
)

alumni_chapters = Table(
    "alumni_chapters", metadata,
    Column("chapter_id", Integer, primary_key=True, autoincrement=True),
    Column("chapter_name", String(200), nullable=False),
    Column("college_name", String(200), nullable=False),
    Column("department", String(100)),
    Column("batch", String(20)),
    Column("description", Text),
    Column("logo", String(255)),
    Column("created_by", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("member_count", Integer, nullable=False, server_default="0"),
    *_timestamps(),
    _in("status", CHAPTER_STATUSES),
    Index("idx_chapters_college", "college_name"),
)

chapter_members = Table(
    "chapter_members", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("chapter_id", Integer, ForeignKey("alumni_chapters.chapter_id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("role", String(10), nullable=False, server_default="member"),
    Column("status", String(10), nullable=False, server_default="pending"),
    Column("joined_at", DateTime, server_default=func.current_timestamp(), nullable=False),
    UniqueConstraint("chapter_id", "user_id", name="unique_membership"),
    _in("role", MEMBER_ROLES),
    _in("status", MEMBER_STATUSES),
)

chapter_posts = Table(
    "chapter_posts", metadata,
    Column("post_id", Integer, primary_key=True, autoincrement=True),
    Column("chapter_id", Integer, ForeignKey("alumni_chapters.chapter_id", ondelete="CASCADE"), nullable=False),
    Column("posted_by", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("type", String(20), nullable=False),
    Column("title", String(200), nullable=False),
    Column("description", Text, nullable=False),
    Column("target_audience", String(100)),
    Column("expiry_date", Date),
    Column("company", String(150)),
    Column("location", String(100)),
    Column("salary", String(50)),
    Column("skills", Text),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("views", Integer, nullable=False, server_default="0"),
    *_timestamps(),
    _in("type", POST_TYPES),
    _in("status", POST_STATUSES),
)

notifications = Table(
    "notifications", metadata,
    Column("notification_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("type", String(50), nullable=False),
    Column("title", String(200), nullable=False),
    Column("message", Text, nullable=False),
    Column("link", String(255)),
    Column("is_read", Boolean, nullable=False, server_default=false()),
    Column("created_at", DateTime, server_default=func.current_timestamp(), nullable=False),
)

password_resets = Table(
    "password_resets", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(100), nullable=False, index=True),
    Column("token", String(255), nullable=False, unique=True),
    Column("expires_at", DateTime, nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp(), nullable=False),
)

interview_practice = Table(
    "interview_practice", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("prompt", Text, nullable=False),
    Column("response", Text, nullable=False),
    Column("duration", Integer),
    Column("score", Integer, nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp(), nullable=False),
    CheckConstraint("score >= 0 AND score <= 100"),
    Index("idx_interview_user_created", "user_id", "created_at"),
)
