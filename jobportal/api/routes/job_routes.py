"""
Job Routes

GET /jobs - List active jobs with filters and pagination (public)
GET /jobs/{job_id} - Get job details, counts a view (public)
POST /jobs - Create job posting (job_poster, alumni, admin)
PUT /jobs/{job_id} - Update job (owner or admin)
DELETE /jobs/{job_id} - Delete job (owner or admin)
GET /jobs/user/my-jobs - Jobs posted by the caller
"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text

from jobportal.core.auth import get_current_user, require_roles, is_admin
from jobportal.core.exceptions import AuthorizationError, NotFoundError
from jobportal.db.postgres import Database, get_database
from jobportal.schemas.schemas import JobCreate, JobUpdate, JobType

router = APIRouter(prefix="/jobs", tags=["Jobs"])

JOB_MANAGERS = ("job_poster", "alumni", "admin")

UPDATABLE_FIELDS = [
    "title", "company", "salary", "location", "description", "skills",
    "job_type", "experience_level", "category", "deadline", "status",
]


def load_owned_job(s, job_id: int, user: dict) -> dict:
    """Fetch a job the caller may manage: 404 if absent, 403 if not owner/admin."""
    job = s.execute(
        text("SELECT job_id, user_id, title, company, status FROM jobs WHERE job_id = :jid"),
        {"jid": job_id}
    ).mappings().first()
    if not job:
        raise NotFoundError("Job not found")
    if job["user_id"] != user["user_id"] and not is_admin(user):
        raise AuthorizationError("Not authorized")
    return dict(job)


@router.get("")
async def list_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search in title, company, description"),
    location: Optional[str] = Query(None),
    job_type: Optional[JobType] = Query(None),
    experience_level: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    db: Database = Depends(get_database),
):
    """List active job postings, newest first."""
    where = " WHERE status = 'active'"
    params = {}

    if search:
        where += (" AND (LOWER(title) LIKE :search OR LOWER(company) LIKE :search"
                  " OR LOWER(description) LIKE :search)")
        params["search"] = f"%{search.lower()}%"
    if location:
        where += " AND LOWER(location) LIKE :location"
        params["location"] = f"%{location.lower()}%"
    if job_type:
        where += " AND job_type = :job_type"
        params["job_type"] = job_type.value
    if experience_level:
        where += " AND experience_level = :experience_level"
        params["experience_level"] = experience_level
    if category:
        where += " AND category = :category"
        params["category"] = category

    total = db.fetch_one(f"SELECT COUNT(*) AS total FROM jobs{where}", params)["total"]

    jobs = db.fetch_all(
        f"SELECT * FROM jobs{where} ORDER BY created_at DESC, job_id DESC LIMIT :limit OFFSET :offset",
        {**params, "limit": limit, "offset": (page - 1) * limit}
    )

    return {
        "success": True,
        "data": jobs,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit)
        }
    }


@router.get("/user/my-jobs")
async def get_my_jobs(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    """Get all jobs posted by the caller."""
    jobs = db.fetch_all(
        "SELECT * FROM jobs WHERE user_id = :uid ORDER BY created_at DESC, job_id DESC",
        {"uid": user["user_id"]}
    )
    return {"success": True, "data": jobs}


@router.get("/{job_id}")
async def get_job(job_id: int, db: Database = Depends(get_database)):
    """Get details of a specific job and count the view."""
    with db.session() as s:
        job = s.execute(
            text("""
                SELECT j.*, u.name AS poster_name, u.email AS poster_email
                FROM jobs j JOIN users u ON j.user_id = u.user_id
                WHERE j.job_id = :jid
            """),
            {"jid": job_id}
        ).mappings().first()

        if not job:
            raise NotFoundError("Job not found")

        s.execute(text("UPDATE jobs SET views = views + 1 WHERE job_id = :jid"), {"jid": job_id})

    return {"success": True, "data": dict(job)}


@router.post("", status_code=201)
async def create_job(
    job: JobCreate,
    user: dict = Depends(require_roles(*JOB_MANAGERS)),
    db: Database = Depends(get_database),
):
    """Create a new job posting."""
    with db.session() as s:
        job_id = s.execute(
            text("""
                INSERT INTO jobs (user_id, title, company, salary, location, description,
                    skills, job_type, experience_level, category, deadline)
                VALUES (:user_id, :title, :company, :salary, :location, :description,
                    :skills, :job_type, :experience_level, :category, :deadline)
                RETURNING job_id
            """),
            {
                "user_id": user["user_id"], "title": job.title, "company": job.company,
                "salary": job.salary, "location": job.location, "description": job.description,
                "skills": job.skills, "job_type": job.job_type.value,
                "experience_level": job.experience_level, "category": job.category,
                "deadline": job.deadline
            }
        ).scalar_one()

    return {"success": True, "message": "Job posted successfully", "jobId": job_id}


@router.put("/{job_id}")
async def update_job(
    job_id: int,
    update: JobUpdate,
    user: dict = Depends(require_roles(*JOB_MANAGERS)),
    db: Database = Depends(get_database),
):
    """Update a job posting. Only provided fields change."""
    with db.session() as s:
        load_owned_job(s, job_id, user)

        updates = []
        params = {"jid": job_id}
        for field in UPDATABLE_FIELDS:
            value = getattr(update, field)
            if value is not None:
                updates.append(f"{field} = :{field}")
                params[field] = value.value if hasattr(value, "value") else value

        if updates:
            s.execute(
                text(f"UPDATE jobs SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE job_id = :jid"),
                params
            )

    return {"success": True, "message": "Job updated successfully"}


@router.delete("/{job_id}")
async def delete_job(
    job_id: int,
    user: dict = Depends(require_roles(*JOB_MANAGERS)),
    db: Database = Depends(get_database),
):
    """Delete a job posting. Cascades to applications."""
    with db.session() as s:
        load_owned_job(s, job_id, user)
        s.execute(text("DELETE FROM jobs WHERE job_id = :jid"), {"jid": job_id})

    return {"success": True, "message": "Job deleted successfully"}
