"""
Admin Routes (admin role only)

GET /admin/dashboard - Platform totals
GET /admin/users - Users, filter by role/status
PUT /admin/users/{id}/status - Activate / suspend a user
DELETE /admin/users/{id} - Delete a user (cascades)
GET /admin/jobs - Jobs, filter by status
PUT /admin/jobs/{id}/status - Moderate a job
DELETE /admin/jobs/{id} - Delete a job
GET /admin/chapters - All chapters
PUT /admin/chapters/{id}/status - Moderate a chapter
DELETE /admin/chapters/{id} - Delete a chapter
GET /admin/applications - Latest 100 applications
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text

from jobportal.core.auth import require_roles
from jobportal.core.exceptions import NotFoundError
from jobportal.db.postgres import Database, get_database
from jobportal.schemas.schemas import (
    StatusUpdate, JobStatusUpdate, ChapterStatusUpdate, UserRole, UserStatus, JobStatus
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_roles("admin"))],
)


def execute_or_404(db: Database, sql: str, params: dict, missing: str) -> None:
    """Run a single-row UPDATE/DELETE; NotFoundError when it touched nothing."""
    with db.session() as s:
        result = s.execute(text(sql), params)
        if result.rowcount == 0:
            raise NotFoundError(missing)


@router.get("/dashboard")
async def dashboard(db: Database = Depends(get_database)):
    """Platform totals in one round trip."""
    stats = db.fetch_one("""
        SELECT
            (SELECT COUNT(*) FROM users) AS total_users,
            (SELECT COUNT(*) FROM jobs) AS total_jobs,
            (SELECT COUNT(*) FROM alumni_chapters) AS total_chapters,
            (SELECT COUNT(*) FROM applications) AS total_applications,
            (SELECT COUNT(*) FROM users WHERE status = 'active') AS active_users,
            (SELECT COUNT(*) FROM users WHERE status = 'suspended') AS suspended_users
    """)

    return {
        "success": True,
        "data": {
            "totalUsers": stats["total_users"],
            "totalJobs": stats["total_jobs"],
            "totalChapters": stats["total_chapters"],
            "totalApplications": stats["total_applications"],
            "activeUsers": stats["active_users"],
            "suspendedUsers": stats["suspended_users"]
        }
    }


# ============================================================
# USERS
# ============================================================

@router.get("/users")
async def list_users(
    role: Optional[UserRole] = Query(None),
    status: Optional[UserStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_database),
):
    sql = "SELECT user_id, name, email, phone, role, status, created_at FROM users WHERE 1=1"
    params = {"limit": limit, "offset": (page - 1) * limit}

    if role:
        sql += " AND role = :role"
        params["role"] = role.value
    if status:
        sql += " AND status = :status"
        params["status"] = status.value

    sql += " ORDER BY created_at DESC, user_id DESC LIMIT :limit OFFSET :offset"
    return {"success": True, "data": db.fetch_all(sql, params)}


@router.put("/users/{user_id}/status")
async def update_user_status(user_id: int, update: StatusUpdate, db: Database = Depends(get_database)):
    execute_or_404(
        db,
        "UPDATE users SET status = :status, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id",
        {"status": update.status.value, "id": user_id},
        "User not found"
    )
    logger.info("User %s status set to %s", user_id, update.status.value)
    return {"success": True, "message": "User status updated"}


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, db: Database = Depends(get_database)):
    """Delete a user. Profile, jobs, applications, memberships and practice rows cascade."""
    execute_or_404(db, "DELETE FROM users WHERE user_id = :id", {"id": user_id}, "User not found")
    logger.info("User %s deleted", user_id)
    return {"success": True, "message": "User deleted successfully"}


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
async def list_jobs(
    status: Optional[JobStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_database),
):
    sql = "SELECT j.*, u.name AS poster_name FROM jobs j JOIN users u ON j.user_id = u.user_id WHERE 1=1"
    params = {"limit": limit, "offset": (page - 1) * limit}

    if status:
        sql += " AND j.status = :status"
        params["status"] = status.value

    sql += " ORDER BY j.created_at DESC, j.job_id DESC LIMIT :limit OFFSET :offset"
    return {"success": True, "data": db.fetch_all(sql, params)}


@router.put("/jobs/{job_id}/status")
async def update_job_status(job_id: int, update: JobStatusUpdate, db: Database = Depends(get_database)):
    execute_or_404(
        db,
        "UPDATE jobs SET status = :status, updated_at = CURRENT_TIMESTAMP WHERE job_id = :id",
        {"status": update.status.value, "id": job_id},
        "Job not found"
    )
    return {"success": True, "message": "Job status updated"}


@router.delete("/jobs/{job_id}")
async def delete_job(job_id: int, db: Database = Depends(get_database)):
    execute_or_404(db, "DELETE FROM jobs WHERE job_id = :id", {"id": job_id}, "Job not found")
    return {"success": True, "message": "Job deleted successfully"}


# ============================================================
# CHAPTERS
# ============================================================

@router.get("/chapters")
async def list_chapters(db: Database = Depends(get_database)):
    chapters = db.fetch_all("""
        SELECT c.*, u.name AS creator_name
        FROM alumni_chapters c
        JOIN users u ON c.created_by = u.user_id
        ORDER BY c.created_at DESC, c.chapter_id DESC
    """)
    return {"success": True, "data": chapters}


@router.put("/chapters/{chapter_id}/status")
async def update_chapter_status(chapter_id: int, update: ChapterStatusUpdate, db: Database = Depends(get_database)):
    execute_or_404(
        db,
        "UPDATE alumni_chapters SET status = :status, updated_at = CURRENT_TIMESTAMP WHERE chapter_id = :id",
        {"status": update.status.value, "id": chapter_id},
        "Chapter not found"
    )
    return {"success": True, "message": "Chapter status updated"}


@router.delete("/chapters/{chapter_id}")
async def delete_chapter(chapter_id: int, db: Database = Depends(get_database)):
    execute_or_404(db, "DELETE FROM alumni_chapters WHERE chapter_id = :id", {"id": chapter_id}, "Chapter not found")
    return {"success": True, "message": "Chapter deleted successfully"}


# ============================================================
# APPLICATIONS
# ============================================================

@router.get("/applications")
async def list_applications(db: Database = Depends(get_database)):
    applications = db.fetch_all("""
        SELECT a.*, j.title, j.company, u.name AS applicant_name
        FROM applications a
        JOIN jobs j ON a.job_id = j.job_id
        JOIN users u ON a.user_id = u.user_id
        ORDER BY a.applied_at DESC, a.application_id DESC
        LIMIT 100
    """)
    return {"success": True, "data": applications}
