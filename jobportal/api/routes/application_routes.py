"""
Application Routes

GET /applications - Caller's applications
POST /applications/apply - Apply to a job
DELETE /applications/{id} - Withdraw an application (owner or admin)
GET /applications/job/{job_id} - Applicants for a job (job owner or admin)
PUT /applications/{id}/status - Move an application to a new status

Lifecycle: pending -> reviewed | shortlisted | rejected | accepted.
Any status may be overwritten by any other; there is no forward-only rule.

The per-job applications_count is denormalized. Apply and withdraw change the
row and the counter inside the same transaction, and the unique
(job_id, user_id) constraint is what actually prevents double applications.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from jobportal.api.routes.job_routes import JOB_MANAGERS, load_owned_job
from jobportal.core.auth import get_current_user, require_roles, is_admin
from jobportal.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from jobportal.db.postgres import Database, get_database
from jobportal.services.email_service import EmailService, get_email_service
from jobportal.schemas.schemas import ApplicationStatusUpdate, ApplicationStatus
from jobportal.utils.file_upload import has_upload, read_upload, store_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("")
async def get_my_applications(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    """Get all applications submitted by the caller."""
    applications = db.fetch_all(
        """
        SELECT a.*, j.title AS job_title, j.company AS company_name, j.location, j.job_type
        FROM applications a
        JOIN jobs j ON a.job_id = j.job_id
        WHERE a.user_id = :uid
        ORDER BY a.applied_at DESC, a.application_id DESC
        """,
        {"uid": user["user_id"]}
    )
    return {"success": True, "data": applications}


@router.post("/apply", status_code=201)
async def apply_to_job(
    background_tasks: BackgroundTasks,
    job_id: int = Form(...),
    cover_letter: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None, description="Resume for this application (PDF, DOCX, TXT)"),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
    mailer: EmailService = Depends(get_email_service),
):
    """
    Apply to a job. At most one application per (job, user).

    Multipart form. An attached resume is stored and linked to this
    application; without one the profile resume is used, if any.
    """
    upload = await read_upload(resume) if has_upload(resume) else None

    try:
        with db.session() as s:
            job = s.execute(
                text("""
                    SELECT j.title, j.company, j.status, u.email AS poster_email
                    FROM jobs j JOIN users u ON j.user_id = u.user_id
                    WHERE j.job_id = :jid
                """),
                {"jid": job_id}
            ).mappings().first()
            if not job:
                raise NotFoundError("Job not found")
            if job["status"] != "active":
                raise ValidationError("Job is not accepting applications")

            # Fast path; the unique constraint is the real guard
            existing = s.execute(
                text("SELECT application_id FROM applications WHERE job_id = :jid AND user_id = :uid"),
                {"jid": job_id, "uid": user["user_id"]}
            ).first()
            if existing:
                raise ConflictError("Already applied to this job")

            if upload:
                resume_path = store_upload(*upload, prefix=f"resume-{user['user_id']}")
            else:
                resume_path = s.execute(
                    text("SELECT resume FROM profiles WHERE user_id = :uid"),
                    {"uid": user["user_id"]}
                ).scalar()

            s.execute(
                text("""
                    INSERT INTO applications (job_id, user_id, resume, cover_letter)
                    VALUES (:jid, :uid, :resume, :cover)
                """),
                {"jid": job_id, "uid": user["user_id"], "resume": resume_path, "cover": cover_letter}
            )
            s.execute(
                text("UPDATE jobs SET applications_count = applications_count + 1 WHERE job_id = :jid"),
                {"jid": job_id}
            )
    except IntegrityError:
        raise ConflictError("Already applied to this job")

    logger.info("User %s applied to job %s", user["user_id"], job_id)
    background_tasks.add_task(mailer.send_new_application, job["poster_email"], job["title"], job["company"])

    return {"success": True, "message": "Application submitted successfully"}


@router.delete("/{application_id}")
async def withdraw_application(
    application_id: int,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Withdraw an application. The job's counter never drops below zero."""
    with db.session() as s:
        app_row = s.execute(
            text("SELECT application_id, job_id, user_id FROM applications WHERE application_id = :aid"),
            {"aid": application_id}
        ).mappings().first()

        if not app_row:
            raise NotFoundError("Application not found")
        if app_row["user_id"] != user["user_id"] and not is_admin(user):
            raise AuthorizationError("Not authorized to withdraw this application")

        deleted = s.execute(
            text("DELETE FROM applications WHERE application_id = :aid"),
            {"aid": application_id}
        )
        # a concurrent withdraw already took the row (and the decrement)
        if deleted.rowcount == 1:
            s.execute(
                text("""
                    UPDATE jobs
                    SET applications_count = CASE WHEN applications_count > 0
                                                  THEN applications_count - 1 ELSE 0 END
                    WHERE job_id = :jid
                """),
                {"jid": app_row["job_id"]}
            )

    return {"success": True, "message": "Application withdrawn successfully"}


@router.get("/job/{job_id}")
async def get_job_applications(
    job_id: int,
    user: dict = Depends(require_roles(*JOB_MANAGERS)),
    db: Database = Depends(get_database),
):
    """Applicants for one job, with their profile highlights."""
    with db.session() as s:
        load_owned_job(s, job_id, user)
        rows = s.execute(
            text("""
                SELECT a.*, u.name, u.email, u.phone, p.education, p.skills, p.experience
                FROM applications a
                JOIN users u ON a.user_id = u.user_id
                LEFT JOIN profiles p ON u.user_id = p.user_id
                WHERE a.job_id = :jid
                ORDER BY a.applied_at DESC, a.application_id DESC
            """),
            {"jid": job_id}
        ).mappings().all()

    return {"success": True, "data": [dict(r) for r in rows]}


@router.put("/{application_id}/status")
async def update_application_status(
    application_id: int,
    update: ApplicationStatusUpdate,
    background_tasks: BackgroundTasks,
    user: dict = Depends(require_roles(*JOB_MANAGERS)),
    db: Database = Depends(get_database),
    mailer: EmailService = Depends(get_email_service),
):
    """Set an application's status. Job owner or admin only; applicant is emailed."""
    with db.session() as s:
        app_row = s.execute(
            text("""
                SELECT a.application_id, j.user_id AS job_poster_id, j.title, u.email, u.name
                FROM applications a
                JOIN jobs j ON a.job_id = j.job_id
                JOIN users u ON a.user_id = u.user_id
                WHERE a.application_id = :aid
            """),
            {"aid": application_id}
        ).mappings().first()

        if not app_row:
            raise NotFoundError("Application not found")
        if app_row["job_poster_id"] != user["user_id"] and not is_admin(user):
            raise AuthorizationError("Not authorized")

        s.execute(
            text("""
                UPDATE applications SET status = :status, updated_at = CURRENT_TIMESTAMP
                WHERE application_id = :aid
            """),
            {"status": update.status.value, "aid": application_id}
        )

    if update.status != ApplicationStatus.pending:
        background_tasks.add_task(
            mailer.send_status_update, app_row["email"], app_row["name"], app_row["title"], update.status.value
        )

    return {"success": True, "message": "Application status updated"}
