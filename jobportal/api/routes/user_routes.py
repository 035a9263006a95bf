"""
User Routes

GET /users/profile - Get own account + profile
PUT /users/profile - Update profile (only provided fields)
POST /users/upload-resume - Upload resume (PDF/DOCX/TXT)
GET /users/applications - Get my applications
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy import text

from jobportal.core.auth import get_current_user
from jobportal.core.exceptions import NotFoundError, ValidationError
from jobportal.db.postgres import Database, get_database
from jobportal.utils.file_upload import save_resume
from jobportal.schemas.schemas import ProfileUpdate

router = APIRouter(prefix="/users", tags=["Users"])

USER_FIELDS = ["name", "phone"]
PROFILE_FIELDS = [
    "education", "skills", "experience", "bio", "linkedin", "github",
    "portfolio", "location", "date_of_birth", "gender",
]


@router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    """Get current user's account and profile."""
    profile = db.fetch_one(
        """
        SELECT u.user_id, u.name, u.email, u.phone, u.role, u.status, u.created_at,
               p.education, p.skills, p.experience, p.resume, p.bio,
               p.linkedin, p.github, p.portfolio, p.location, p.date_of_birth, p.gender
        FROM users u
        LEFT JOIN profiles p ON u.user_id = p.user_id
        WHERE u.user_id = :uid
        """,
        {"uid": user["user_id"]}
    )
    if not profile:
        raise NotFoundError("User not found")
    return {"success": True, "data": profile}


@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Update user and profile fields. Only provided fields are updated."""
    provided = data.model_dump(exclude_unset=True, exclude_none=True)
    if not provided:
        raise ValidationError("No fields to update")

    def assignments(fields):
        cols = [f for f in fields if f in provided]
        params = {f: getattr(provided[f], "value", provided[f]) for f in cols}
        return [f"{f} = :{f}" for f in cols], params

    user_sets, user_params = assignments(USER_FIELDS)
    profile_sets, profile_params = assignments(PROFILE_FIELDS)

    with db.session() as s:
        if user_sets:
            s.execute(
                text(f"UPDATE users SET {', '.join(user_sets)}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :uid"),
                {**user_params, "uid": user["user_id"]}
            )
        if profile_sets:
            updated = s.execute(
                text(f"UPDATE profiles SET {', '.join(profile_sets)}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :uid"),
                {**profile_params, "uid": user["user_id"]}
            )
            if updated.rowcount == 0:
                # accounts created before profiles existed
                cols = list(profile_params)
                s.execute(
                    text(f"INSERT INTO profiles (user_id, {', '.join(cols)}) "
                         f"VALUES (:uid, {', '.join(':' + c for c in cols)})"),
                    {**profile_params, "uid": user["user_id"]}
                )

    return {"success": True, "message": "Profile updated successfully"}


@router.post("/upload-resume")
async def upload_resume(
    file: UploadFile = File(..., description="Resume file (PDF, DOCX, or TXT)"),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Store the resume file and point the profile at it."""
    resume_path = await save_resume(file, user["user_id"])

    with db.session() as s:
        s.execute(
            text("UPDATE profiles SET resume = :resume, updated_at = CURRENT_TIMESTAMP WHERE user_id = :uid"),
            {"resume": resume_path, "uid": user["user_id"]}
        )

    return {"success": True, "message": "Resume uploaded successfully", "resumePath": resume_path}


@router.get("/applications")
async def get_my_applications(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    """Get all job applications for current user."""
    applications = db.fetch_all(
        """
        SELECT a.*, j.title, j.company, j.location, j.salary
        FROM applications a
        JOIN jobs j ON a.job_id = j.job_id
        WHERE a.user_id = :uid
        ORDER BY a.applied_at DESC, a.application_id DESC
        """,
        {"uid": user["user_id"]}
    )
    return {"success": True, "data": applications}
