"""
Alumni Chapter Routes

GET /chapters - List active chapters (public)
GET /chapters/{id} - Chapter details (public)
POST /chapters - Create chapter (multipart, optional logo); creator becomes its approved admin member
POST /chapters/{id}/join - Request membership (pending)
GET /chapters/{id}/members - Approved members
PUT /chapters/{id}/members/{member_id} - Approve/reject (chapter admin or site admin)
GET /chapters/{id}/posts - Active posts (approved members or site admin)
POST /chapters/{id}/posts - Create post (approved members or site admin)
GET /chapters/user/my-chapters - Chapters the caller belongs to or requested

member_count only moves when a membership enters 'approved'.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from jobportal.core.auth import get_current_user, is_admin
from jobportal.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from jobportal.db.postgres import Database, get_database
from jobportal.schemas.schemas import ChapterCreate, ChapterPostCreate, MemberStatusUpdate
from jobportal.utils.file_upload import has_upload, save_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chapters", tags=["Alumni Chapters"])


def ensure_chapter(s, chapter_id: int) -> None:
    found = s.execute(
        text("SELECT chapter_id FROM alumni_chapters WHERE chapter_id = :cid"),
        {"cid": chapter_id}
    ).first()
    if not found:
        raise NotFoundError("Chapter not found")


def ensure_approved_member(s, chapter_id: int, user: dict, message: str) -> None:
    """Site admins pass; everyone else needs an approved membership."""
    if is_admin(user):
        return
    membership = s.execute(
        text("""
            SELECT id FROM chapter_members
            WHERE chapter_id = :cid AND user_id = :uid AND status = 'approved'
        """),
        {"cid": chapter_id, "uid": user["user_id"]}
    ).first()
    if not membership:
        raise AuthorizationError(message)


@router.get("")
async def list_chapters(
    search: Optional[str] = Query(None, description="Search chapter or college name"),
    college: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_database),
):
    """List active chapters, newest first."""
    sql = "SELECT * FROM alumni_chapters WHERE status = 'active'"
    params = {"limit": limit, "offset": (page - 1) * limit}

    if search:
        sql += " AND (LOWER(chapter_name) LIKE :search OR LOWER(college_name) LIKE :search)"
        params["search"] = f"%{search.lower()}%"
    if college:
        sql += " AND LOWER(college_name) LIKE :college"
        params["college"] = f"%{college.lower()}%"

    sql += " ORDER BY created_at DESC, chapter_id DESC LIMIT :limit OFFSET :offset"
    return {"success": True, "data": db.fetch_all(sql, params)}


@router.get("/user/my-chapters")
async def get_my_chapters(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    """Chapters the caller belongs to, with their membership role and status."""
    chapters = db.fetch_all(
        """
        SELECT c.*, cm.role AS member_role, cm.status AS membership_status
        FROM alumni_chapters c
        JOIN chapter_members cm ON c.chapter_id = cm.chapter_id
        WHERE cm.user_id = :uid
        ORDER BY cm.joined_at DESC, cm.id DESC
        """,
        {"uid": user["user_id"]}
    )
    return {"success": True, "data": chapters}


@router.get("/{chapter_id}")
async def get_chapter(chapter_id: int, db: Database = Depends(get_database)):
    chapter = db.fetch_one(
        """
        SELECT c.*, u.name AS creator_name
        FROM alumni_chapters c JOIN users u ON c.created_by = u.user_id
        WHERE c.chapter_id = :cid
        """,
        {"cid": chapter_id}
    )
    if not chapter:
        raise NotFoundError("Chapter not found")
    return {"success": True, "data": chapter}


def chapter_form(
    chapter_name: str = Form(...),
    college_name: str = Form(...),
    department: Optional[str] = Form(None),
    batch: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
) -> ChapterCreate:
    """Chapter fields arrive as multipart form fields next to the logo."""
    try:
        return ChapterCreate(
            chapter_name=chapter_name, college_name=college_name,
            department=department, batch=batch, description=description,
        )
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Validation failed", errors=errors)


@router.post("", status_code=201)
async def create_chapter(
    data: ChapterCreate = Depends(chapter_form),
    logo: Optional[UploadFile] = File(None, description="Chapter logo (JPG, PNG, GIF, WEBP)"),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Create a chapter. The creator is added as its approved admin."""
    logo_path = await save_image(logo, f"chapter-{user['user_id']}") if has_upload(logo) else None

    with db.session() as s:
        chapter_id = s.execute(
            text("""
                INSERT INTO alumni_chapters
                    (chapter_name, college_name, department, batch, description, logo, created_by, member_count)
                VALUES (:chapter_name, :college_name, :department, :batch, :description, :logo, :uid, 1)
                RETURNING chapter_id
            """),
            {
                "chapter_name": data.chapter_name, "college_name": data.college_name,
                "department": data.department, "batch": data.batch,
                "description": data.description, "logo": logo_path, "uid": user["user_id"]
            }
        ).scalar_one()

        s.execute(
            text("""
                INSERT INTO chapter_members (chapter_id, user_id, role, status)
                VALUES (:cid, :uid, 'admin', 'approved')
            """),
            {"cid": chapter_id, "uid": user["user_id"]}
        )

    logger.info("User %s created chapter %s", user["user_id"], chapter_id)
    return {"success": True, "message": "Chapter created successfully", "chapterId": chapter_id}


@router.post("/{chapter_id}/join", status_code=201)
async def join_chapter(
    chapter_id: int,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Request membership. The unique (chapter, user) constraint backs the duplicate check."""
    try:
        with db.session() as s:
            ensure_chapter(s, chapter_id)

            existing = s.execute(
                text("SELECT id FROM chapter_members WHERE chapter_id = :cid AND user_id = :uid"),
                {"cid": chapter_id, "uid": user["user_id"]}
            ).first()
            if existing:
                raise ConflictError("Already requested or member")

            s.execute(
                text("INSERT INTO chapter_members (chapter_id, user_id, status) VALUES (:cid, :uid, 'pending')"),
                {"cid": chapter_id, "uid": user["user_id"]}
            )
    except IntegrityError:
        raise ConflictError("Already requested or member")

    return {"success": True, "message": "Join request submitted successfully"}


@router.get("/{chapter_id}/members")
async def get_members(
    chapter_id: int,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    members = db.fetch_all(
        """
        SELECT cm.*, u.name, u.email, u.role AS user_role
        FROM chapter_members cm
        JOIN users u ON cm.user_id = u.user_id
        WHERE cm.chapter_id = :cid AND cm.status = 'approved'
        ORDER BY cm.role ASC, cm.joined_at DESC
        """,
        {"cid": chapter_id}
    )
    return {"success": True, "data": members}


@router.put("/{chapter_id}/members/{member_id}")
async def update_member_status(
    chapter_id: int,
    member_id: int,
    update: MemberStatusUpdate,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Approve or reject a membership request."""
    status = update.status.value

    with db.session() as s:
        if not is_admin(user):
            chapter_admin = s.execute(
                text("""
                    SELECT id FROM chapter_members
                    WHERE chapter_id = :cid AND user_id = :uid AND role = 'admin' AND status = 'approved'
                """),
                {"cid": chapter_id, "uid": user["user_id"]}
            ).first()
            if not chapter_admin:
                raise AuthorizationError("Not authorized")

        previous = s.execute(
            text("SELECT status FROM chapter_members WHERE id = :mid AND chapter_id = :cid"),
            {"mid": member_id, "cid": chapter_id}
        ).scalar()
        if previous is None:
            raise NotFoundError("Member not found")

        s.execute(
            text("UPDATE chapter_members SET status = :status WHERE id = :mid"),
            {"status": status, "mid": member_id}
        )

        if status == "approved" and previous != "approved":
            s.execute(
                text("UPDATE alumni_chapters SET member_count = member_count + 1 WHERE chapter_id = :cid"),
                {"cid": chapter_id}
            )
        elif status == "rejected" and previous == "approved":
            s.execute(
                text("""
                    UPDATE alumni_chapters
                    SET member_count = CASE WHEN member_count > 0 THEN member_count - 1 ELSE 0 END
                    WHERE chapter_id = :cid
                """),
                {"cid": chapter_id}
            )

    return {"success": True, "message": f"Member {status}"}


@router.get("/{chapter_id}/posts")
async def get_posts(
    chapter_id: int,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    with db.session() as s:
        ensure_approved_member(s, chapter_id, user, "Must be a member to view posts")
        posts = s.execute(
            text("""
                SELECT cp.*, u.name AS poster_name
                FROM chapter_posts cp
                JOIN users u ON cp.posted_by = u.user_id
                WHERE cp.chapter_id = :cid AND cp.status = 'active'
                ORDER BY cp.created_at DESC, cp.post_id DESC
            """),
            {"cid": chapter_id}
        ).mappings().all()

    return {"success": True, "data": [dict(p) for p in posts]}


@router.post("/{chapter_id}/posts", status_code=201)
async def create_post(
    chapter_id: int,
    post: ChapterPostCreate,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    with db.session() as s:
        ensure_chapter(s, chapter_id)
        ensure_approved_member(s, chapter_id, user, "Must be a member to post")

        post_id = s.execute(
            text("""
                INSERT INTO chapter_posts
                    (chapter_id, posted_by, type, title, description, target_audience,
                     expiry_date, company, location, salary, skills)
                VALUES (:cid, :uid, :type, :title, :description, :target_audience,
                        :expiry_date, :company, :location, :salary, :skills)
                RETURNING post_id
            """),
            {
                "cid": chapter_id, "uid": user["user_id"], "type": post.type.value,
                "title": post.title, "description": post.description,
                "target_audience": post.target_audience, "expiry_date": post.expiry_date,
                "company": post.company, "location": post.location,
                "salary": post.salary, "skills": post.skills
            }
        ).scalar_one()

    return {"success": True, "message": "Post created successfully", "postId": post_id}
