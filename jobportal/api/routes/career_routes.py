"""
Career Tools Routes

POST /career/analyze-resume - Score pasted resume text
POST /career/analyze-resume/upload - Score an uploaded resume (PDF/DOCX/TXT)
POST /career/mock-interview - Score and record a practice answer
GET /career/interview-history - Last 10 practice answers
GET /career/stats - Confidence pulse and activity counts

Scoring itself lives in services/career_scoring.py.
"""

import logging
import math

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy import text

from jobportal.core.auth import get_current_user
from jobportal.db.postgres import Database, get_database
from jobportal.services.career_scoring import analyze_resume, score_interview, confidence_pulse
from jobportal.utils.file_upload import extract_text_from_file
from jobportal.schemas.schemas import ResumeAnalysisRequest, MockInterviewRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/career", tags=["Career Tools"])


@router.post("/analyze-resume")
async def analyze_resume_text(
    request: ResumeAnalysisRequest,
    user: dict = Depends(get_current_user),
):
    """Keyword and metric scoring of resume text. Nothing is stored."""
    return {"success": True, "data": analyze_resume(request.resume_text)}


@router.post("/analyze-resume/upload")
async def analyze_resume_file(
    file: UploadFile = File(..., description="Resume file (PDF, DOCX, or TXT)"),
    user: dict = Depends(get_current_user),
):
    """Extract text from an uploaded resume and score it."""
    resume_text, filename = await extract_text_from_file(file)
    result = analyze_resume(resume_text)
    logger.info("Scored uploaded resume %s for user %s: %s", filename, user["user_id"], result["score"])
    return {"success": True, "data": {**result, "filename": filename}}


@router.post("/mock-interview")
async def mock_interview(
    request: MockInterviewRequest,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """
    Score a practice answer with the STAR heuristic and record it.

    Invalid input is rejected before anything is written.
    """
    result = score_interview(request.prompt, request.response)

    with db.session() as s:
        s.execute(
            text("""
                INSERT INTO interview_practice (user_id, prompt, response, duration, score)
                VALUES (:uid, :prompt, :response, :duration, :score)
            """),
            {
                "uid": user["user_id"], "prompt": request.prompt, "response": request.response,
                "duration": request.duration, "score": result["score"]
            }
        )

    return {"success": True, "data": result}


@router.get("/interview-history")
async def interview_history(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    history = db.fetch_all(
        """
        SELECT id, prompt, score, duration, created_at
        FROM interview_practice
        WHERE user_id = :uid
        ORDER BY created_at DESC, id DESC
        LIMIT 10
        """,
        {"uid": user["user_id"]}
    )
    return {"success": True, "data": history}


@router.get("/stats")
async def career_stats(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    """Confidence pulse plus the counts it is computed from."""
    practice = db.fetch_one(
        """
        SELECT COUNT(*) AS total, AVG(score) AS avg_score
        FROM interview_practice
        WHERE user_id = :uid
        """,
        {"uid": user["user_id"]}
    )
    applications = db.fetch_one(
        """
        SELECT COUNT(*) AS total,
               SUM(CASE WHEN status = 'accepted' THEN 1 ELSE 0 END) AS accepted,
               SUM(CASE WHEN status = 'shortlisted' THEN 1 ELSE 0 END) AS shortlisted
        FROM applications
        WHERE user_id = :uid
        """,
        {"uid": user["user_id"]}
    )

    # AVG/SUM come back as Decimal on Postgres and NULL on empty sets
    interview_count = int(practice["total"] or 0)
    avg_score = float(practice["avg_score"] or 0)
    total_applications = int(applications["total"] or 0)

    return {
        "success": True,
        "data": {
            "confidencePulse": confidence_pulse(interview_count, avg_score, total_applications),
            "interviewPracticeCount": interview_count,
            "averageInterviewScore": int(math.floor(avg_score + 0.5)),
            "totalApplications": total_applications,
            "acceptedApplications": int(applications["accepted"] or 0),
            "shortlistedApplications": int(applications["shortlisted"] or 0)
        }
    }
