"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobportal.api.routes.auth_routes import router as auth_router
from jobportal.api.routes.user_routes import router as user_router
from jobportal.api.routes.job_routes import router as job_router
from jobportal.api.routes.application_routes import router as application_router
from jobportal.api.routes.chapter_routes import router as chapter_router
from jobportal.api.routes.career_routes import router as career_router
from jobportal.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(chapter_router)
api_router.include_router(career_router)
api_router.include_router(admin_router)
