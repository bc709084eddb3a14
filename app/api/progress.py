"""
Content progress API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.database import get_db
from app.schemas.progress import (
    ProgressUpdate,
    ProgressUpdateResponse,
    SessionProgressResponse,
    CourseProgressResponse,
)
from app.services.progress_service import progress_service

router = APIRouter(prefix="/api/progress", tags=["progress"])
logger = logging.getLogger(__name__)


@router.put("/blocks/{content_block_id}", response_model=ProgressUpdateResponse)
async def update_progress(
    content_block_id: UUID,
    progress: ProgressUpdate,
    db: Session = Depends(get_db)
):
    """
    Record progress on a content block
    
    - Upserts the (user, block) progress row
    - Returns the session completion (required blocks only)
    - With enrollment_id, syncs the course percentage into the enrollment,
      completing it at 100%
    """
    return progress_service.update_progress(
        db,
        content_block_id=content_block_id,
        user_id=progress.user_id,
        is_completed=progress.is_completed,
        time_spent=progress.time_spent,
        completion_data=progress.completion_data,
        enrollment_id=progress.enrollment_id,
    )


@router.get("/sessions/{session_id}", response_model=SessionProgressResponse)
async def get_session_progress(
    session_id: UUID,
    user_id: UUID,
    db: Session = Depends(get_db)
):
    """Per-block progress and completion statistics for one session"""
    return progress_service.get_session_progress(db, session_id, user_id)


@router.get("/subjects/{subject_id}", response_model=CourseProgressResponse)
async def get_course_progress(
    subject_id: UUID,
    user_id: UUID,
    db: Session = Depends(get_db)
):
    """
    Bulk progress for every session of a subject
    
    Requires an active or completed enrollment in the subject.
    """
    logger.info(f"Fetching course progress for user {user_id} in subject {subject_id}")
    
    return progress_service.get_course_progress(db, subject_id, user_id)
