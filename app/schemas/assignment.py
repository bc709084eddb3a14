"""
Pydantic schemas for assignment submissions
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from uuid import UUID
from datetime import datetime


class SubmissionFile(BaseModel):
    file_name: str
    file_url: str
    file_size: int = Field(..., ge=0)


class AssignmentSubmit(BaseModel):
    """Schema for submitting an assignment"""
    user_id: UUID
    submission_text: Optional[str] = None
    submission_files: Optional[List[SubmissionFile]] = None


class RubricScore(BaseModel):
    criteria: str
    score: float
    max_score: float
    comments: Optional[str] = None


class AssignmentGrade(BaseModel):
    """Schema for grading a submission"""
    graded_by: UUID
    score: float
    max_score: Optional[float] = None
    feedback: Optional[str] = None
    rubric_scores: Optional[List[RubricScore]] = None


class SubmissionResponse(BaseModel):
    id: UUID
    content_block_id: UUID
    user_id: UUID
    submission_text: Optional[str] = None
    submission_files: Optional[List[Dict[str, Any]]] = None
    submitted_at: Optional[datetime] = None
    status: str
    score: Optional[float] = None
    max_score: Optional[float] = None
    percentage: Optional[float] = None
    is_passed: bool
    feedback: Optional[str] = None
    graded_by: Optional[UUID] = None
    graded_at: Optional[datetime] = None
