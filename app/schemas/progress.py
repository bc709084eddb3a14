"""
Pydantic schemas for content progress
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from uuid import UUID
from datetime import datetime


class ProgressUpdate(BaseModel):
    """Schema for updating progress on a content block"""
    user_id: UUID
    is_completed: bool
    time_spent: int = Field(..., ge=0, description="Time spent in seconds")
    completion_data: Optional[Dict[str, Any]] = None
    enrollment_id: Optional[UUID] = None


class ProgressRecord(BaseModel):
    id: UUID
    content_block_id: UUID
    user_id: UUID
    is_completed: bool
    time_spent: int
    completion_data: Optional[Dict[str, Any]] = None
    completed_at: Optional[datetime] = None


class SessionCompletion(BaseModel):
    completion_percentage: int
    completed_blocks: int
    total_required_blocks: int


class ProgressUpdateResponse(BaseModel):
    """Response for progress update"""
    progress: ProgressRecord
    session_progress: SessionCompletion
    course_percentage: Optional[int] = None
    enrollment_updated: bool


class BlockProgress(BaseModel):
    content_block_id: UUID
    session_id: UUID
    content_block_title: Optional[str] = None
    content_block_type: str
    is_required: bool
    is_completed: bool
    time_spent: int
    completion_data: Optional[Dict[str, Any]] = None
    completed_at: Optional[datetime] = None


class ProgressStatistics(BaseModel):
    total_blocks: int
    completed_blocks: int
    required_blocks: int
    completed_required_blocks: int
    completion_percentage: int
    total_time_spent: int


class SessionProgressResponse(BaseModel):
    """Per-session progress"""
    session_id: UUID
    user_id: UUID
    progress: List[BlockProgress]
    statistics: ProgressStatistics


class SessionSummary(ProgressStatistics):
    session_id: UUID
    session_title: Optional[str] = None


class CourseStatistics(ProgressStatistics):
    total_sessions: int


class CourseProgressResponse(BaseModel):
    """Bulk progress across every session of a subject"""
    subject_id: UUID
    user_id: UUID
    progress: List[BlockProgress]
    session_progress: List[SessionSummary]
    overall_statistics: CourseStatistics
