"""
Enrollment and semester API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID
from typing import List, Optional
import logging

from app.database import get_db
from app.schemas.enrollment import (
    CurrentSemesterResponse,
    EnrollRequest,
    EnrollResponse,
    EnrollmentResponse,
    GradeAssignment,
)
from app.services.enrollment_service import enrollment_service, serialize_enrollment
from app.services.semester_service import semester_service

router = APIRouter(prefix="/api", tags=["enrollments"])
logger = logging.getLogger(__name__)


@router.get("/students/{student_id}/current-semester", response_model=CurrentSemesterResponse)
async def get_current_semester(
    student_id: UUID,
    db: Session = Depends(get_db)
):
    """
    Current semester of a student
    
    Stored semester / year of study wins; otherwise derived from the batch
    year: (current_year - batch_year) * 2 + (2 if month >= 6 else 1),
    capped at the program's semester count.
    """
    return semester_service.get_current_semester(db, student_id)


@router.post("/enrollments", response_model=EnrollResponse, status_code=201)
async def enroll_subjects(
    request: EnrollRequest,
    db: Session = Depends(get_db)
):
    """Enroll a student in one or more subjects of a semester"""
    return enrollment_service.enroll_subjects(
        db,
        student_id=request.student_id,
        semester_number=request.semester_number,
        academic_year_id=request.academic_year_id,
        subject_ids=request.subject_ids,
    )


@router.get("/students/{student_id}/enrollments", response_model=List[EnrollmentResponse])
async def list_enrollments(
    student_id: UUID,
    semester_number: Optional[int] = None,
    db: Session = Depends(get_db)
):
    enrollments = enrollment_service.get_enrollments(db, student_id, semester_number)
    return [serialize_enrollment(e) for e in enrollments]


@router.put("/enrollments/{enrollment_id}/grade", response_model=EnrollmentResponse)
async def assign_grade(
    enrollment_id: UUID,
    request: GradeAssignment,
    db: Session = Depends(get_db)
):
    enrollment = enrollment_service.assign_grade(
        db,
        enrollment_id,
        grade=request.grade,
        marks_obtained=request.marks_obtained,
        total_marks=request.total_marks,
    )
    return serialize_enrollment(enrollment)


@router.post("/enrollments/{enrollment_id}/drop", response_model=EnrollmentResponse)
async def drop_enrollment(
    enrollment_id: UUID,
    db: Session = Depends(get_db)
):
    """Drop an enrollment; completed enrollments cannot be dropped"""
    return serialize_enrollment(enrollment_service.drop(db, enrollment_id))
