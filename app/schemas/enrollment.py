"""
Pydantic schemas for enrollment and semester endpoints
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import date, datetime


class CurrentSemesterResponse(BaseModel):
    student_id: UUID
    student_name: str
    program_type: Optional[str] = None
    program_name: Optional[str] = None
    department_name: Optional[str] = None
    batch_year: int
    current_semester: int
    academic_year_id: UUID
    academic_year_name: str
    semester_start_date: date
    semester_end_date: date


class EnrollRequest(BaseModel):
    """Schema for enrolling in subjects"""
    student_id: UUID
    semester_number: int = Field(..., ge=1, le=10)
    academic_year_id: UUID
    subject_ids: List[UUID] = Field(..., min_length=1)


class EnrolledSubject(BaseModel):
    enrollment_id: UUID
    subject_id: UUID
    subject_code: str
    subject_name: str
    credits: Optional[int] = None
    enrollment_date: datetime


class EnrollResponse(BaseModel):
    message: str
    semester_number: int
    total_enrolled: int
    enrolled_subjects: List[EnrolledSubject]


class EnrollmentResponse(BaseModel):
    id: UUID
    student_id: UUID
    subject_id: UUID
    semester_number: int
    academic_year_id: UUID
    enrollment_date: Optional[datetime] = None
    status: str
    progress_percentage: int
    completed_at: Optional[datetime] = None
    grade: Optional[str] = None
    marks_obtained: Optional[float] = None
    total_marks: Optional[float] = None


class GradeAssignment(BaseModel):
    """Schema for assigning a final grade to an enrollment"""
    grade: str = Field(..., min_length=1, max_length=5)
    marks_obtained: Optional[float] = Field(None, ge=0)
    total_marks: Optional[float] = Field(None, gt=0)
