"""
Enrollment model - one student in one subject for one academic term

Owns its own completion state machine:

    active --update_progress(100)--> completed
    active --drop()--> dropped
    any    --fail()--> failed

A completed enrollment keeps progress pinned at 100 and cannot be dropped.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Numeric, TIMESTAMP, ForeignKey, CheckConstraint, Index, Uuid, func
from app.database import Base
from app.exceptions import BusinessRuleViolation, ValidationError
from app.utils.rounding import round_half_up
import uuid

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_DROPPED = "dropped"
STATUS_FAILED = "failed"

MIN_SEMESTER = 1
MAX_SEMESTER = 10


class Enrollment(Base):
    """
    Enrollments table - student x subject x academic year
    """
    __tablename__ = "enrollments"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id"), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False)
    semester_number = Column(Integer, nullable=False)
    academic_year_id = Column(Uuid, ForeignKey("academic_years.id"), nullable=False)
    enrollment_date = Column(TIMESTAMP, default=datetime.utcnow)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)
    progress_percentage = Column(Integer, nullable=False, default=0)
    completed_at = Column(TIMESTAMP)
    grade = Column(String(5))
    marks_obtained = Column(Numeric(6, 2))
    total_marks = Column(Numeric(6, 2))
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
    
    __table_args__ = (
        CheckConstraint("progress_percentage >= 0 AND progress_percentage <= 100"),
        CheckConstraint("semester_number >= 1 AND semester_number <= 10"),
        Index("idx_enrollments_student_semester", "student_id", "semester_number"),
    )
    
    @classmethod
    def create(
        cls,
        student_id,
        subject_id,
        semester_number: int,
        academic_year_id,
        progress_percentage: int = 0
    ) -> "Enrollment":
        """Build a new active enrollment after validating identity fields"""
        if not student_id:
            raise ValidationError("Student ID is required")
        if not subject_id:
            raise ValidationError("Subject ID is required")
        if not semester_number or not MIN_SEMESTER <= semester_number <= MAX_SEMESTER:
            raise ValidationError(
                f"Semester number must be between {MIN_SEMESTER} and {MAX_SEMESTER}"
            )
        if not academic_year_id:
            raise ValidationError("Academic year ID is required")
        
        return cls(
            id=uuid.uuid4(),
            student_id=student_id,
            subject_id=subject_id,
            semester_number=semester_number,
            academic_year_id=academic_year_id,
            enrollment_date=datetime.utcnow(),
            status=STATUS_ACTIVE,
            progress_percentage=_clamp(progress_percentage),
        )
    
    def update_progress(self, percentage: int) -> None:
        """
        Record a new completion percentage
        
        Values are clamped to [0, 100]. Reaching 100 while active completes
        the enrollment; once completed the percentage stays at 100.
        """
        if self.status == STATUS_COMPLETED:
            self.progress_percentage = 100
            return
        
        self.progress_percentage = _clamp(percentage)
        
        if self.progress_percentage == 100 and self.status == STATUS_ACTIVE:
            self.complete()
    
    def complete(self) -> None:
        if self.status == STATUS_COMPLETED:
            raise BusinessRuleViolation("Enrollment is already completed")
        self.status = STATUS_COMPLETED
        self.completed_at = datetime.utcnow()
        self.progress_percentage = 100
    
    def drop(self) -> None:
        if self.status == STATUS_COMPLETED:
            raise BusinessRuleViolation("Cannot drop a completed enrollment")
        self.status = STATUS_DROPPED
    
    def fail(self) -> None:
        self.status = STATUS_FAILED
    
    def assign_grade(self, grade: str, marks_obtained=None, total_marks=None) -> None:
        """Grades are independent of progress and never change status"""
        if not grade:
            raise ValidationError("Grade is required")
        if marks_obtained is not None and total_marks is not None and marks_obtained > total_marks:
            raise BusinessRuleViolation("Marks obtained cannot exceed total marks")
        self.grade = grade
        self.marks_obtained = marks_obtained
        self.total_marks = total_marks
    
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
    
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED
    
    def __repr__(self):
        return (
            f"<Enrollment(id={self.id}, student_id={self.student_id}, "
            f"subject_id={self.subject_id}, status={self.status}, "
            f"progress={self.progress_percentage})>"
        )


def _clamp(percentage) -> int:
    return max(0, min(100, round_half_up(percentage or 0)))
