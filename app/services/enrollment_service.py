"""
Subject enrollment service
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.exceptions import BusinessRuleViolation, LMSError, NotFoundError, OperationError, ValidationError
from app.models import Enrollment, Student, Subject
from app.models.enrollment import MAX_SEMESTER, MIN_SEMESTER

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Batch enrollment plus the explicit enrollment transitions (grade, drop)"""
    
    def enroll_subjects(
        self,
        db: Session,
        student_id: UUID,
        semester_number: int,
        academic_year_id: UUID,
        subject_ids: List[UUID]
    ) -> Dict[str, Any]:
        """
        Enroll a student in one or more subjects of a semester
        
        All enrollments are created in one commit or not at all.
        """
        if not student_id:
            raise ValidationError("Student ID is required")
        if not semester_number or not MIN_SEMESTER <= semester_number <= MAX_SEMESTER:
            raise ValidationError(f"Semester number must be between {MIN_SEMESTER} and {MAX_SEMESTER}")
        if not academic_year_id:
            raise ValidationError("Academic year ID is required")
        if not subject_ids:
            raise ValidationError("At least one subject must be selected for enrollment")
        
        subject_ids = list(dict.fromkeys(subject_ids))
        
        try:
            student = db.query(Student).filter(Student.id == student_id).first()
            if not student:
                raise NotFoundError("Student")
            if student.status != "active":
                raise BusinessRuleViolation("Student account is not active")
            
            subjects = db.query(Subject).filter(Subject.id.in_(subject_ids)).all()
            if len(subjects) != len(subject_ids):
                raise ValidationError("One or more subject IDs are invalid")
            
            wrong_semester = [s for s in subjects if s.semester_number != semester_number]
            if wrong_semester:
                raise ValidationError(f"Some subjects do not belong to semester {semester_number}")
            
            existing = self.get_enrollments(db, student_id, semester_number)
            enrolled_ids = {e.subject_id for e in existing}
            duplicates = [s.name for s in subjects if s.id in enrolled_ids]
            if duplicates:
                raise BusinessRuleViolation(f"You are already enrolled in: {', '.join(duplicates)}")
            
            enrollments = [
                Enrollment.create(
                    student_id=student_id,
                    subject_id=subject.id,
                    semester_number=semester_number,
                    academic_year_id=academic_year_id,
                )
                for subject in subjects
            ]
            db.add_all(enrollments)
            db.commit()
            
            logger.info(f"Student {student_id} enrolled in {len(enrollments)} subject(s) for semester {semester_number}")
            
            subjects_by_id = {s.id: s for s in subjects}
            return {
                "message": f"Successfully enrolled in {len(enrollments)} subject(s)",
                "semester_number": semester_number,
                "total_enrolled": len(enrollments),
                "enrolled_subjects": [
                    {
                        "enrollment_id": str(e.id),
                        "subject_id": str(e.subject_id),
                        "subject_code": subjects_by_id[e.subject_id].code,
                        "subject_name": subjects_by_id[e.subject_id].name,
                        "credits": subjects_by_id[e.subject_id].credits,
                        "enrollment_date": e.enrollment_date,
                    }
                    for e in enrollments
                ],
            }
        except LMSError:
            db.rollback()
            raise
        except Exception as e:
            logger.error(f"Failed to enroll subjects: {str(e)}", exc_info=True)
            db.rollback()
            raise OperationError("enroll in subjects")
    
    def get_enrollments(
        self,
        db: Session,
        student_id: UUID,
        semester_number: Optional[int] = None
    ) -> List[Enrollment]:
        query = db.query(Enrollment).filter(Enrollment.student_id == student_id)
        if semester_number is not None:
            query = query.filter(Enrollment.semester_number == semester_number)
        return query.order_by(Enrollment.created_at).all()
    
    def get_enrollment(self, db: Session, enrollment_id: UUID) -> Enrollment:
        enrollment = db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()
        if not enrollment:
            raise NotFoundError("Enrollment")
        return enrollment
    
    def assign_grade(
        self,
        db: Session,
        enrollment_id: UUID,
        grade: str,
        marks_obtained: Optional[float] = None,
        total_marks: Optional[float] = None
    ) -> Enrollment:
        enrollment = self.get_enrollment(db, enrollment_id)
        enrollment.assign_grade(grade, marks_obtained, total_marks)
        db.commit()
        db.refresh(enrollment)
        logger.info(f"Grade {grade} assigned to enrollment {enrollment_id}")
        return enrollment
    
    def drop(self, db: Session, enrollment_id: UUID) -> Enrollment:
        enrollment = self.get_enrollment(db, enrollment_id)
        enrollment.drop()
        db.commit()
        db.refresh(enrollment)
        logger.info(f"Enrollment {enrollment_id} dropped")
        return enrollment


def serialize_enrollment(enrollment: Enrollment) -> Dict[str, Any]:
    return {
        "id": str(enrollment.id),
        "student_id": str(enrollment.student_id),
        "subject_id": str(enrollment.subject_id),
        "semester_number": enrollment.semester_number,
        "academic_year_id": str(enrollment.academic_year_id),
        "enrollment_date": enrollment.enrollment_date,
        "status": enrollment.status,
        "progress_percentage": enrollment.progress_percentage,
        "completed_at": enrollment.completed_at,
        "grade": enrollment.grade,
        "marks_obtained": float(enrollment.marks_obtained) if enrollment.marks_obtained is not None else None,
        "total_marks": float(enrollment.total_marks) if enrollment.total_marks is not None else None,
    }


# Global instance
enrollment_service = EnrollmentService()
