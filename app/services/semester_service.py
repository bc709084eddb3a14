"""
Semester derivation from batch year and calendar date

Each calendar year holds two terms:
- term 1: January 1 - May 31
- term 2: June 1 - December 31

A student whose batch started in year Y is in semester
(current_year - Y) * 2 + term on any given date.
"""
import logging
import re
from datetime import date
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.exceptions import LMSError, NotFoundError, OperationError, ValidationError
from app.models import AcademicYear, Student

logger = logging.getLogger(__name__)

SECOND_TERM_START_MONTH = 6

MAX_SEMESTERS_BY_PROGRAM = {
    "Diploma": 6,
    "UG": 8,
    "PG": 4,
    "Certificate": 2,
}
DEFAULT_MAX_SEMESTERS = 8


def calculate_current_semester(batch_year: int, today: Optional[date] = None) -> int:
    """1-based semester number for a batch on the given date"""
    today = today or date.today()
    term = 2 if today.month >= SECOND_TERM_START_MONTH else 1
    return (today.year - batch_year) * 2 + term


def get_semester_dates(batch_year: int, semester_number: int) -> Tuple[date, date]:
    """Start and end date of a batch's semester (inverse of calculate_current_semester)"""
    year = batch_year + (semester_number - 1) // 2
    if semester_number % 2 == 1:
        return date(year, 1, 1), date(year, 5, 31)
    return date(year, 6, 1), date(year, 12, 31)


def max_semesters(program_type: Optional[str]) -> int:
    return MAX_SEMESTERS_BY_PROGRAM.get(program_type, DEFAULT_MAX_SEMESTERS)


def parse_ordinal(value: Optional[str]) -> Optional[int]:
    """
    Digits of a stored ordinal ("3rd" -> 3, "Semester 4" -> 4)
    
    None when nothing is stored; 1 when a stored value holds no usable
    number ("first", "0").
    """
    if not value:
        return None
    digits = re.sub(r"\D", "", str(value))
    if not digits or int(digits) == 0:
        return 1
    return int(digits)


class SemesterService:
    """Service resolving a student's current semester and its date range"""
    
    def resolve_semester(self, student: Student, today: Optional[date] = None) -> Tuple[int, int]:
        """
        Determine (semester, batch_year) for a student
        
        Precedence:
        1. stored semester string
        2. stored year of study N -> semester (N - 1) * 2 + 1
        3. batch year (explicit, else year of enrollment date) and today's date
        4. semester 1
        
        The result is capped at the program's maximum number of semesters.
        """
        today = today or date.today()
        batch_year = None
        
        stored_semester = parse_ordinal(student.semester)
        year_of_study = parse_ordinal(student.year_of_study)
        
        if stored_semester:
            semester = stored_semester
        elif year_of_study:
            semester = (year_of_study - 1) * 2 + 1
        else:
            batch_year = student.batch_year or (
                student.enrollment_date.year if student.enrollment_date else None
            )
            semester = calculate_current_semester(batch_year, today) if batch_year else 1
        
        semester = max(semester, 1)
        
        if batch_year is None:
            # Years already completed, one more before June
            batch_year = today.year - (semester - 1) // 2 - (1 if today.month < SECOND_TERM_START_MONTH else 0)
        
        program_type = student.program.program_type if student.program else None
        limit = max_semesters(program_type)
        if semester > limit:
            logger.info(f"Capping semester {semester} at {limit} for program type {program_type}")
            semester = limit
        
        return semester, batch_year
    
    def get_current_semester(
        self,
        db: Session,
        student_id: UUID,
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Current semester summary for a student
        
        Raises:
            NotFoundError: student or active academic year missing
            ValidationError: student has no program or department
        """
        if not student_id:
            raise ValidationError("Student ID is required")
        
        try:
            student = db.query(Student).filter(Student.id == student_id).first()
            if not student:
                raise NotFoundError("Student")
            if not student.program_id:
                raise ValidationError("Student is not assigned to a program")
            if not student.department_id:
                raise ValidationError("Student is not assigned to a department")
            
            semester, batch_year = self.resolve_semester(student, today)
            start_date, end_date = get_semester_dates(batch_year, semester)
            
            academic_year = student.academic_year or (
                db.query(AcademicYear)
                .filter(AcademicYear.is_active.is_(True))
                .order_by(AcademicYear.created_at.desc())
                .first()
            )
            if not academic_year:
                raise NotFoundError("Active academic year")
            
            return {
                "student_id": str(student.id),
                "student_name": student.name,
                "program_type": student.program.program_type if student.program else None,
                "program_name": student.program.name if student.program else None,
                "department_name": student.department.name if student.department else None,
                "batch_year": batch_year,
                "current_semester": semester,
                "academic_year_id": str(academic_year.id),
                "academic_year_name": academic_year.year_name,
                "semester_start_date": start_date,
                "semester_end_date": end_date,
            }
        except LMSError:
            raise
        except Exception as e:
            logger.error(f"Failed to get current semester: {str(e)}", exc_info=True)
            raise OperationError("get current semester")


# Global instance
semester_service = SemesterService()
