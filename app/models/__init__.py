"""
Database models package
"""
from app.models.student import Program, Department, AcademicYear, Student
from app.models.content import Subject, Syllabus, LessonPlan, LearningSession, ContentBlock, QuizQuestion
from app.models.enrollment import Enrollment
from app.models.content_progress import ContentProgress
from app.models.quiz_attempt import QuizAttempt
from app.models.assignment_submission import AssignmentSubmission

__all__ = [
    "Program", "Department", "AcademicYear", "Student",
    "Subject", "Syllabus", "LessonPlan", "LearningSession", "ContentBlock", "QuizQuestion",
    "Enrollment", "ContentProgress", "QuizAttempt", "AssignmentSubmission",
]
