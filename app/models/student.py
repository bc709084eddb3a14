"""
Student records mirrored from the institutional academic system (ACT)
"""
from sqlalchemy import Column, String, Integer, Boolean, TIMESTAMP, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Program(Base):
    """
    Academic program (course) a student is admitted to
    """
    __tablename__ = "programs"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    program_type = Column(String(30))  # Diploma, UG, PG, Certificate
    duration_years = Column(Integer)
    
    def __repr__(self):
        return f"<Program(id={self.id}, name={self.name}, type={self.program_type})>"


class Department(Base):
    __tablename__ = "departments"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    
    def __repr__(self):
        return f"<Department(id={self.id}, name={self.name})>"


class AcademicYear(Base):
    __tablename__ = "academic_years"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    year_name = Column(String(20), nullable=False)  # "2024-2025"
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    
    def __repr__(self):
        return f"<AcademicYear(id={self.id}, year_name={self.year_name})>"


class Student(Base):
    """
    Students table - identity plus the fields used to derive the current semester
    
    semester / year_of_study are free text as stored by ACT ("3rd", "2nd").
    """
    __tablename__ = "students"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True)
    status = Column(String(20), default="active")
    program_id = Column(Uuid, ForeignKey("programs.id"))
    department_id = Column(Uuid, ForeignKey("departments.id"))
    academic_year_id = Column(Uuid, ForeignKey("academic_years.id"))
    batch_year = Column(Integer)
    year_of_study = Column(String(20))
    semester = Column(String(20))
    enrollment_date = Column(TIMESTAMP, server_default=func.now())
    
    program = relationship("Program")
    department = relationship("Department")
    academic_year = relationship("AcademicYear")
    
    def __repr__(self):
        return f"<Student(id={self.id}, name={self.name})>"
