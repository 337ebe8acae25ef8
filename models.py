"""
=============================================================================
Database Models for Student Records
=============================================================================

SQLAlchemy models for academic databases and the student mark records
stored in them.

Tables:
- AcademicDatabase: Teacher-created scope (branch, batch, semester, year)
- StudentRecord: One student's marks within a scope

Mark fields depend on the deployment's mark scheme, so they live in the
`marks` JSON column keyed by "<subject>_<field>". Identity fields are
real columns.

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, JSON
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime

Base = declarative_base()


BRANCHES = [
    'Computer Eng.',
    'Electronics and Telecom',
    'Information Technology',
    'Electronics and Computer Science',
    'Electrical',
]

YEAR_CLASSIFICATIONS = ['1st Year', '2nd Year', '3rd Year', '4th Year']


class AcademicDatabase(Base):
    """Scope that groups student records"""
    __tablename__ = 'academic_databases'

    id = Column(Integer, primary_key=True, autoincrement=True)
    database_name = Column(String(200), nullable=False)
    branch = Column(String(50), nullable=False)  # one of BRANCHES
    academic_year = Column(String(20))  # "2024-2025"
    year_classification = Column(String(20))  # "1st Year", ...
    semester = Column(Integer)  # 1..8
    batch = Column(String(20))  # "2023 - 2027"
    created_by = Column(String(100))
    created_at = Column(DateTime, default=datetime.now)

    # Relationships
    students = relationship('StudentRecord', back_populates='academic_database',
                            cascade='all, delete-orphan')

    def __repr__(self):
        return f"<AcademicDatabase(id={self.id}, name={self.database_name}, branch={self.branch})>"


class StudentRecord(Base):
    """Student marks within an academic database"""
    __tablename__ = 'students'

    id = Column(Integer, primary_key=True, autoincrement=True)
    academic_database_id = Column(Integer, ForeignKey('academic_databases.id'), nullable=False)
    seat_number = Column(Integer, nullable=False, unique=True)  # unique across all scopes
    roll_no = Column(String(2))
    student_name = Column(String(200), nullable=False)
    gender = Column(String(10))  # Male, Female, Other or NULL
    marks = Column(JSON, nullable=False, default=dict)
    result = Column(String(1))  # P/F, scheme A only
    total_cgpa = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    academic_database = relationship('AcademicDatabase', back_populates='students')

    def __repr__(self):
        return f"<StudentRecord(seat={self.seat_number}, name={self.student_name}, db={self.academic_database_id})>"
