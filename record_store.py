"""
=============================================================================
Record Store for Student Records
=============================================================================

Persistence operations the application layer needs, over an injected
SQLAlchemy session. The validator and metrics modules never import this;
callers validate first and hand plain record dictionaries to the store.

Operations:
- Academic databases: create, get, list, delete (with their students)
- Student records: select by scope, existing seat numbers, insert,
  update, delete, self-service lookup, seat number generation

Seat numbers are unique across the whole store, not per academic
database.

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import re
import random
import logging
from typing import Dict, List, Optional, Any, Iterable, Set
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from models import AcademicDatabase, StudentRecord, BRANCHES, YEAR_CLASSIFICATIONS


BATCH_PATTERN = re.compile(r'^20[2-9][0-9] - 20[2-9][0-9]$')

IDENTITY_COLUMNS = ['seat_number', 'roll_no', 'student_name', 'gender', 'result', 'total_cgpa']


class RecordStoreError(Exception):
    """Raised when the store rejects an operation"""


def validate_batch(batch: str) -> List[str]:
    """
    Validate a batch string such as "2023 - 2027".

    Returns:
        List of error messages (empty when valid)
    """
    if not BATCH_PATTERN.match(batch or ''):
        return ["Batch must be in format 'YYYY - YYYY' with years after 2020"]

    start_year, end_year = (int(year) for year in batch.split(' - '))
    if end_year - start_year != 4:
        return ["Batch years must be exactly 4 years apart (e.g., 2023 - 2027)"]
    return []


def record_to_dict(student: StudentRecord) -> Dict[str, Any]:
    """Flatten a stored StudentRecord into the record dictionary shape"""
    record = {
        'id': student.id,
        'academic_database_id': student.academic_database_id,
        'seat_number': student.seat_number,
        'roll_no': student.roll_no,
        'student_name': student.student_name,
        'gender': student.gender,
        'total_cgpa': student.total_cgpa or 0.0,
    }
    if student.result is not None:
        record['result'] = student.result
    record.update(student.marks or {})
    return record


def _split_record(record: Dict[str, Any]):
    columns = {k: record.get(k) for k in IDENTITY_COLUMNS if k in record}
    marks = {
        k: v for k, v in record.items()
        if k not in IDENTITY_COLUMNS and k not in ('id', 'academic_database_id')
    }
    return columns, marks


class RecordStore:
    """
    Store operations bound to one SQLAlchemy session.
    """

    def __init__(self, db_session: Session):
        self.db_session = db_session
        self.logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Academic databases
    # ------------------------------------------------------------------

    def create_academic_database(self, database_name: str, branch: str, batch: str,
                                 semester: int, academic_year: str,
                                 year_classification: str = '1st Year',
                                 created_by: Optional[str] = None) -> AcademicDatabase:
        """
        Create an academic database after validating its scope fields.

        Raises:
            RecordStoreError: if a scope field is invalid
        """
        errors = []
        if not (database_name or '').strip():
            errors.append("Database name is required")
        if branch not in BRANCHES:
            errors.append(f"Unknown branch '{branch}'")
        if year_classification not in YEAR_CLASSIFICATIONS:
            errors.append(f"Unknown year classification '{year_classification}'")
        if not isinstance(semester, int) or not 1 <= semester <= 8:
            errors.append("Semester must be between 1-8")
        errors.extend(validate_batch(batch))
        if errors:
            raise RecordStoreError('; '.join(errors))

        database = AcademicDatabase(
            database_name=database_name.strip(),
            branch=branch,
            batch=batch,
            semester=semester,
            academic_year=academic_year,
            year_classification=year_classification,
            created_by=created_by,
        )
        self.db_session.add(database)
        self.db_session.commit()
        self.logger.info(f"Created academic database: ID={database.id}, {database.database_name}")
        return database

    def get_academic_database(self, database_id: int) -> Optional[AcademicDatabase]:
        return self.db_session.get(AcademicDatabase, database_id)

    def list_academic_databases(self, created_by: Optional[str] = None) -> List[AcademicDatabase]:
        query = self.db_session.query(AcademicDatabase)
        if created_by is not None:
            query = query.filter_by(created_by=created_by)
        return query.order_by(AcademicDatabase.created_at.desc(), AcademicDatabase.id.desc()).all()

    def delete_academic_database(self, database_id: int) -> int:
        """
        Delete an academic database and every student record in it.

        Returns:
            Number of student records deleted

        Raises:
            RecordStoreError: if the database does not exist
        """
        database = self.get_academic_database(database_id)
        if database is None:
            raise RecordStoreError(f"Academic database {database_id} not found")

        # students go with the database (cascade on the relationship)
        deleted = len(database.students)
        self.db_session.delete(database)
        self.db_session.commit()

        self.logger.info(f"Deleted academic database {database_id} ({deleted} students)")
        return deleted

    # ------------------------------------------------------------------
    # Student records
    # ------------------------------------------------------------------

    def select_records_by_scope(self, database_id: int) -> List[Dict[str, Any]]:
        """Records of one academic database, by roll number, missing roll numbers last"""
        students = self.db_session.query(StudentRecord).filter_by(
            academic_database_id=database_id
        ).order_by(StudentRecord.id).all()
        # roll numbers are digit strings ("01", "7"), compare them as numbers
        students.sort(key=lambda s: (s.roll_no is None, int(s.roll_no) if s.roll_no else 0))
        return [record_to_dict(s) for s in students]

    def select_existing_seat_numbers(self, seat_numbers: Iterable[int]) -> Set[int]:
        """Seat numbers from the given set already present anywhere in the store"""
        wanted = list(set(seat_numbers))
        if not wanted:
            return set()
        rows = self.db_session.query(StudentRecord.seat_number).filter(
            StudentRecord.seat_number.in_(wanted)
        ).all()
        return {row[0] for row in rows}

    def insert_records(self, database_id: int, records: List[Dict[str, Any]]) -> int:
        """
        Insert validated records into an academic database in one transaction.

        Returns:
            Number of records inserted

        Raises:
            RecordStoreError: if the database is missing or a seat number clashes
        """
        if self.get_academic_database(database_id) is None:
            raise RecordStoreError(f"Academic database {database_id} not found")

        for record in records:
            columns, marks = _split_record(record)
            self.db_session.add(StudentRecord(
                academic_database_id=database_id,
                marks=marks,
                **columns
            ))

        try:
            self.db_session.commit()
        except IntegrityError as e:
            self.db_session.rollback()
            self.logger.warning(f"Insert rejected by store: {e.orig}")
            raise RecordStoreError("Duplicate seat number in store") from e

        self.logger.debug(f"Inserted {len(records)} records into database {database_id}")
        return len(records)

    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        student = self.db_session.get(StudentRecord, record_id)
        return record_to_dict(student) if student else None

    def update_record(self, record_id: int, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace a stored record's fields with a validated record.

        Raises:
            RecordStoreError: if the record is missing or the seat number clashes
        """
        student = self.db_session.get(StudentRecord, record_id)
        if student is None:
            raise RecordStoreError(f"Student record {record_id} not found")

        columns, marks = _split_record(record)
        for key, value in columns.items():
            setattr(student, key, value)
        student.marks = marks

        try:
            self.db_session.commit()
        except IntegrityError as e:
            self.db_session.rollback()
            raise RecordStoreError(f"Seat number {record.get('seat_number')} already exists") from e

        return record_to_dict(student)

    def delete_record(self, record_id: int) -> None:
        student = self.db_session.get(StudentRecord, record_id)
        if student is None:
            raise RecordStoreError(f"Student record {record_id} not found")
        self.db_session.delete(student)
        self.db_session.commit()

    def find_student_record(self, branch: str, academic_year: str,
                            seat_number: int) -> Optional[Dict[str, Any]]:
        """
        Student self-service lookup by branch, academic year and seat number.

        Returns:
            Record dictionary or None when no scope or student matches
        """
        # any scope of the branch and year, e.g. both semesters of one year
        student = self.db_session.query(StudentRecord).join(
            AcademicDatabase, StudentRecord.academic_database_id == AcademicDatabase.id
        ).filter(
            AcademicDatabase.branch == branch,
            AcademicDatabase.academic_year == academic_year,
            StudentRecord.seat_number == seat_number,
        ).first()
        return record_to_dict(student) if student else None

    def generate_seat_number(self, max_attempts: int = 10) -> Optional[int]:
        """Random unused 6-digit seat number, or None after max_attempts clashes"""
        for _ in range(max_attempts):
            candidate = random.randint(100000, 999999)
            if not self.select_existing_seat_numbers([candidate]):
                return candidate
        return None
