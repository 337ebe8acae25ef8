import pytest

from init_db import init_database
from mark_schemes import get_scheme
from record_store import RecordStore


SCENARIO_ROW = '123456,01,John Doe,Male,18,75,19,80,17,72,20,85,18,78,8.75'


@pytest.fixture
def scenario_row():
    return SCENARIO_ROW


@pytest.fixture
def scheme_a():
    return get_scheme('A')


@pytest.fixture
def scheme_b():
    return get_scheme('B')


@pytest.fixture
def scheme_c():
    return get_scheme('C')


@pytest.fixture
def header_c(scheme_c):
    return ','.join(scheme_c.expected_headers)


@pytest.fixture
def csv_row():
    """Build a CSV row from a scheme's first sample row with cells replaced by record key"""
    def build(scheme, **overrides):
        values = scheme.sample_rows[0].split(',')
        for key, value in overrides.items():
            values[scheme.column_keys.index(key)] = str(value)
        return ','.join(values)
    return build


@pytest.fixture
def make_record(scheme_c):
    """Variant C record with the same unit test / sem marks in every subject"""
    def build(seat_number, name='Student', gender=None, unit_test=10, sem_marks=50,
              cgpa=7.0, roll_no=None):
        record = {
            'seat_number': seat_number,
            'roll_no': roll_no,
            'student_name': name,
            'gender': gender,
            'total_cgpa': cgpa,
        }
        for subject in scheme_c.subjects:
            record[f'{subject.key}_unit_test'] = unit_test
            record[f'{subject.key}_sem_marks'] = sem_marks
        return record
    return build


@pytest.fixture
def session():
    db_session = init_database(':memory:')
    yield db_session
    db_session.close()


@pytest.fixture
def store(session):
    return RecordStore(session)


@pytest.fixture
def academic_database(store):
    return store.create_academic_database(
        database_name='SE Computer 2025',
        branch='Computer Eng.',
        batch='2023 - 2027',
        semester=4,
        academic_year='2024-2025',
        year_classification='2nd Year',
        created_by='teacher@example.com',
    )
