"""
Configuration settings for the Student Records system
"""
import os

from mark_schemes import MarkScheme, get_scheme


def _env_number(name: str, default, cast=float):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return cast(value)
    except ValueError:
        return default


# Storage
DATABASE_PATH = os.getenv('STUDENT_RECORDS_DB', 'student_records.db')
LOG_DIR = os.getenv('LOG_DIR', 'logs')

# Marking configuration (one scheme per deployment)
MARK_SCHEME = os.getenv('MARK_SCHEME', 'C')
PASS_THRESHOLD = _env_number('PASS_THRESHOLD', 40)  # overall percentage required to pass
TOPPER_LIMIT = _env_number('TOPPER_LIMIT', 3, int)


def get_active_scheme(name: str = None) -> MarkScheme:
    """Scheme named on the command line, else the MARK_SCHEME setting"""
    return get_scheme(name or MARK_SCHEME)
