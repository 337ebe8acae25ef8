"""
Student list search, filters and sorting for the management view.
"""

from typing import Dict, List, Any

from mark_schemes import MarkScheme
from metrics import is_pass, DEFAULT_PASS_THRESHOLD


SORT_KEYS = ['roll_no', 'name', 'cgpa', 'seat_number']


def _roll_number(record: Dict[str, Any]) -> int:
    roll_no = str(record.get('roll_no') or '')
    return int(roll_no) if roll_no.isdigit() else 999


def matches_search(record: Dict[str, Any], search: str) -> bool:
    """Case-insensitive match on name, seat number or roll number"""
    term = (search or '').strip().lower()
    if not term:
        return True
    return (
        term in str(record.get('student_name') or '').lower()
        or term in str(record.get('seat_number') or '')
        or term in str(record.get('roll_no') or '').lower()
    )


def filter_and_sort_students(records: List[Dict[str, Any]], scheme: MarkScheme,
                             search: str = '', gender: str = 'all',
                             result: str = 'all', sort_by: str = 'roll_no',
                             pass_threshold_percent: float = DEFAULT_PASS_THRESHOLD) -> List[Dict[str, Any]]:
    """
    Filter and sort student records.

    Args:
        records: Student records
        scheme: Active mark scheme
        search: Free-text search
        gender: 'all', 'male', 'female' or 'other'
        result: 'all', 'pass' or 'fail' (uses metrics.is_pass)
        sort_by: 'roll_no', 'name', 'cgpa' (highest first) or 'seat_number'

    Returns:
        New list of matching records
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{sort_by}' (use one of {', '.join(SORT_KEYS)})")

    filtered = []
    for record in records:
        if not matches_search(record, search):
            continue
        if gender != 'all' and (record.get('gender') or '').lower() != gender:
            continue
        if result != 'all':
            passed = is_pass(record, scheme, pass_threshold_percent)
            if (result == 'pass') != passed:
                continue
        filtered.append(record)

    if sort_by == 'roll_no':
        filtered.sort(key=_roll_number)
    elif sort_by == 'name':
        filtered.sort(key=lambda r: str(r.get('student_name') or '').lower())
    elif sort_by == 'cgpa':
        filtered.sort(key=lambda r: r.get('total_cgpa') or 0, reverse=True)
    else:
        filtered.sort(key=lambda r: r.get('seat_number') or 0)

    return filtered
