"""
=============================================================================
Academic Metrics for Student Records
=============================================================================

Derived values shared by the student marksheet and the teacher analytics
view. Both call sites use the same helpers so a student's total and
percentage can never disagree between the two.

Per record:  subject_total, overall_total, overall_percentage, is_pass
Per scope:   compute_aggregate, extremes, rank_records, cgpa_distribution

Records are plain dictionaries (see import_validator.build_record and
record_store.record_to_dict). Nothing here performs I/O.

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

from typing import Dict, List, Tuple, Any

from mark_schemes import MarkScheme, Subject, GENDERS


DEFAULT_PASS_THRESHOLD = 40
DEFAULT_TOPPER_LIMIT = 3

# (label, lower bound inclusive, upper bound exclusive); 10 falls in the last band
CGPA_BANDS = [
    ('0-5', 0, 5),
    ('5-6', 5, 6),
    ('6-7', 6, 7),
    ('7-8', 7, 8),
    ('8-9', 8, 9),
    ('9-10', 9, 10),
]


def subject_total(record: Dict[str, Any], subject: Subject) -> int:
    """Sum of the subject's fields that count toward the total"""
    return sum(
        record.get(subject.record_key(f)) or 0
        for f in subject.fields
        if f.counts_toward_total
    )


def overall_total(record: Dict[str, Any], scheme: MarkScheme) -> int:
    return sum(subject_total(record, s) for s in scheme.subjects)


def max_possible_total(scheme: MarkScheme) -> int:
    return scheme.max_possible_total


def overall_percentage(record: Dict[str, Any], scheme: MarkScheme) -> float:
    maximum = max_possible_total(scheme)
    if maximum == 0:
        return 0.0
    return overall_total(record, scheme) / maximum * 100


def is_pass(record: Dict[str, Any], scheme: MarkScheme,
            pass_threshold_percent: float = DEFAULT_PASS_THRESHOLD) -> bool:
    return overall_percentage(record, scheme) >= pass_threshold_percent


def _cgpa(record: Dict[str, Any]) -> float:
    return record.get('total_cgpa') or 0


def _percent(count: int, total: int) -> float:
    return (count / total * 100) if total > 0 else 0


def extremes(records: List[Dict[str, Any]], scheme: MarkScheme,
             by: str = 'total') -> Tuple[float, float]:
    """
    Highest and lowest value over the records.

    Args:
        records: Student records
        scheme: Active mark scheme
        by: 'total' (overall marks) or 'cgpa'

    Returns:
        (highest, lowest); (0, 0) for no records
    """
    if by == 'total':
        values = [overall_total(r, scheme) for r in records]
    elif by == 'cgpa':
        values = [_cgpa(r) for r in records]
    else:
        raise ValueError(f"Unknown extremes key '{by}' (use 'total' or 'cgpa')")

    if not values:
        return 0, 0
    return max(values), min(values)


def select_toppers(records: List[Dict[str, Any]],
                   limit: int = DEFAULT_TOPPER_LIMIT) -> List[Dict[str, Any]]:
    """
    All records tied at the maximum CGPA, in input order, capped at `limit`.
    """
    if not records:
        return []
    best = max(_cgpa(r) for r in records)
    return [r for r in records if _cgpa(r) == best][:limit]


def rank_records(records: List[Dict[str, Any]], scheme: MarkScheme,
                 by: str = 'cgpa') -> List[Tuple[int, Dict[str, Any]]]:
    """
    Rank records in descending order with competition ranking (1, 2, 2, 4).

    Tied records keep their input order.

    Returns:
        List of (rank, record) pairs
    """
    if by == 'cgpa':
        key = _cgpa
    elif by == 'total':
        def key(record):
            return overall_total(record, scheme)
    else:
        raise ValueError(f"Unknown ranking key '{by}' (use 'cgpa' or 'total')")

    ordered = sorted(records, key=key, reverse=True)
    ranked = []
    previous = None
    for position, record in enumerate(ordered, 1):
        value = key(record)
        if value != previous:
            rank = position
            previous = value
        ranked.append((rank, record))
    return ranked


def cgpa_distribution(records: List[Dict[str, Any]]) -> Dict[str, int]:
    """Count records per CGPA band"""
    distribution = {label: 0 for label, _, _ in CGPA_BANDS}
    for record in records:
        cgpa = _cgpa(record)
        for label, low, high in CGPA_BANDS:
            if low <= cgpa < high or (high == 10 and cgpa == 10):
                distribution[label] += 1
                break
    return distribution


def compute_aggregate(records: List[Dict[str, Any]], scheme: MarkScheme,
                      pass_threshold_percent: float = DEFAULT_PASS_THRESHOLD,
                      topper_limit: int = DEFAULT_TOPPER_LIMIT) -> Dict[str, Any]:
    """
    Build the analytics report for one academic database.

    An empty record list gives a zero-valued report with topper None.

    Args:
        records: Student records of the scope
        scheme: Active mark scheme
        pass_threshold_percent: Minimum overall percentage to pass
        topper_limit: Maximum number of tied toppers listed

    Returns:
        AggregateReport dictionary
    """
    total = len(records)

    gender_counts = {g: 0 for g in GENDERS}
    gender_counts['unset'] = 0
    for record in records:
        gender = record.get('gender')
        if gender in GENDERS:
            gender_counts[gender] += 1
        else:
            gender_counts['unset'] += 1

    passed = sum(1 for r in records if is_pass(r, scheme, pass_threshold_percent))
    failed = total - passed

    toppers = select_toppers(records, topper_limit)
    highest_cgpa, lowest_cgpa = extremes(records, scheme, by='cgpa')
    highest_total, lowest_total = extremes(records, scheme, by='total')

    return {
        'total_students': total,
        'gender_counts': gender_counts,
        'gender_percentages': {g: _percent(c, total) for g, c in gender_counts.items()},
        'passed_students': passed,
        'failed_students': failed,
        'pass_percentage': _percent(passed, total),
        'fail_percentage': _percent(failed, total),
        'pass_threshold': pass_threshold_percent,
        'toppers': toppers,
        'topper': toppers[0] if toppers else None,
        'average_cgpa': (sum(_cgpa(r) for r in records) / total) if total else 0,
        'highest_cgpa': highest_cgpa,
        'lowest_cgpa': lowest_cgpa,
        'highest_total': highest_total,
        'lowest_total': lowest_total,
        'max_possible_total': max_possible_total(scheme),
        'cgpa_distribution': cgpa_distribution(records),
    }


def marksheet(record: Dict[str, Any], scheme: MarkScheme,
              pass_threshold_percent: float = DEFAULT_PASS_THRESHOLD) -> Dict[str, Any]:
    """
    Per-student view for the student lookup and the printable marksheet.

    Returns:
        Dict with student identity, per-subject rows and overall figures
    """
    subjects = []
    for subject in scheme.subjects:
        subjects.append({
            'name': subject.name,
            'marks': [
                (field.label, record.get(subject.record_key(field)) or 0, field.maximum)
                for field in subject.fields
            ],
            'total': subject_total(record, subject),
            'max_total': subject.max_total,
        })

    sheet = {
        'seat_number': record.get('seat_number'),
        'roll_no': record.get('roll_no'),
        'student_name': record.get('student_name'),
        'gender': record.get('gender'),
        'subjects': subjects,
        'overall_total': overall_total(record, scheme),
        'max_possible_total': max_possible_total(scheme),
        'percentage': overall_percentage(record, scheme),
        'passed': is_pass(record, scheme, pass_threshold_percent),
        'total_cgpa': _cgpa(record),
        'cgpa_label': scheme.cgpa_label,
    }
    if scheme.has_result:
        sheet['result'] = record.get('result')
    return sheet

