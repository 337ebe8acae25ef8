"""
=============================================================================
CSV Import Validator for Student Records
=============================================================================

Parses a bulk-upload CSV against the active mark scheme and partitions the
rows into accepted student records and a flat list of row-addressed error
messages.

Workflow:
1. Split the text into lines, require a header plus at least one data row
2. Check every expected header is present (presence, not position)
3. Read each data row positionally into a candidate record
4. Run all field validators, collecting every error for the row
5. Keep rows with no errors; report the rest

Nothing here touches the database. Errors are returned as data so the
caller can show the accepted count and the full error list together.

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import logging
from typing import Dict, List, Optional, Tuple, Any

from mark_schemes import (
    MarkScheme, coerce_or_default, normalize_gender, normalize_result
)


EMPTY_FILE_ERROR = 'File must contain at least one data row'


def build_record(values: List[str], scheme: MarkScheme) -> Dict[str, Any]:
    """
    Coerce one positional row into a candidate student record.

    Args:
        values: Trimmed cell values in CSV column order
        scheme: Active mark scheme

    Returns:
        Record dictionary keyed by scheme column keys
    """
    cells = dict(zip(scheme.column_keys, values))
    record = {
        'seat_number': coerce_or_default(cells.get('seat_number'), 'int'),
        'roll_no': cells.get('roll_no') or None,
        'student_name': (cells.get('student_name') or '').strip(),
        'gender': normalize_gender(cells.get('gender')),
    }

    for key in scheme.mark_keys():
        record[key] = coerce_or_default(cells.get(key), 'int')

    if scheme.has_result:
        record['result'] = normalize_result(cells.get('result'))
    record['total_cgpa'] = coerce_or_default(cells.get('total_cgpa'), 'float', 0.0)

    return record


def validate_student(record: Dict[str, Any], scheme: MarkScheme,
                     row_number: Optional[int] = None) -> List[str]:
    """
    Run every field validator against a record, in fixed order.

    Order: seat number, roll number, name, each subject's fields in scheme
    order, result (Variant A), pointer/CGPA. Does not stop at the first
    failure.

    Args:
        record: Candidate record
        scheme: Active mark scheme
        row_number: Physical CSV line number; adds a "Row <n>: " prefix

    Returns:
        List of error messages (empty when the record is valid)
    """
    prefix = f"Row {row_number}: " if row_number is not None else ''
    errors = []

    seat_number = record.get('seat_number') or 0
    if seat_number < 0 or len(str(seat_number)) != 6:
        errors.append(f"{prefix}Seat number must be exactly 6 digits")

    roll_no = record.get('roll_no')
    if roll_no:
        roll_text = str(roll_no).strip()
        if not roll_text.isdigit() or len(roll_text) > 2 or int(roll_text) > 199:
            errors.append(f"{prefix}Roll number must be under 200 and maximum 2 digits")

    if not str(record.get('student_name') or '').strip():
        errors.append(f"{prefix}Student name is required")

    for subject in scheme.subjects:
        for field in subject.fields:
            value = record.get(subject.record_key(field), 0)
            if not field.in_range(value):
                errors.append(
                    f"{prefix}{subject.name} {field.label} must be between "
                    f"{field.minimum}-{field.maximum}"
                )

    if scheme.has_result and record.get('result') not in ('P', 'F'):
        errors.append(f"{prefix}Result must be P or F")

    cgpa = record.get('total_cgpa', 0)
    if cgpa < 0 or cgpa > 10:
        errors.append(f"{prefix}{scheme.cgpa_label} must be between 0-10")

    return errors


def split_lines(text: str) -> List[str]:
    """Split on newline only; a trailing carriage return is dropped from each line"""
    return [line[:-1] if line.endswith('\r') else line for line in text.split('\n')]


def check_headers(header_line: str, scheme: MarkScheme) -> List[str]:
    """Report every expected header missing from the header line"""
    headers = [h.strip() for h in header_line.split(',')]
    return [
        f"Missing header: {expected}"
        for expected in scheme.expected_headers
        if expected not in headers
    ]


class ImportValidator:
    """Validator bound to one mark scheme"""

    def __init__(self, scheme: MarkScheme):
        self.scheme = scheme
        self.logger = logging.getLogger(__name__)

    def validate(self, raw_text: str) -> Tuple[List[Dict[str, Any]], List[str]]:
        """
        Validate a CSV payload.

        Args:
            raw_text: Full CSV text (header + rows)

        Returns:
            Tuple of (accepted records, error messages)
        """
        text = (raw_text or '').lstrip('\ufeff').strip()
        lines = split_lines(text)

        if len([line for line in lines if line.strip()]) < 2:
            self.logger.debug("Rejected upload: no data rows")
            return [], [EMPTY_FILE_ERROR]

        header_errors = check_headers(lines[0], self.scheme)
        if header_errors:
            self.logger.debug(f"Rejected upload: {len(header_errors)} missing header(s)")
            return [], header_errors

        accepted = []
        errors = []

        for index, line in enumerate(lines[1:]):
            if not line.strip():
                continue

            row_number = index + 2
            values = [v.strip() for v in line.split(',')]
            record = build_record(values, self.scheme)
            row_errors = validate_student(record, self.scheme, row_number)

            if row_errors:
                errors.extend(row_errors)
                self.logger.debug(f"Row {row_number}: {len(row_errors)} error(s)")
            else:
                accepted.append(record)

        self.logger.debug(
            f"Validated upload for scheme {self.scheme.name}: "
            f"{len(accepted)} accepted, {len(errors)} error(s)"
        )
        return accepted, errors


def validate(raw_text: str, scheme: MarkScheme) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Validate CSV text against a scheme. See ImportValidator.validate."""
    return ImportValidator(scheme).validate(raw_text)


def validate_form(form_data: Dict[str, Any], scheme: MarkScheme) -> Tuple[Dict[str, Any], List[str]]:
    """
    Coerce and validate a manual-entry form.

    Form values may be strings or numbers. Missing mark fields count as 0.

    Args:
        form_data: Mapping of record keys to raw values
        scheme: Active mark scheme

    Returns:
        Tuple of (record, error messages)
    """
    roll_no = form_data.get('roll_no')
    record = {
        'seat_number': coerce_or_default(form_data.get('seat_number'), 'int'),
        'roll_no': str(roll_no).strip() if roll_no not in (None, '') else None,
        'student_name': str(form_data.get('student_name') or '').strip(),
        'gender': normalize_gender(form_data.get('gender')),
    }
    for key in scheme.mark_keys():
        record[key] = coerce_or_default(form_data.get(key), 'int')
    if scheme.has_result:
        record['result'] = normalize_result(form_data.get('result'))
    record['total_cgpa'] = coerce_or_default(form_data.get('total_cgpa'), 'float', 0.0)

    return record, validate_student(record, scheme)
