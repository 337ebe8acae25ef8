"""
=============================================================================
Export Utilities for Student Records
=============================================================================

Utilities to export stored student records to JSON, CSV and Excel, and to
summarise every academic database.

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import os
import json
import logging
from typing import List, Dict, Any

import pandas as pd

from mark_schemes import MarkScheme
from metrics import (
    overall_total, overall_percentage, is_pass, compute_aggregate,
    DEFAULT_PASS_THRESHOLD
)
from record_store import RecordStore


logger = logging.getLogger(__name__)


def _with_derived(record: Dict[str, Any], scheme: MarkScheme,
                  pass_threshold: float) -> Dict[str, Any]:
    exported = dict(record)
    exported['overall_total'] = overall_total(record, scheme)
    exported['percentage'] = round(overall_percentage(record, scheme), 2)
    exported['passed'] = is_pass(record, scheme, pass_threshold)
    return exported


def export_students_json(record_store: RecordStore, database_id: int,
                         output_file: str, scheme: MarkScheme,
                         pass_threshold: float = DEFAULT_PASS_THRESHOLD) -> int:
    """
    Export one academic database's student records to a JSON file.

    Each record carries its derived overall total, percentage and pass flag.

    Args:
        record_store: Store to read from
        database_id: Academic database to export
        output_file: Output JSON file path
        scheme: Active mark scheme
        pass_threshold: Pass threshold percentage

    Returns:
        Number of records exported
    """
    records = record_store.select_records_by_scope(database_id)
    export_data = [_with_derived(r, scheme, pass_threshold) for r in records]

    with open(output_file, 'w') as f:
        json.dump(export_data, f, indent=2)

    logger.info(f"Exported {len(export_data)} student records to {output_file}")
    return len(export_data)


def records_dataframe(records: List[Dict[str, Any]], scheme: MarkScheme,
                      pass_threshold: float = DEFAULT_PASS_THRESHOLD) -> pd.DataFrame:
    """
    Convert records to a DataFrame with the scheme's CSV headers plus
    derived columns.

    Args:
        records: Student records
        scheme: Active mark scheme
        pass_threshold: Pass threshold percentage

    Returns:
        Pandas DataFrame, one row per student
    """
    headers = scheme.expected_headers
    keys = scheme.column_keys

    rows = []
    for record in records:
        row = {header: record.get(key) for header, key in zip(headers, keys)}
        row['Overall Total'] = overall_total(record, scheme)
        row['Percentage'] = round(overall_percentage(record, scheme), 2)
        row['Status'] = 'PASS' if is_pass(record, scheme, pass_threshold) else 'FAIL'
        rows.append(row)

    columns = headers + ['Overall Total', 'Percentage', 'Status']
    return pd.DataFrame(rows, columns=columns)


def export_roster(records: List[Dict[str, Any]], scheme: MarkScheme, output_path: str,
                  pass_threshold: float = DEFAULT_PASS_THRESHOLD) -> str:
    """
    Save records to CSV or Excel, chosen by file extension (.csv / .xlsx).

    Returns:
        Path written
    """
    df = records_dataframe(records, scheme, pass_threshold)
    extension = os.path.splitext(output_path)[1].lower()

    if extension == '.csv':
        df.to_csv(output_path, index=False)
    elif extension == '.xlsx':
        with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Students')

            # Auto-adjust column widths
            worksheet = writer.sheets['Students']
            for column in worksheet.columns:
                max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
                worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)
    else:
        raise ValueError(f"Unsupported export format '{extension}' (use .csv or .xlsx)")

    logger.info(f"Saved {len(df)} students to {output_path}")
    return output_path


def get_database_statistics(record_store: RecordStore, scheme: MarkScheme,
                            pass_threshold: float = DEFAULT_PASS_THRESHOLD) -> List[Dict[str, Any]]:
    """
    Get statistics for all academic databases.

    Args:
        record_store: Store to read from
        scheme: Active mark scheme
        pass_threshold: Pass threshold percentage

    Returns:
        List of per-database statistics
    """
    stats = []
    for database in record_store.list_academic_databases():
        records = record_store.select_records_by_scope(database.id)
        report = compute_aggregate(records, scheme, pass_threshold)

        stats.append({
            'database_id': database.id,
            'database_name': database.database_name,
            'branch': database.branch,
            'batch': database.batch,
            'semester': database.semester,
            'academic_year': database.academic_year,
            'total_students': report['total_students'],
            'passed': report['passed_students'],
            'failed': report['failed_students'],
            'pass_percentage': round(report['pass_percentage'], 2),
            'average_cgpa': round(report['average_cgpa'], 2)
        })

    return stats
