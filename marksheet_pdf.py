"""
=============================================================================
Printable Marksheet and Analytics Report
=============================================================================

Renders single-page A4 PDFs with PyMuPDF:

# Student marksheet (student lookup "Download PDF"):
render_marksheet(record, scheme, 'marksheet_123456.pdf', database)

# Analytics report for one academic database:
render_analytics_report(report, 'analysis.pdf', database)

All figures come from metrics.marksheet / metrics.compute_aggregate, so the
printed totals match what the dashboard shows.

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import os
import logging
from typing import Dict, Any, List

import fitz  # PyMuPDF

from mark_schemes import MarkScheme
from metrics import marksheet, DEFAULT_PASS_THRESHOLD


logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size('a4')
MARGIN = 50
LINE_HEIGHT = 16


class _PageWriter:
    """Top-to-bottom text cursor over one PDF page"""

    def __init__(self, page):
        self.page = page
        self.y = MARGIN

    def text(self, value: str, x: float = MARGIN, fontsize: float = 10, bold: bool = False):
        fontname = 'hebo' if bold else 'helv'
        self.page.insert_text((x, self.y), value, fontsize=fontsize, fontname=fontname)

    def line(self, value: str = '', fontsize: float = 10, bold: bool = False):
        self.text(value, fontsize=fontsize, bold=bold)
        self.y += LINE_HEIGHT if fontsize <= 12 else fontsize + 8

    def columns(self, values: List[str], offsets: List[float], bold: bool = False):
        for value, offset in zip(values, offsets):
            self.text(value, x=MARGIN + offset, bold=bold)
        self.y += LINE_HEIGHT

    def rule(self):
        self.page.draw_line((MARGIN, self.y - 10), (PAGE_WIDTH - MARGIN, self.y - 10))
        self.y += 4


def _database_lines(database) -> List[str]:
    if database is None:
        return []
    return [
        f"{database.database_name}",
        f"Branch: {database.branch}   Batch: {database.batch}   "
        f"Semester: {database.semester}   Year: {database.academic_year}",
    ]


def _save(doc, output_path: str) -> str:
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    doc.save(output_path)
    doc.close()
    return output_path


def render_marksheet(record: Dict[str, Any], scheme: MarkScheme, output_path: str,
                     database=None,
                     pass_threshold: float = DEFAULT_PASS_THRESHOLD) -> str:
    """
    Write a student's marksheet as a PDF.

    Args:
        record: Student record
        scheme: Active mark scheme
        output_path: Destination PDF path
        database: Optional AcademicDatabase for the header
        pass_threshold: Pass threshold percentage

    Returns:
        Path written
    """
    sheet = marksheet(record, scheme, pass_threshold)

    doc = fitz.open()
    writer = _PageWriter(doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT))

    writer.line('STUDENT MARKSHEET', fontsize=16, bold=True)
    for text in _database_lines(database):
        writer.line(text)
    writer.rule()

    writer.line(f"Name: {sheet['student_name']}", bold=True)
    writer.line(f"Seat Number: {sheet['seat_number']}   Roll No: {sheet['roll_no'] or '-'}   "
                f"Gender: {sheet['gender'] or '-'}")
    writer.rule()

    offsets = [0, 130, 230, 330]
    writer.columns(['Subject', 'Component', 'Marks', 'Out of'], offsets, bold=True)
    for subject in sheet['subjects']:
        for index, (label, value, maximum) in enumerate(subject['marks']):
            name = subject['name'] if index == 0 else ''
            writer.columns([name, label, str(value), str(maximum)], offsets)
        writer.columns(['', 'Subject Total', str(subject['total']), str(subject['max_total'])],
                       offsets, bold=True)
    writer.rule()

    writer.line(f"Overall Total: {sheet['overall_total']} / {sheet['max_possible_total']}", bold=True)
    writer.line(f"Percentage: {sheet['percentage']:.2f}%")
    writer.line(f"{sheet['cgpa_label']}: {sheet['total_cgpa']:.2f}")
    if 'result' in sheet:
        writer.line(f"Result: {'PASS' if sheet['result'] == 'P' else 'FAIL'}", bold=True)
    else:
        writer.line(f"Result: {'PASS' if sheet['passed'] else 'FAIL'}", bold=True)

    _save(doc, output_path)
    logger.info(f"Saved marksheet for seat {sheet['seat_number']} to {output_path}")
    return output_path


def render_analytics_report(report: Dict[str, Any], output_path: str,
                            database=None) -> str:
    """
    Write an academic database's analytics report as a PDF.

    Args:
        report: Dict from metrics.compute_aggregate
        output_path: Destination PDF path
        database: Optional AcademicDatabase for the header

    Returns:
        Path written
    """
    doc = fitz.open()
    writer = _PageWriter(doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT))

    writer.line('ANALYTICS REPORT', fontsize=16, bold=True)
    for text in _database_lines(database):
        writer.line(text)
    writer.rule()

    total = report['total_students']
    writer.line(f"Total Students: {total}", bold=True)
    if total == 0:
        writer.line('Add students to this database to view analytics')
        _save(doc, output_path)
        return output_path

    writer.line(f"Passed: {report['passed_students']} ({report['pass_percentage']:.1f}%)   "
                f"Failed: {report['failed_students']} ({report['fail_percentage']:.1f}%)   "
                f"Threshold: {report['pass_threshold']}%")
    writer.line(f"Average CGPA: {report['average_cgpa']:.2f}   "
                f"Highest: {report['highest_cgpa']:.2f}   Lowest: {report['lowest_cgpa']:.2f}")
    writer.line(f"Highest Total: {report['highest_total']} / {report['max_possible_total']}   "
                f"Lowest Total: {report['lowest_total']}")
    writer.rule()

    writer.line('Class Topper(s)', bold=True)
    for topper in report['toppers']:
        writer.line(f"  {topper.get('student_name')} (Seat {topper.get('seat_number')}) - "
                    f"CGPA {topper.get('total_cgpa', 0):.2f}")
    writer.rule()

    writer.line('Gender Distribution', bold=True)
    for gender, count in report['gender_counts'].items():
        percentage = report['gender_percentages'][gender]
        writer.line(f"  {gender.capitalize()}: {count} ({percentage:.1f}%)")
    writer.rule()

    writer.line('CGPA Distribution', bold=True)
    for band, count in report['cgpa_distribution'].items():
        writer.line(f"  {band}: {count}")

    _save(doc, output_path)
    logger.info(f"Saved analytics report to {output_path}")
    return output_path
