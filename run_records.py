"""
=============================================================================
Command-Line Entry Point for Student Records
=============================================================================

Teacher and student workflows over the record store:
- init / create-db / list-dbs / delete-db: manage academic databases
- template / validate / import: bulk upload with preview and error report
- students: list a database with search, filters and sorting
- add-student / edit-student / delete-student: manual entry
- analyze: analytics dashboard for one database
- lookup / marksheet: student self-service marksheet
- export: JSON, CSV or Excel export

Usage:
    python run_records.py [--db FILE] [--scheme A|B|C] <command> [options]

Examples:
    python run_records.py init
    python run_records.py create-db --name "SE Comp 2025" --branch "Computer Eng." \\
        --batch "2023 - 2027" --semester 4 --academic-year 2024-2025
    python run_records.py template --output template.csv
    python run_records.py import 1 students.csv
    python run_records.py analyze 1 --pdf analysis.pdf
    python run_records.py lookup --branch "Computer Eng." --academic-year 2024-2025 --seat 123456

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import os
import sys
import argparse

import config
from init_db import init_database
from mark_schemes import template_csv
from import_validator import validate_form
from record_store import RecordStore, RecordStoreError
from bulk_importer import BulkStudentImporter
from metrics import compute_aggregate, marksheet, rank_records
from roster import filter_and_sort_students, SORT_KEYS
from export_utils import export_students_json, export_roster, get_database_statistics
from marksheet_pdf import render_marksheet, render_analytics_report
from models import BRANCHES, YEAR_CLASSIFICATIONS


def print_banner(title: str):
    print()
    print("=" * 80)
    print(" " * 20 + title)
    print("=" * 80)
    print()


def print_section(title: str):
    print()
    print("-" * 80)
    print(title)
    print("-" * 80)
    print()


def add_student_arguments(parser: argparse.ArgumentParser):
    """Manual-entry fields shared by add-student and edit-student"""
    parser.add_argument('--seat', help='6-digit seat number (add-student generates one when omitted)')
    parser.add_argument('--roll-no')
    parser.add_argument('--name')
    parser.add_argument('--gender', help='Male, Female or Other (M/F/O)')
    parser.add_argument('--result', help='P or F (scheme A only)')
    parser.add_argument('--cgpa', help='Total CGPA / Pointer')
    parser.add_argument('--mark', action='append', default=[], metavar='FIELD=VALUE',
                        help='Mark field, e.g. subject1_unit_test=18 (repeatable)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Student records: bulk upload, analytics and marksheets',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create the database file
  python run_records.py init

  # Preview an upload without storing it
  python run_records.py validate students.csv

  # Upload into academic database 1
  python run_records.py import 1 students.csv
        """
    )

    parser.add_argument('--db', default=config.DATABASE_PATH,
                        help=f'SQLite database file path (default: {config.DATABASE_PATH})')
    parser.add_argument('--scheme', default=config.MARK_SCHEME,
                        help=f'Mark scheme variant A, B or C (default: {config.MARK_SCHEME})')
    parser.add_argument('--pass-threshold', type=float, default=config.PASS_THRESHOLD,
                        help=f'Overall percentage required to pass (default: {config.PASS_THRESHOLD})')
    parser.add_argument('--log-dir', default=config.LOG_DIR,
                        help=f'Directory for import logs (default: {config.LOG_DIR})')

    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init', help='Create tables')

    create = sub.add_parser('create-db', help='Create an academic database')
    create.add_argument('--name', required=True)
    create.add_argument('--branch', required=True, choices=BRANCHES)
    create.add_argument('--batch', required=True, help="e.g. '2023 - 2027'")
    create.add_argument('--semester', type=int, required=True)
    create.add_argument('--academic-year', required=True, help='e.g. 2024-2025')
    create.add_argument('--year-classification', default='1st Year', choices=YEAR_CLASSIFICATIONS)
    create.add_argument('--created-by')

    sub.add_parser('list-dbs', help='List academic databases with statistics')

    delete = sub.add_parser('delete-db', help='Delete an academic database and its students')
    delete.add_argument('database_id', type=int)

    template = sub.add_parser('template', help='Write the upload template CSV')
    template.add_argument('--output', default='student_upload_template.csv')

    validate = sub.add_parser('validate', help='Preview a CSV upload')
    validate.add_argument('csv_file')

    upload = sub.add_parser('import', help='Upload a CSV into an academic database')
    upload.add_argument('database_id', type=int)
    upload.add_argument('csv_file')
    upload.add_argument('--dry-run', action='store_true', help='Validate and check duplicates only')

    students = sub.add_parser('students', help='List students of an academic database')
    students.add_argument('database_id', type=int)
    students.add_argument('--search', default='')
    students.add_argument('--gender', default='all', choices=['all', 'male', 'female', 'other'])
    students.add_argument('--result', default='all', choices=['all', 'pass', 'fail'])
    students.add_argument('--sort', default='roll_no', choices=SORT_KEYS)

    add = sub.add_parser('add-student', help='Add one student to an academic database')
    add.add_argument('database_id', type=int)
    add_student_arguments(add)

    edit = sub.add_parser('edit-student', help='Change fields of a stored student record')
    edit.add_argument('record_id', type=int)
    add_student_arguments(edit)

    remove = sub.add_parser('delete-student', help='Delete a stored student record')
    remove.add_argument('record_id', type=int)

    analyze = sub.add_parser('analyze', help='Analytics for an academic database')
    analyze.add_argument('database_id', type=int)
    analyze.add_argument('--topper-limit', type=int, default=config.TOPPER_LIMIT)
    analyze.add_argument('--pdf', help='Also write the report as PDF')

    lookup = sub.add_parser('lookup', help='Find a student marksheet')
    lookup.add_argument('--branch', required=True, choices=BRANCHES)
    lookup.add_argument('--academic-year', required=True)
    lookup.add_argument('--seat', type=int, required=True)
    lookup.add_argument('--pdf', help='Also write the marksheet as PDF')

    sheet = sub.add_parser('marksheet', help='Write a student marksheet PDF')
    sheet.add_argument('database_id', type=int)
    sheet.add_argument('seat', type=int)
    sheet.add_argument('--output', help='PDF path (default: marksheet_<seat>.pdf)')

    export = sub.add_parser('export', help='Export an academic database')
    export.add_argument('database_id', type=int)
    export.add_argument('output', help='.json, .csv or .xlsx')

    return parser


def cmd_create_db(store, scheme, args):
    database = store.create_academic_database(
        database_name=args.name,
        branch=args.branch,
        batch=args.batch,
        semester=args.semester,
        academic_year=args.academic_year,
        year_classification=args.year_classification,
        created_by=args.created_by,
    )
    print(f"✓ Academic database created: ID={database.id} ({database.database_name})")


def cmd_list_dbs(store, scheme, args):
    stats = get_database_statistics(store, scheme, args.pass_threshold)
    if not stats:
        print("No academic databases yet.")
        return
    for stat in stats:
        print(f"[{stat['database_id']}] {stat['database_name']}")
        print(f"   Branch: {stat['branch']}, Batch: {stat['batch']}, "
              f"Semester: {stat['semester']}, Year: {stat['academic_year']}")
        print(f"   Students: {stat['total_students']} (Pass: {stat['passed']}, "
              f"Fail: {stat['failed']}, Pass%: {stat['pass_percentage']}%, "
              f"Avg CGPA: {stat['average_cgpa']})")
        print()


def cmd_delete_db(store, scheme, args):
    deleted = store.delete_academic_database(args.database_id)
    print(f"✓ Deleted academic database {args.database_id} ({deleted} students)")


def cmd_template(store, scheme, args):
    with open(args.output, 'w', encoding='utf-8') as f:
        f.write(template_csv(scheme))
    print(f"✓ Template for scheme {scheme.name} ({scheme.title}) written to {args.output}")


def print_import_result(result):
    print(f"Valid records:    {len(result['accepted'])}")
    print(f"Errors found:     {len(result['errors'])}")
    if result['errors']:
        print()
        print("Please fix the following errors:")
        for error in result['errors']:
            print(f"  - {error}")
        if any(e.startswith('Missing header') for e in result['errors']):
            print()
            print("Please download and use the correct template")

    if result['accepted']:
        print()
        print(f"Preview ({min(10, len(result['accepted']))} of {len(result['accepted'])}):")
        for record in result['accepted'][:10]:
            print(f"  {record['seat_number']}  {record['student_name']:<35} "
                  f"{record['gender'] or 'N/A':<7} {record['total_cgpa']}")
        if len(result['accepted']) > 10:
            print(f"  ... and {len(result['accepted']) - 10} more records")


def cmd_validate(store, scheme, args):
    importer = BulkStudentImporter(store, scheme, args.log_dir)
    result = importer.preview(importer.read_csv(args.csv_file))
    print_import_result(result)


def cmd_import(store, scheme, args):
    if store.get_academic_database(args.database_id) is None:
        raise RecordStoreError(f"Academic database {args.database_id} not found")

    importer = BulkStudentImporter(store, scheme, args.log_dir)
    result = importer.import_file(args.csv_file, args.database_id, dry_run=args.dry_run)
    print_import_result(result)

    print_section("Upload Summary")
    print(f"✓ Students uploaded:   {result['inserted']}")
    print(f"  Duplicates skipped:  {result['duplicates_skipped']}")
    if result['duplicate_seat_numbers']:
        print(f"  Duplicate seats:     {', '.join(str(s) for s in result['duplicate_seat_numbers'])}")
    print(f"  Log file:            {importer.log_file}")


def cmd_students(store, scheme, args):
    records = store.select_records_by_scope(args.database_id)
    shown = filter_and_sort_students(
        records, scheme, search=args.search, gender=args.gender,
        result=args.result, sort_by=args.sort, pass_threshold_percent=args.pass_threshold
    )
    print(f"Showing {len(shown)} of {len(records)} students")
    print()
    for record in shown:
        print(f"  {record.get('roll_no') or '-':>3}  {record['seat_number']}  "
              f"{record['student_name']:<35} {record.get('gender') or 'N/A':<7} "
              f"CGPA {record['total_cgpa']:.2f}")


FORM_OPTIONS = [
    ('seat', 'seat_number'),
    ('roll_no', 'roll_no'),
    ('name', 'student_name'),
    ('gender', 'gender'),
    ('result', 'result'),
    ('cgpa', 'total_cgpa'),
]


def build_form(args, scheme, base=None):
    """
    Merge command-line student fields over an existing record.

    Returns:
        Tuple of (form data, errors for unknown --mark fields)
    """
    form = dict(base or {})
    for option, key in FORM_OPTIONS:
        value = getattr(args, option)
        if value is not None:
            form[key] = value

    errors = []
    mark_keys = scheme.mark_keys()
    for pair in args.mark:
        key, separator, value = pair.partition('=')
        key = key.strip()
        if not separator or key not in mark_keys:
            errors.append(f"Unknown mark field '{key}' (scheme {scheme.name} fields: {', '.join(mark_keys)})")
            continue
        form[key] = value
    return form, errors


def save_student_form(form, errors, scheme):
    """Validate a manual-entry form; print and raise on any error"""
    record, form_errors = validate_form(form, scheme)
    errors = errors + form_errors
    if errors:
        print("Please fix the following errors:")
        for error in errors:
            print(f"  - {error}")
        print()
        raise RecordStoreError(f"Student not saved ({len(errors)} error(s))")
    return record


def cmd_add_student(store, scheme, args):
    if store.get_academic_database(args.database_id) is None:
        raise RecordStoreError(f"Academic database {args.database_id} not found")

    form, errors = build_form(args, scheme)
    if args.seat is None:
        seat_number = store.generate_seat_number()
        if seat_number is None:
            raise RecordStoreError("Could not generate an unused seat number, pass --seat")
        form['seat_number'] = seat_number
        print(f"Generated seat number: {seat_number}")

    record = save_student_form(form, errors, scheme)
    store.insert_records(args.database_id, [record])

    stored = [r for r in store.select_records_by_scope(args.database_id)
              if r['seat_number'] == record['seat_number']]
    print(f"✓ Student added: ID={stored[0]['id']}, seat {record['seat_number']} ({record['student_name']})")


def cmd_edit_student(store, scheme, args):
    existing = store.get_record(args.record_id)
    if existing is None:
        raise RecordStoreError(f"Student record {args.record_id} not found")

    form, errors = build_form(args, scheme, base=existing)
    record = save_student_form(form, errors, scheme)
    updated = store.update_record(args.record_id, record)
    print(f"✓ Student updated: ID={updated['id']}, seat {updated['seat_number']} ({updated['student_name']})")


def cmd_delete_student(store, scheme, args):
    store.delete_record(args.record_id)
    print(f"✓ Deleted student record {args.record_id}")


def cmd_analyze(store, scheme, args):
    database = store.get_academic_database(args.database_id)
    if database is None:
        raise RecordStoreError(f"Academic database {args.database_id} not found")

    records = store.select_records_by_scope(args.database_id)
    report = compute_aggregate(records, scheme, args.pass_threshold, args.topper_limit)

    print(f"{database.database_name} - {database.branch}, Semester {database.semester}")
    print()
    if report['total_students'] == 0:
        print("Add students to this database to view analytics")
    else:
        print(f"Total students:  {report['total_students']}")
        print(f"Passed:          {report['passed_students']}/{report['total_students']} "
              f"({report['pass_percentage']:.1f}%) at {args.pass_threshold}% threshold")
        print(f"Average CGPA:    {report['average_cgpa']:.2f}")
        print(f"Score range:     {report['lowest_total']} - {report['highest_total']} "
              f"of {report['max_possible_total']}")
        print()
        print("Class topper(s):")
        for topper in report['toppers']:
            print(f"  {topper['student_name']} ({topper['seat_number']}) - CGPA {topper['total_cgpa']:.2f}")
        print()
        print("Gender distribution:")
        for gender, count in report['gender_counts'].items():
            print(f"  {gender.capitalize():<7} {count} ({report['gender_percentages'][gender]:.1f}%)")
        print()
        print("Top 10 by total marks:")
        for rank, record in rank_records(records, scheme, by='total')[:10]:
            print(f"  {rank:>2}. {record['student_name']} ({record['seat_number']})")

    if args.pdf:
        render_analytics_report(report, args.pdf, database)
        print()
        print(f"✓ Report saved to {args.pdf}")


def cmd_lookup(store, scheme, args):
    record = store.find_student_record(args.branch, args.academic_year, args.seat)
    if record is None:
        print("Record Not Found: no student found for the provided details.")
        return

    sheet = marksheet(record, scheme, args.pass_threshold)
    print(f"Name: {sheet['student_name']}   Seat: {sheet['seat_number']}")
    print()
    for subject in sheet['subjects']:
        parts = ', '.join(f"{label} {value}/{maximum}" for label, value, maximum in subject['marks'])
        print(f"  {subject['name']:<10} {parts}  => {subject['total']}/{subject['max_total']}")
    print()
    print(f"Total: {sheet['overall_total']}/{sheet['max_possible_total']} "
          f"({sheet['percentage']:.2f}%)  {sheet['cgpa_label']}: {sheet['total_cgpa']:.2f}")

    if args.pdf:
        database = store.get_academic_database(record['academic_database_id'])
        render_marksheet(record, scheme, args.pdf, database, args.pass_threshold)
        print(f"✓ Marksheet saved to {args.pdf}")


def cmd_marksheet(store, scheme, args):
    database = store.get_academic_database(args.database_id)
    if database is None:
        raise RecordStoreError(f"Academic database {args.database_id} not found")

    matches = [r for r in store.select_records_by_scope(args.database_id)
               if r['seat_number'] == args.seat]
    if not matches:
        raise RecordStoreError(f"Seat number {args.seat} not found in database {args.database_id}")

    output = args.output or f"marksheet_{args.seat}.pdf"
    render_marksheet(matches[0], scheme, output, database, args.pass_threshold)
    print(f"✓ Marksheet saved to {output}")


def cmd_export(store, scheme, args):
    if args.output.lower().endswith('.json'):
        count = export_students_json(store, args.database_id, args.output, scheme, args.pass_threshold)
    else:
        records = store.select_records_by_scope(args.database_id)
        export_roster(records, scheme, args.output, args.pass_threshold)
        count = len(records)
    print(f"✓ Exported {count} records to {args.output}")


COMMANDS = {
    'create-db': cmd_create_db,
    'list-dbs': cmd_list_dbs,
    'delete-db': cmd_delete_db,
    'template': cmd_template,
    'validate': cmd_validate,
    'import': cmd_import,
    'students': cmd_students,
    'add-student': cmd_add_student,
    'edit-student': cmd_edit_student,
    'delete-student': cmd_delete_student,
    'analyze': cmd_analyze,
    'lookup': cmd_lookup,
    'marksheet': cmd_marksheet,
    'export': cmd_export,
}


def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        scheme = config.get_active_scheme(args.scheme)
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        sys.exit(1)

    print_banner("Student Records System v1.0")
    print("Configuration:")
    print(f"  Database file:   {args.db}")
    print(f"  Mark scheme:     {scheme.name} ({scheme.title})")
    print(f"  Pass threshold:  {args.pass_threshold}%")
    print_section(f"Command: {args.command}")

    session = None
    try:
        session = init_database(args.db)
        if args.command == 'init':
            print(f"✓ Database ready: {os.path.abspath(args.db)}")
        else:
            COMMANDS[args.command](RecordStore(session), scheme, args)
        print()

    except RecordStoreError as e:
        print(f"Error: {e}")
        sys.exit(1)

    except KeyboardInterrupt:
        print()
        print("=" * 80)
        print("INTERRUPTED BY USER")
        print("=" * 80)
        sys.exit(0)

    except Exception as e:
        print()
        print("=" * 80)
        print("ERROR")
        print("=" * 80)
        print()
        print(f"An error occurred: {e}")
        print()

        import traceback
        print("Traceback:")
        traceback.print_exc()
        print()

        sys.exit(1)

    finally:
        if session is not None:
            session.close()


if __name__ == '__main__':
    main()
