import pytest

from bulk_importer import BulkStudentImporter


@pytest.fixture
def importer(store, scheme_c):
    return BulkStudentImporter(store, scheme_c)


def upload(header, *rows):
    return '\n'.join((header,) + rows) + '\n'


def test_import_valid_and_invalid_rows(importer, store, academic_database, header_c, csv_row, scheme_c):
    text = upload(
        header_c,
        csv_row(scheme_c, seat_number=111111),
        csv_row(scheme_c, seat_number=222222, subject1_unit_test=25),
        csv_row(scheme_c, seat_number=333333),
    )
    result = importer.import_text(text, academic_database.id)

    assert result['errors'] == ['Row 3: Subject 1 Unit Test must be between 0-20']
    assert result['inserted'] == 2
    assert result['rows_read'] == 3
    assert result['rows_rejected'] == 1
    seats = {r['seat_number'] for r in store.select_records_by_scope(academic_database.id)}
    assert seats == {111111, 333333}


def test_reimport_skips_existing_seats(importer, store, academic_database, header_c, csv_row, scheme_c):
    text = upload(header_c, csv_row(scheme_c, seat_number=111111))
    importer.import_text(text, academic_database.id)

    again = upload(header_c, csv_row(scheme_c, seat_number=111111), csv_row(scheme_c, seat_number=444444))
    result = importer.import_text(again, academic_database.id)

    assert result['inserted'] == 1
    assert result['duplicates_skipped'] == 1
    assert result['duplicate_seat_numbers'] == [111111]
    assert result['errors'] == []
    assert len(store.select_records_by_scope(academic_database.id)) == 2


def test_existing_seat_in_another_database_is_skipped(importer, store, academic_database,
                                                      header_c, csv_row, scheme_c):
    other = store.create_academic_database(
        database_name='TE IT', branch='Information Technology', batch='2022 - 2026',
        semester=6, academic_year='2024-2025', year_classification='3rd Year',
    )
    importer.import_text(upload(header_c, csv_row(scheme_c, seat_number=555555)), other.id)

    result = importer.import_text(upload(header_c, csv_row(scheme_c, seat_number=555555)),
                                  academic_database.id)

    assert result['inserted'] == 0
    assert result['duplicate_seat_numbers'] == [555555]
    assert store.select_records_by_scope(academic_database.id) == []


def test_repeated_seat_within_file_keeps_first(importer, store, academic_database, header_c, csv_row, scheme_c):
    text = upload(
        header_c,
        csv_row(scheme_c, seat_number=111111, student_name='First'),
        csv_row(scheme_c, seat_number=111111, student_name='Second'),
    )
    result = importer.import_text(text, academic_database.id)

    assert result['inserted'] == 1
    assert result['duplicates_skipped'] == 1
    assert [r['student_name'] for r in store.select_records_by_scope(academic_database.id)] == ['First']


def test_dry_run_does_not_insert(importer, store, academic_database, header_c, csv_row, scheme_c):
    result = importer.import_text(upload(header_c, csv_row(scheme_c)), academic_database.id, dry_run=True)

    assert len(result['accepted']) == 1
    assert result['inserted'] == 0
    assert store.select_records_by_scope(academic_database.id) == []


def test_header_error_inserts_nothing(importer, store, academic_database, csv_row, scheme_c):
    result = importer.import_text(upload('Seat Number,Roll No', csv_row(scheme_c)), academic_database.id)

    assert result['accepted'] == []
    assert result['inserted'] == 0
    assert all(e.startswith('Missing header: ') for e in result['errors'])
    assert result['rows_rejected'] == 1


def test_missing_database_reports_upload_failure(importer, header_c, csv_row, scheme_c):
    result = importer.import_text(upload(header_c, csv_row(scheme_c)), 99)

    assert result['inserted'] == 0
    assert result['errors'] == ['Upload failed: Academic database 99 not found']


def test_import_file_with_byte_order_mark(importer, academic_database, header_c, scenario_row, tmp_path):
    csv_path = tmp_path / 'upload.csv'
    csv_path.write_text(upload(header_c, scenario_row), encoding='utf-8-sig')

    result = importer.import_file(str(csv_path), academic_database.id)

    assert result['errors'] == []
    assert result['inserted'] == 1
    assert importer.stats['files_processed'] == 1


def test_stats_accumulate(importer, academic_database, header_c, csv_row, scheme_c):
    importer.import_text(upload(header_c, csv_row(scheme_c, seat_number=111111),
                                csv_row(scheme_c, seat_number=1)), academic_database.id)
    importer.import_text(upload(header_c, csv_row(scheme_c, seat_number=111111)), academic_database.id)

    assert importer.stats == {
        'files_processed': 0,
        'rows_read': 3,
        'rows_rejected': 1,
        'duplicates_skipped': 1,
        'records_inserted': 1,
    }


def test_preview_leaves_store_untouched(importer, store, academic_database, header_c, csv_row, scheme_c):
    preview = importer.preview(upload(header_c, csv_row(scheme_c), csv_row(scheme_c, seat_number=7)))

    assert len(preview['accepted']) == 1
    assert len(preview['errors']) == 1
    assert store.select_records_by_scope(academic_database.id) == []


def test_log_file_attached_after_console_only_importer(store, scheme_c, academic_database,
                                                       header_c, scenario_row, tmp_path):
    BulkStudentImporter(store, scheme_c)
    importer = BulkStudentImporter(store, scheme_c, log_dir=str(tmp_path / 'logs'))

    importer.import_text(upload(header_c, scenario_row), academic_database.id)

    log_file = tmp_path / 'logs' / 'bulk_import.log'
    assert importer.log_file == str(log_file)
    assert '1 students uploaded successfully' in log_file.read_text()


def test_rows_read_splits_on_newline_only(importer, header_c, scenario_row):
    preview = importer.preview(upload(header_c, scenario_row.replace('John Doe', 'John\x0cDoe')))

    assert preview['rows_read'] == 1
    assert preview['accepted'][0]['student_name'] == 'John\x0cDoe'
