"""
=============================================================================
Bulk Importer for Student Records
=============================================================================

Orchestrates the bulk upload workflow:
1. Reads the CSV file (UTF-8, byte-order mark tolerated)
2. Validates every row against the active mark scheme
3. Skips seat numbers already in the store (any academic database) and
   repeats within the same file
4. Inserts the remaining records into the target academic database
5. Reports accepted rows, errors and skipped duplicates together

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import os
import logging
from typing import Dict, List, Any

from mark_schemes import MarkScheme
from import_validator import ImportValidator, split_lines
from record_store import RecordStore, RecordStoreError


class BulkStudentImporter:
    """
    Bulk importer for validated student records.
    """

    def __init__(self, record_store: RecordStore, scheme: MarkScheme,
                 log_dir: str = None):
        """
        Initialize bulk importer.

        Args:
            record_store: Store the records are written to
            scheme: Active mark scheme
            log_dir: Directory for bulk_import.log (console only when None)
        """
        self.record_store = record_store
        self.scheme = scheme
        self.validator = ImportValidator(scheme)
        self.log_dir = log_dir

        self._setup_logging()

        # Statistics tracking
        self.stats = {
            'files_processed': 0,
            'rows_read': 0,
            'rows_rejected': 0,
            'duplicates_skipped': 0,
            'records_inserted': 0
        }

    def _setup_logging(self):
        """Configure logging"""
        self.logger = logging.getLogger('BulkImporter')
        self.logger.setLevel(logging.DEBUG)

        formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

        self.log_file = None
        if self.log_dir:
            self.log_file = os.path.abspath(os.path.join(self.log_dir, 'bulk_import.log'))

        # The file handler follows the newest importer's log_dir
        attached = False
        for handler in list(self.logger.handlers):
            if not isinstance(handler, logging.FileHandler):
                continue
            if handler.baseFilename == self.log_file:
                attached = True
            else:
                self.logger.removeHandler(handler)
                handler.close()

        if self.log_file and not attached:
            os.makedirs(self.log_dir, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        # Console handler once per process
        if not any(type(h) is logging.StreamHandler for h in self.logger.handlers):
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

    def read_csv(self, csv_path: str) -> str:
        """
        Read a CSV upload as text.

        Args:
            csv_path: Path to CSV file

        Returns:
            File contents
        """
        with open(csv_path, 'r', encoding='utf-8-sig') as f:
            return f.read()

    def preview(self, raw_text: str) -> Dict[str, Any]:
        """
        Validate without touching the store.

        Returns:
            Dict with accepted records, errors and counts
        """
        accepted, errors = self.validator.validate(raw_text)
        rows_read = len([line for line in split_lines((raw_text or '').strip())[1:] if line.strip()])
        return {
            'accepted': accepted,
            'errors': errors,
            'rows_read': rows_read,
            'rows_rejected': rows_read - len(accepted),
        }

    def _partition_duplicates(self, records: List[Dict[str, Any]]):
        """Split records into (new, duplicate seat numbers)"""
        existing = self.record_store.select_existing_seat_numbers(
            r['seat_number'] for r in records
        )

        unique = []
        duplicates = []
        seen = set()
        for record in records:
            seat_number = record['seat_number']
            if seat_number in existing or seat_number in seen:
                duplicates.append(seat_number)
                continue
            seen.add(seat_number)
            unique.append(record)

        return unique, duplicates

    def import_text(self, raw_text: str, database_id: int, dry_run: bool = False) -> Dict[str, Any]:
        """
        Validate and store an upload.

        Args:
            raw_text: CSV text
            database_id: Target academic database
            dry_run: Validate and check duplicates without inserting

        Returns:
            Result dictionary (accepted, errors, inserted, duplicates_skipped,
            duplicate_seat_numbers, rows_read, rows_rejected)
        """
        result = self.preview(raw_text)
        result.update({
            'inserted': 0,
            'duplicates_skipped': 0,
            'duplicate_seat_numbers': [],
        })

        self.stats['rows_read'] += result['rows_read']
        self.stats['rows_rejected'] += result['rows_rejected']

        for error in result['errors']:
            self.logger.warning(f"  {error}")

        if not result['accepted']:
            self.logger.info("No valid records to upload")
            return result

        unique, duplicates = self._partition_duplicates(result['accepted'])
        result['duplicates_skipped'] = len(duplicates)
        result['duplicate_seat_numbers'] = duplicates
        self.stats['duplicates_skipped'] += len(duplicates)

        if duplicates:
            self.logger.warning(
                f"{len(duplicates)} students with existing seat numbers will be skipped"
            )

        if not unique:
            self.logger.info("No new students: all students in the file already exist")
            return result

        if dry_run:
            self.logger.info(f"Dry run: {len(unique)} students would be uploaded")
            return result

        try:
            inserted = self.record_store.insert_records(database_id, unique)
        except RecordStoreError as e:
            self.logger.error(f"Upload failed: {e}")
            result['errors'] = result['errors'] + [f"Upload failed: {e}"]
            return result

        result['inserted'] = inserted
        self.stats['records_inserted'] += inserted

        if duplicates:
            self.logger.info(f"{inserted} new students uploaded ({len(duplicates)} duplicates skipped)")
        else:
            self.logger.info(f"{inserted} students uploaded successfully")
        return result

    def import_file(self, csv_path: str, database_id: int, dry_run: bool = False) -> Dict[str, Any]:
        """
        Import one CSV file into an academic database.

        Args:
            csv_path: Path to CSV file
            database_id: Target academic database
            dry_run: Validate and check duplicates without inserting

        Returns:
            Result dictionary, see import_text
        """
        self.logger.info("=" * 70)
        self.logger.info(f"Importing: {os.path.basename(csv_path)} (scheme {self.scheme.name})")
        self.logger.info("=" * 70)

        raw_text = self.read_csv(csv_path)
        result = self.import_text(raw_text, database_id, dry_run=dry_run)
        self.stats['files_processed'] += 1

        self.logger.info(
            f"Rows read: {result['rows_read']}, accepted: {len(result['accepted'])}, "
            f"errors: {len(result['errors'])}, inserted: {result['inserted']}"
        )
        return result
