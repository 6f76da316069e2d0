# ===== IMPORTS SERVICES - CSV PROCESSING PIPELINE =====
"""
CSV Processing Services for the Flight School Import System
File: imports/services.py

Shared pipeline for every dataset import. A dataset service subclasses
CSVImportService, declares its header aliases and required fields and
implements ``process_row``; everything else lives here:

- Decoding, delimiter sniffing and header normalization
- Required column checks before any row is touched
- One savepoint per row, so a failing row is rolled back alone
- Row-level error records and warnings
- Progress saved every IMPORT_PROGRESS_INTERVAL rows
- Quality scoring and batch finalization
"""

import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .models import ImportBatch, ImportRowError

logger = logging.getLogger(__name__)

OUTCOMES = ('created', 'updated', 'skipped')


# =============================================================================
# ROW ERRORS
# =============================================================================

class RowProcessingError(Exception):
    """
    Raised by ``process_row`` to reject a single row.

    ``error_type`` is one of ImportRowError.ERROR_TYPE_CHOICES.
    """

    def __init__(self, message, error_type='VALIDATION', field_name=''):
        super().__init__(message)
        self.error_type = error_type
        self.field_name = field_name


def quality_score(processed: int, errors: int, warnings: int = 0) -> int:
    """100 minus 50 per unit error rate and 20 per unit warning rate, clamped to 0..100."""
    if processed == 0:
        return 0

    error_rate = errors / processed
    warning_rate = warnings / processed

    score = 100
    score -= (error_rate * 50)
    score -= (warning_rate * 20)
    return max(0, min(100, int(score)))


def _validation_message(error: ValidationError) -> str:
    if hasattr(error, 'message_dict'):
        return '; '.join(f"{field}: {', '.join(msgs)}" for field, msgs in error.message_dict.items())
    return '; '.join(error.messages)


# =============================================================================
# CSV PROCESSING SERVICE
# =============================================================================

class CSVImportService:
    """
    Base service for processing one CSV import batch.

    Subclasses set:
        data_type: ImportBatch data type handled by the service
        HEADERS: field name -> accepted header spellings (normalized)
        REQUIRED_FIELDS: fields every file must have a column for
        TEMPLATE_ROWS: sample rows for the downloadable template
    """

    data_type = None
    HEADERS: Dict[str, List[str]] = {}
    REQUIRED_FIELDS: List[str] = []
    TEMPLATE_ROWS: List[Dict[str, str]] = []

    def __init__(self, import_batch: ImportBatch, user=None):
        self.import_batch = import_batch
        self.user = user or import_batch.created_by
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.processed_count = 0
        self.created_count = 0
        self.updated_count = 0
        self.skipped_count = 0
        self.failed_count = 0
        self.progress_interval = max(1, int(getattr(settings, 'IMPORT_PROGRESS_INTERVAL', 10)))

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def process_csv_file(self, file_content) -> Dict[str, Any]:
        """
        Process CSV content and create/update records.

        Batch-level problems (undecodable file, no rows, missing required
        columns) mark the batch failed and are reported in the results.
        Unexpected errors also mark it failed and are re-raised.
        """
        logger.info(f"Starting {self.data_type} import for batch {self.import_batch.batch_id}")
        self.import_batch.mark_as_processing()

        try:
            headers, csv_data = self._parse_csv_content(self._decode(file_content))
            self._check_required_columns(headers)
            if not csv_data:
                raise ValueError("No data rows found in CSV file")

            self._process_csv_records(csv_data)
            self._finalize_import_batch(self._calculate_import_quality())

        except ValueError as e:
            logger.error(f"{self.data_type} import failed for batch {self.import_batch.batch_id}: {str(e)}")
            self._handle_processing_error(str(e))

        except Exception as e:
            logger.error(f"{self.data_type} import crashed for batch {self.import_batch.batch_id}: {str(e)}")
            self._handle_processing_error(str(e))
            raise

        return self._generate_processing_results()

    def process_row(self, row: Dict[str, str], row_number: int) -> str:
        """Handle one normalized row; return 'created', 'updated' or 'skipped'."""
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    @staticmethod
    def _decode(file_content) -> str:
        if isinstance(file_content, bytes):
            try:
                return file_content.decode('utf-8-sig')
            except UnicodeDecodeError as e:
                raise ValueError(f"File is not valid UTF-8: {str(e)}")
        return file_content.lstrip('\ufeff')

    def _parse_csv_content(self, content: str) -> Tuple[List[str], List[Dict[str, Any]]]:
        """
        Parse CSV content into normalized rows.

        Returns:
            Tuple of (mapped field names, rows); each row carries ``_row_number``
            (header is line 1, first data row is line 2)
        """
        if not content.strip():
            raise ValueError("CSV file is empty")

        try:
            delimiter = csv.Sniffer().sniff(content[:1024], delimiters=',;\t|').delimiter
        except csv.Error:
            delimiter = ','

        reader = csv.DictReader(io.StringIO(content), delimiter=delimiter)
        if not reader.fieldnames:
            raise ValueError("CSV file has no header row")

        headers_mapping = self._create_headers_mapping(reader.fieldnames)

        normalized_data = []
        try:
            for row in reader:
                normalized_row = self._normalize_row_data(row, headers_mapping)
                if not normalized_row:
                    continue
                # reader.line_num is the physical line the row ended on
                normalized_row['_row_number'] = reader.line_num
                normalized_data.append(normalized_row)
        except csv.Error as e:
            raise ValueError(f"Failed to parse CSV content: {str(e)}")

        logger.info(f"Parsed {len(normalized_data)} rows from CSV")
        return list(headers_mapping.values()), normalized_data

    @staticmethod
    def normalize_header(header: str) -> str:
        return header.lower().strip().replace(' ', '_').replace('-', '_')

    def _create_headers_mapping(self, csv_headers: List[str]) -> Dict[str, str]:
        """Map normalized CSV headers to field names; unknown headers keep their name."""
        aliases = {}
        for field_name, spellings in self.HEADERS.items():
            aliases[field_name] = field_name
            for spelling in spellings:
                aliases.setdefault(spelling, field_name)

        mapping = {}
        for header in csv_headers:
            if not header:
                continue
            clean = self.normalize_header(header)
            mapping[clean] = aliases.get(clean, clean)

        logger.debug(f"Created header mapping: {mapping}")
        return mapping

    def _normalize_row_data(self, row: Dict[str, str], headers_mapping: Dict[str, str]) -> Dict[str, str]:
        normalized = {}
        for csv_key, csv_value in row.items():
            if not csv_key or csv_value is None:
                continue
            clean_value = str(csv_value).strip()
            if clean_value:
                clean_key = self.normalize_header(csv_key)
                normalized[headers_mapping.get(clean_key, clean_key)] = clean_value
        return normalized

    def _check_required_columns(self, headers: List[str]) -> None:
        missing = [field for field in self.REQUIRED_FIELDS if field not in headers]
        if missing:
            raise ValueError(f"Missing required columns: {', '.join(missing)}")

    # -------------------------------------------------------------------------
    # Row processing
    # -------------------------------------------------------------------------

    def _process_csv_records(self, csv_data: List[Dict[str, Any]]) -> None:
        self.import_batch.records_total = len(csv_data)
        self.import_batch.save(update_fields=['records_total', 'updated_at'])

        for row_data in csv_data:
            row_number = row_data.pop('_row_number')
            try:
                with transaction.atomic():
                    outcome = self.process_row(row_data, row_number)
            except RowProcessingError as e:
                self._record_row_error(row_number, row_data, e.error_type, str(e), e.field_name)
            except ValidationError as e:
                self._record_row_error(row_number, row_data, 'VALIDATION', _validation_message(e))
            except Exception as e:
                self._record_row_error(row_number, row_data, 'PROCESSING', str(e))
            else:
                self._count_outcome(outcome)

            self.processed_count += 1
            if self.processed_count % self.progress_interval == 0:
                self._save_progress()

    def _count_outcome(self, outcome: str) -> None:
        if outcome not in OUTCOMES:
            raise ValueError(f"Unknown row outcome: {outcome}")
        setattr(self, f"{outcome}_count", getattr(self, f"{outcome}_count") + 1)

    def _record_row_error(self, row_number: int, row_data: Dict[str, Any], error_type: str,
                          message: str, field_name: str = '') -> None:
        self.failed_count += 1
        self.errors.append(f"Row {row_number}: {message}")
        logger.warning(f"Batch {self.import_batch.batch_id} row {row_number}: {message}")
        ImportRowError.objects.create(
            import_batch=self.import_batch,
            error_type=error_type,
            row_number=row_number,
            field_name=field_name or '',
            error_message=message,
            raw_data=row_data,
        )

    def warn(self, row_number: int, message: str) -> None:
        self.warnings.append(f"Row {row_number}: {message}")

    def _save_progress(self) -> None:
        batch = self.import_batch
        batch.records_processed = self.processed_count
        batch.records_created = self.created_count
        batch.records_updated = self.updated_count
        batch.records_skipped = self.skipped_count
        batch.records_failed = self.failed_count
        batch.save(update_fields=[
            'records_processed', 'records_created', 'records_updated',
            'records_skipped', 'records_failed', 'updated_at',
        ])

    # -------------------------------------------------------------------------
    # Field helpers for process_row
    # -------------------------------------------------------------------------

    def require(self, row: Dict[str, str], *fields: str) -> None:
        missing = [f for f in fields if not row.get(f)]
        if missing:
            raise RowProcessingError(
                f"Missing required fields: {', '.join(missing)}",
                error_type='MISSING_DATA',
                field_name=missing[0],
            )

    @staticmethod
    def parse_int(row: Dict[str, str], field_name: str, default: Optional[int] = None) -> Optional[int]:
        value = row.get(field_name)
        if not value:
            return default
        try:
            return int(float(value.replace(',', '')))
        except ValueError:
            raise RowProcessingError(f"Invalid number for {field_name}: {value}", 'FORMAT', field_name)

    @staticmethod
    def parse_decimal(row: Dict[str, str], field_name: str) -> Optional[Decimal]:
        value = row.get(field_name)
        if not value:
            return None
        try:
            return Decimal(value.replace(',', ''))
        except InvalidOperation:
            raise RowProcessingError(f"Invalid number for {field_name}: {value}", 'FORMAT', field_name)

    DATE_FORMATS = ('%Y-%m-%d', '%d.%m.%Y', '%d/%m/%Y', '%Y/%m/%d', '%Y%m%d')

    @classmethod
    def parse_date(cls, row: Dict[str, str], field_name: str) -> Optional[date]:
        value = row.get(field_name)
        if not value:
            return None
        # ISO timestamps exported by other systems carry a time part
        text = value.split('T')[0].strip()
        for fmt in cls.DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise RowProcessingError(f"Invalid date for {field_name}: {value}", 'FORMAT', field_name)

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def _calculate_import_quality(self) -> int:
        return quality_score(self.processed_count, len(self.errors), len(self.warnings))

    def _finalize_import_batch(self, quality_score: int) -> None:
        batch = self.import_batch
        batch.status = 'completed'
        batch.records_processed = self.processed_count
        batch.records_created = self.created_count
        batch.records_updated = self.updated_count
        batch.records_skipped = self.skipped_count
        batch.records_failed = self.failed_count
        batch.quality_score = quality_score
        batch.has_errors = self.failed_count > 0
        batch.completed_at = timezone.now()

        if self.errors:
            batch.error_message = f"{len(self.errors)} rows failed during processing"

        if self.warnings:
            batch.validation_results = {
                'warnings': self.warnings[:10],
                'warning_count': len(self.warnings),
            }

        batch.save()

        logger.info(f"Import batch {batch.batch_id} completed: "
                    f"{self.processed_count} processed, {self.created_count} created, "
                    f"{self.updated_count} updated, {self.skipped_count} skipped, "
                    f"{self.failed_count} failed")

    def _handle_processing_error(self, error_message: str) -> None:
        self.import_batch.mark_as_failed(error_message)

    def _generate_processing_results(self) -> Dict[str, Any]:
        batch = self.import_batch
        return {
            'batch_id': str(batch.batch_id),
            'data_type': batch.data_type,
            'status': batch.status,
            'records_total': batch.records_total,
            'records_processed': self.processed_count,
            'records_created': self.created_count,
            'records_updated': self.updated_count,
            'records_skipped': self.skipped_count,
            'records_failed': self.failed_count,
            'error_count': len(self.errors),
            'warning_count': len(self.warnings),
            'quality_score': batch.quality_score,
            'error_message': batch.error_message,
            'errors': self.errors[:5],
            'warnings': self.warnings[:5],
        }

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    @classmethod
    def template_csv(cls) -> str:
        fieldnames = list(cls.HEADERS.keys())
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fieldnames, lineterminator='\n')
        writer.writeheader()
        for row in cls.TEMPLATE_ROWS:
            writer.writerow({name: row.get(name, '') for name in fieldnames})
        return output.getvalue()
