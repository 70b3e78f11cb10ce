"""
Data import for exposé drafts
Supports JSON (object or array) and CSV files with a header row
"""
import csv
import io
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from ..database.store import DuplicateFileNameError, ExposeStore, ExposeValidationError
from ..models.expose import normalize_record
from ..services.calculator import recompute

LOGGER = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Result of an import run"""
    total: int = 0
    successful: int = 0
    failed: int = 0
    results: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def add_success(self, reference: str, expose_id: str, file_name: str = None):
        """Add a successful result"""
        self.successful += 1
        self.results.append({
            'reference': reference,
            'expose_id': expose_id,
            'file_name': file_name,
            'status': 'success',
        })

    def add_failure(self, reference: str, error: str, data: dict = None):
        """Add a failed result"""
        self.failed += 1
        self.errors.append({
            'reference': reference,
            'error': error,
            'status': 'failed',
            'data': data,
        })

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': f"{(self.successful / self.total * 100):.1f}%" if self.total > 0 else "0%",
            'results': self.results,
            'errors': self.errors,
        }

    def __str__(self):
        return f"ImportResult(total={self.total}, successful={self.successful}, failed={self.failed})"


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Rows of a CSV text with a header row; ',' ';' and tab delimiters are detected"""
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    try:
        dialect = csv.Sniffer().sniff(lines[0], delimiters=',;\t')
        delimiter = dialect.delimiter
    except csv.Error:
        delimiter = ','

    reader = csv.DictReader(io.StringIO('\n'.join(lines)), delimiter=delimiter)
    rows = []
    for row in reader:
        rows.append({
            key.strip(): (value or '').strip()
            for key, value in row.items()
            if key and key.strip()
        })
    return rows


def parse_rows(text: str) -> List[Dict[str, Any]]:
    """
    Parse import data: a JSON array or object, otherwise CSV

    Returns:
        List of raw row dictionaries
    """
    try:
        data = json.loads(text)
    except ValueError:
        return parse_csv(text)

    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    if isinstance(data, dict):
        # Handle both a single record and an object with an 'exposes' key
        nested = data.get('exposes')
        if isinstance(nested, list):
            return [row for row in nested if isinstance(row, dict)]
        return [data]
    return []


def parse_data_file(source: Union[str, Path, bytes]) -> List[Dict[str, Any]]:
    """Parse an import file given as a path or raw bytes"""
    if isinstance(source, bytes):
        text = source.decode('utf-8-sig')
    else:
        text = Path(source).read_text(encoding='utf-8-sig')
    return parse_rows(text)


def rows_to_records(rows: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Normalise raw rows into PropertyRecords with fresh derived fields"""
    return [recompute(normalize_record(row)) for row in rows]


def import_records(
    store: ExposeStore,
    rows: List[Dict[str, Any]],
    label: str = None,
    progress_callback: Callable[[int, int, str], None] = None
) -> ImportResult:
    """
    Save every row as a draft

    The draft label comes from the row ('label' or 'merkmal' column), else
    `label`, else the row number. A row that cannot be saved is recorded as
    a failure; the others are still imported.

    Args:
        store: Target store
        rows: Raw rows from parse_rows / parse_data_file
        label: Default label
        progress_callback: Optional callback(current, total, status)

    Returns:
        ImportResult with per-row outcome
    """
    result = ImportResult(total=len(rows))

    for i, row in enumerate(rows):
        record = recompute(normalize_record(row))
        given = [record.pop('label', ''), record.pop('merkmal', '')]
        row_label = next((value for value in given if value), '') or label or f"import {i + 1}"
        reference = record.get('adresse') or f"row_{i + 1}"

        if progress_callback:
            progress_callback(i + 1, result.total, f"Importing: {reference}")

        try:
            expose_id = store.save(None, record.get('adresse', ''), row_label, record, [])
            result.add_success(reference, expose_id, store.generate_file_name(record.get('adresse', ''), row_label))
        except (ExposeValidationError, DuplicateFileNameError) as e:
            LOGGER.warning("import row %d failed: %s", i + 1, e.message)
            result.add_failure(reference, e.message, data=row)

    if progress_callback:
        progress_callback(result.total, result.total, "Complete")

    LOGGER.info("import finished: %s", result)
    return result
