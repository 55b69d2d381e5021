"""Workbook binding for import models.

Generates ``.xlsx`` templates from an import model and binds filled-in
sheets back to typed, validated records.
"""

from __future__ import annotations

from .core import (
    FieldErrorReport,
    ImportResult,
    decode_row,
    decode_rows,
    open_worksheet,
    reconcile_header,
)
from .importer import ExcelImporter, import_workbook
from .template import build_template, save_template, template_bytes
from .validation import format_report_messages, validate_records

__all__ = [
    "ExcelImporter",
    "FieldErrorReport",
    "ImportResult",
    "build_template",
    "decode_row",
    "decode_rows",
    "format_report_messages",
    "import_workbook",
    "open_worksheet",
    "reconcile_header",
    "save_template",
    "template_bytes",
    "validate_records",
]
