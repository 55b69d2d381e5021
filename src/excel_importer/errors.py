"""Exception hierarchy for workbook imports.

Configuration problems (bad schema metadata, missing sheet, empty path) and
fatal data problems (row limit, unknown choice label) abort the call. Per-row
field validation failures are never raised; they are collected into
``ImportResult.reports``.
"""

from __future__ import annotations

from typing import Sequence


class ExcelImportError(Exception):
    """Base exception for every error raised by the importer."""


class ConfigurationError(ExcelImportError):
    """Raised when the importer is called with unusable configuration."""


class SchemaError(ConfigurationError):
    """Raised when a record type's declared metadata is missing or invalid."""


class SheetNotFoundError(SchemaError):
    """Raised when the workbook has no sheet with the bound name."""

    def __init__(self, sheet_name: str, available: Sequence[str]) -> None:
        self.sheet_name = sheet_name
        self.available = list(available)
        super().__init__(
            f"Sheet '{sheet_name}' not found in workbook. "
            f"Available sheets: {self.available}"
        )


class RowLimitExceededError(ExcelImportError):
    """Raised when a sheet holds more data rows than the binding allows."""

    def __init__(self, limit: int, row_count: int) -> None:
        self.limit = limit
        self.row_count = row_count
        super().__init__(
            f"Sheet holds {row_count} data rows; at most {limit} rows can be imported."
        )


class InvalidChoiceValueError(ExcelImportError):
    """Raised when an enumeration cell holds a label outside its choice list."""

    def __init__(
        self,
        value: str,
        field_name: str,
        choices: Sequence[str],
        *,
        row_number: int | None = None,
    ) -> None:
        self.value = value
        self.field_name = field_name
        self.choices = list(choices)
        self.row_number = row_number
        location = f" (sheet row {row_number})" if row_number is not None else ""
        super().__init__(
            f"Value {value!r} for field '{field_name}'{location} is not one of the "
            f"template choices {self.choices}"
        )
