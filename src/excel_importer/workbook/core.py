"""Core import types and functions.

This module is codec-agnostic beyond openpyxl's worksheet API and contains
the header check and the row decoder. Validation of decoded records lives
in ``validation``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Sequence, TypeVar

from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet
from pydantic import BaseModel

from ..config import ImporterSettings
from ..errors import InvalidChoiceValueError, RowLimitExceededError, SheetNotFoundError
from ..schema import ColumnDescriptor, SchemaBinding, SchemaDescriptor, ValueKind
from .cells import cell_text, coerce_cell

logger = logging.getLogger(__name__)

# Type variable for import models
TModel = TypeVar("TModel", bound=BaseModel)

HEADER_ROW = 1
DATA_ROW_START = HEADER_ROW + 1


@dataclass(frozen=True)
class FieldErrorReport:
    """Validation failures of one decoded record.

    Attributes:
        row_index: 1-based position of the record in ``ImportResult.records``
            (blank sheet rows are not counted)
        field_errors: display name -> comma-joined messages, in emission order
        summary_errors: tag -> message, e.g. ``{"Invalid": "import data invalid"}``
    """

    row_index: int
    field_errors: dict[str, str] = field(default_factory=dict)
    summary_errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportResult(Generic[TModel]):
    """Complete result of one import call.

    Attributes:
        template_valid: False when the header row does not match the model;
            ``records`` and ``reports`` are then empty
        records: Decoded records in sheet order, blank rows omitted
        reports: One report per record that failed validation
    """

    template_valid: bool
    records: tuple[TModel, ...] = ()
    reports: tuple[FieldErrorReport, ...] = ()

    @property
    def has_errors(self) -> bool:
        """Check if the import produced anything other than clean records."""
        return not self.template_valid or bool(self.reports)

    @property
    def valid_records(self) -> list[TModel]:
        """Records without a validation report."""
        invalid = {report.row_index for report in self.reports}
        return [
            record
            for index, record in enumerate(self.records, start=1)
            if index not in invalid
        ]


def open_worksheet(workbook: Workbook, binding: SchemaBinding) -> Worksheet:
    """Return the bound worksheet.

    Raises:
        SheetNotFoundError: If the workbook has no sheet named ``binding.sheet_name``
    """
    if binding.sheet_name not in workbook.sheetnames:
        raise SheetNotFoundError(binding.sheet_name, workbook.sheetnames)
    return workbook[binding.sheet_name]


def reconcile_header(worksheet: Worksheet, schema: SchemaDescriptor) -> bool:
    """Check that the header row holds the expected display names in order.

    Comparison is exact: no trimming and no case folding. Columns beyond the
    schema are ignored.
    """
    header = next(
        worksheet.iter_rows(
            min_row=HEADER_ROW,
            max_row=HEADER_ROW,
            min_col=1,
            max_col=len(schema),
            values_only=True,
        )
    )
    for column in schema:
        actual = cell_text(header[column.position - 1])
        if actual != column.header_text:
            logger.info(
                "Header mismatch in column %d: expected %r, found %r",
                column.position,
                column.header_text,
                actual,
            )
            return False
    return True


def is_blank_row(values: Sequence[Any]) -> bool:
    """Check if every cell of a row renders to empty text."""
    return all(cell_text(value) == "" for value in values)


def check_row_limit(worksheet: Worksheet, binding: SchemaBinding) -> int:
    """Return the number of data rows, failing if it exceeds the binding's limit.

    Raises:
        RowLimitExceededError: If the used range holds more data rows than
            ``binding.max_row_number``
    """
    row_count = max(worksheet.max_row - HEADER_ROW, 0)
    if row_count > binding.max_row_number:
        raise RowLimitExceededError(binding.max_row_number, row_count)
    return row_count


def _decode_choice(
    value: Any,
    column: ColumnDescriptor,
    settings: ImporterSettings,
    row_number: int | None,
) -> Any:
    text = cell_text(value)
    choices = column.enum_choices or {}
    if text in choices:
        return choices[text]
    if column.nullable and text == "":
        return None
    if settings.strict_choices:
        raise InvalidChoiceValueError(
            text, column.field_name, list(choices), row_number=row_number
        )
    # Kept raw so that validation reports it against this row.
    return text


def decode_row(
    values: Sequence[Any],
    schema: SchemaDescriptor,
    settings: ImporterSettings,
    row_number: int | None = None,
) -> BaseModel:
    """Decode one row of raw cell values into an unvalidated record.

    Each field finds its cell through its descriptor's position, so the
    order of ``values`` follows the sheet, not the model.
    """
    data: dict[str, Any] = {}
    for field_name in schema.model.model_fields:
        column = schema.column_for(field_name)
        if column is None:
            continue
        index = column.position - 1
        value = values[index] if index < len(values) else None

        if column.value_kind is ValueKind.enumeration:
            data[field_name] = _decode_choice(value, column, settings, row_number)
        else:
            data[field_name] = coerce_cell(value, column, settings)

    return schema.model.model_construct(**data)


def decode_rows(
    worksheet: Worksheet,
    schema: SchemaDescriptor,
    binding: SchemaBinding,
    settings: ImporterSettings,
) -> list[BaseModel]:
    """Decode every non-blank data row of a header-checked worksheet.

    Raises:
        RowLimitExceededError: Before any row is decoded, if the sheet is too large
        InvalidChoiceValueError: If ``settings.strict_choices`` is set and an
            enumeration cell holds an unknown label
    """
    row_count = check_row_limit(worksheet, binding)
    max_col = max(worksheet.max_column, len(schema))

    records: list[BaseModel] = []
    skipped = 0
    for row_number, values in enumerate(
        worksheet.iter_rows(
            min_row=DATA_ROW_START,
            max_row=worksheet.max_row,
            max_col=max_col,
            values_only=True,
        ),
        start=DATA_ROW_START,
    ):
        if is_blank_row(values):
            skipped += 1
            continue
        records.append(decode_row(values, schema, settings, row_number))

    logger.debug(
        "Decoded %d records from %d data rows (%d blank rows skipped)",
        len(records),
        row_count,
        skipped,
    )
    return records
