"""Template workbook generation.

Lays out one header row from a model's column descriptors: required headers
in the required font color, header comments from field descriptions, and a
list validation restricting every enumeration/boolean column to its choices.
Lists that cannot be written inline live on a hidden choices sheet.
"""

from __future__ import annotations

import io
import logging
import os
import unicodedata
from pathlib import Path
from typing import Sequence, Type

from openpyxl import Workbook
from openpyxl.comments import Comment
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.workbook.defined_name import DefinedName
from openpyxl.worksheet.datavalidation import DataValidation
from pydantic import BaseModel

from ..config import ImporterSettings, load_settings
from ..errors import ConfigurationError
from ..schema import ColumnDescriptor, ColumnKind, build_descriptors
from ..schema.model import template_sheet_name
from .core import DATA_ROW_START, HEADER_ROW

logger = logging.getLogger(__name__)

# Last addressable row of an .xlsx worksheet.
EXCEL_MAX_ROWS = 1_048_576

# Excel rejects inline list formulas longer than this.
_LIST_FORMULA_LIMIT = 255

# Hidden sheet holding choice lists that cannot be written inline.
CHOICES_SHEET_NAME = "_Choices"


def choice_labels(column: ColumnDescriptor, settings: ImporterSettings) -> list[str]:
    """Ordered choices a column is restricted to (empty for plain columns)."""
    if column.kind is ColumnKind.enumeration:
        return list(column.enum_choices or {})
    if column.kind is ColumnKind.boolean:
        return [settings.true_label, settings.false_label]
    return []


def list_formula(labels: Sequence[str]) -> str:
    """Inline list formula for a data validation, e.g. ``'"是,否"'``."""
    return '"' + ",".join(label.replace('"', '""') for label in labels) + '"'


def needs_choice_range(labels: Sequence[str]) -> bool:
    """Check if ``labels`` cannot be expressed as an inline list formula.

    Excel splits inline lists on commas and caps them at 255 characters.
    """
    return any("," in label for label in labels) or len(list_formula(labels)) > _LIST_FORMULA_LIMIT


def _choice_range(workbook: Workbook, column: ColumnDescriptor, labels: Sequence[str]) -> str:
    """Write ``labels`` to the hidden choices sheet and return a defined name for them.

    Each template column owns the same column on the choices sheet.
    """
    if CHOICES_SHEET_NAME in workbook.sheetnames:
        sheet = workbook[CHOICES_SHEET_NAME]
    else:
        sheet = workbook.create_sheet(CHOICES_SHEET_NAME)
        sheet.sheet_state = "hidden"

    for row, label in enumerate(labels, start=1):
        sheet.cell(row=row, column=column.position, value=label)

    letter = get_column_letter(column.position)
    name = f"Choices_{column.field_name}"
    workbook.defined_names[name] = DefinedName(
        name,
        attr_text=f"'{CHOICES_SHEET_NAME}'!${letter}$1:${letter}${len(labels)}",
    )
    return name


def _display_width(text: str) -> int:
    return sum(2 if unicodedata.east_asian_width(char) in ("W", "F") else 1 for char in text)


def build_template(
    model: Type[BaseModel],
    settings: ImporterSettings | None = None,
) -> Workbook:
    """Build an in-memory template workbook for ``model``.

    Raises:
        SchemaError: If the model's field metadata is incomplete
    """
    settings = settings or load_settings()
    schema = build_descriptors(model)

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = template_sheet_name(model)

    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    fill = PatternFill(
        fill_type="solid",
        start_color=settings.header_fill,
        end_color=settings.header_fill,
    )
    alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for column in schema:
        cell = worksheet.cell(row=HEADER_ROW, column=column.position, value=column.display_name)
        cell.border = border
        cell.fill = fill
        cell.alignment = alignment
        if column.required:
            cell.font = Font(color=settings.required_font_color)
        if column.description:
            cell.comment = Comment(column.description, column.author or "")

        letter = get_column_letter(column.position)
        worksheet.column_dimensions[letter].width = max(10, _display_width(column.display_name) + 4)

        labels = choice_labels(column, settings)
        if not labels:
            continue
        if needs_choice_range(labels):
            formula = _choice_range(workbook, column, labels)
            logger.debug(
                "Choice list for column %r written to sheet %r",
                column.display_name,
                CHOICES_SHEET_NAME,
            )
        else:
            formula = list_formula(labels)
        validation = DataValidation(type="list", formula1=formula, allow_blank=True)
        validation.add(f"{letter}{DATA_ROW_START}:{letter}{EXCEL_MAX_ROWS}")
        worksheet.add_data_validation(validation)

    logger.debug(
        "Built template sheet %r for %s with %d columns",
        worksheet.title,
        model.__name__,
        len(schema),
    )
    return workbook


def template_bytes(
    model: Type[BaseModel],
    settings: ImporterSettings | None = None,
) -> bytes:
    """Render the template for ``model`` as ``.xlsx`` bytes."""
    workbook = build_template(model, settings)
    buffer = io.BytesIO()
    try:
        workbook.save(buffer)
    finally:
        workbook.close()
    return buffer.getvalue()


def save_template(
    model: Type[BaseModel],
    file_name: str | os.PathLike[str],
    settings: ImporterSettings | None = None,
) -> Path:
    """Write the template for ``model`` to ``file_name`` and return its path.

    Raises:
        ConfigurationError: If ``file_name`` is empty
    """
    if not str(file_name).strip():
        raise ConfigurationError("Template file name must not be empty")

    path = Path(file_name)
    workbook = build_template(model, settings)
    try:
        workbook.save(path)
    finally:
        workbook.close()
    logger.info("Wrote import template for %s to %s", model.__name__, path)
    return path
