"""Import entry points: the ``import_workbook`` function and ``ExcelImporter`` facade."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Type

from openpyxl import load_workbook

from ..config import ImporterSettings, load_settings
from ..errors import ConfigurationError
from ..schema import build_descriptors, resolve_binding
from .core import ImportResult, TModel, decode_rows, open_worksheet, reconcile_header
from .template import save_template, template_bytes
from .validation import validate_records

logger = logging.getLogger(__name__)


def import_workbook(
    fp: BinaryIO | str | os.PathLike[str],
    model: Type[TModel],
    *,
    settings: ImporterSettings | None = None,
) -> ImportResult[TModel]:
    """Bind the model's sheet of an ``.xlsx`` workbook to typed records.

    Schema metadata is resolved before the workbook is opened, so metadata
    errors never touch the file. A header mismatch returns a result with
    ``template_valid=False`` and nothing decoded.

    Args:
        fp: Binary stream or path of the workbook
        model: Import model class the sheet is bound to
        settings: Importer settings (loaded from the config sources if omitted)

    Raises:
        SchemaError: If the model's metadata is missing or the sheet is absent
        RowLimitExceededError: If the sheet holds too many data rows
        InvalidChoiceValueError: If an enumeration cell holds an unknown label
            and ``settings.strict_choices`` is set
    """
    settings = settings or load_settings()
    binding = resolve_binding(model)
    schema = build_descriptors(model)

    workbook = load_workbook(fp, data_only=True)
    try:
        worksheet = open_worksheet(workbook, binding)
        if not reconcile_header(worksheet, schema):
            logger.info("Sheet %r does not match the %s template", binding.sheet_name, model.__name__)
            return ImportResult(template_valid=False)
        records = decode_rows(worksheet, schema, binding, settings)
    finally:
        workbook.close()

    reports = validate_records(records, schema)
    logger.info(
        "Imported %d %s records from sheet %r (%d invalid)",
        len(records),
        model.__name__,
        binding.sheet_name,
        len(reports),
    )
    return ImportResult(template_valid=True, records=tuple(records), reports=tuple(reports))


class ExcelImporter:
    """Generates import templates and imports workbooks for import models.

    Example:
        importer = ExcelImporter()
        importer.generate_template(Person, "person.xlsx")
        result = importer.import_file(Person, "filled.xlsx")
        if result.template_valid and not result.reports:
            save(result.records)
    """

    def __init__(self, settings: ImporterSettings | None = None) -> None:
        self.settings = settings or load_settings()

    def generate_template(self, model: Type[TModel], file_name: str | os.PathLike[str]) -> Path:
        """Write the template for ``model`` to ``file_name``."""
        return save_template(model, file_name, self.settings)

    def generate_template_bytes(self, model: Type[TModel]) -> bytes:
        """Return the template for ``model`` as ``.xlsx`` bytes."""
        return template_bytes(model, self.settings)

    def import_file(
        self,
        model: Type[TModel],
        file_path: str | os.PathLike[str],
    ) -> ImportResult[TModel]:
        """Import the workbook at ``file_path``.

        Raises:
            ConfigurationError: If ``file_path`` is empty
        """
        if not str(file_path).strip():
            raise ConfigurationError("Import file path must not be empty")

        with open(file_path, "rb") as fp:
            return import_workbook(fp, model, settings=self.settings)

    def import_stream(self, model: Type[TModel], stream: BinaryIO) -> ImportResult[TModel]:
        """Import a workbook from a binary stream."""
        return import_workbook(stream, model, settings=self.settings)
