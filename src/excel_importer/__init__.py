import logging

from ._version import __version__
from .errors import (
    ConfigurationError,
    ExcelImportError,
    InvalidChoiceValueError,
    RowLimitExceededError,
    SchemaError,
    SheetNotFoundError,
)
from .schema import ImporterHeader, ImportModel, LabeledEnum, Required
from .workbook import ExcelImporter, FieldErrorReport, ImportResult, import_workbook

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "ConfigurationError",
    "ExcelImportError",
    "ExcelImporter",
    "FieldErrorReport",
    "ImportModel",
    "ImportResult",
    "ImporterHeader",
    "InvalidChoiceValueError",
    "LabeledEnum",
    "Required",
    "RowLimitExceededError",
    "SchemaError",
    "SheetNotFoundError",
    "import_workbook",
]
