"""Validation of decoded records and error report assembly."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from ..schema import SchemaDescriptor
from .core import FieldErrorReport, ImportResult

logger = logging.getLogger(__name__)

INVALID_SUMMARY_KEY = "Invalid"
INVALID_SUMMARY_MESSAGE = "import data invalid"


def _input_key(name: str, info: FieldInfo) -> str:
    # Records are validated from field values, so aliased fields are fed
    # under their plain string alias. Alias paths fall back to the name.
    alias = info.validation_alias if info.validation_alias is not None else info.alias
    return alias if isinstance(alias, str) else name


def collect_violations(record: BaseModel) -> list[tuple[str, str]]:
    """Run Pydantic validation over a decoded record.

    Returns:
        ``(field_name, message)`` pairs in the order Pydantic reports them.
        Model-level errors carry the model's class name as field name.
    """
    model = type(record)
    input_keys = {name: _input_key(name, info) for name, info in model.model_fields.items()}
    field_names = {key: name for name, key in input_keys.items()}
    data = {key: getattr(record, name, None) for name, key in input_keys.items()}
    try:
        model.model_validate(data)
    except ValidationError as err:
        violations = []
        for error in err.errors():
            loc = error.get("loc") or ()
            field_name = field_names.get(loc[0], str(loc[0])) if loc else model.__name__
            violations.append((field_name, error.get("msg", "Validation error")))
        return violations
    return []


def build_report(
    row_index: int,
    violations: Iterable[tuple[str, str]],
    schema: SchemaDescriptor,
) -> FieldErrorReport:
    """Merge the violations of one record into a report keyed by display name."""
    summary_errors = {INVALID_SUMMARY_KEY: INVALID_SUMMARY_MESSAGE}
    field_errors: dict[str, str] = {}
    for field_name, message in violations:
        key = schema.display_name_for(field_name)
        if key in field_errors:
            field_errors[key] = f"{field_errors[key]},{message}"
        else:
            field_errors[key] = message
    return FieldErrorReport(
        row_index=row_index,
        field_errors=field_errors,
        summary_errors=summary_errors,
    )


def validate_records(
    records: Sequence[BaseModel],
    schema: SchemaDescriptor,
) -> list[FieldErrorReport]:
    """Validate decoded records and return one report per invalid record.

    Report indexes are 1-based positions in ``records``.
    """
    reports: list[FieldErrorReport] = []
    for index, record in enumerate(records, start=1):
        violations = collect_violations(record)
        if not violations:
            continue
        report = build_report(index, violations, schema)
        if report.summary_errors:
            reports.append(report)

    logger.debug("Validated %d records: %d invalid", len(records), len(reports))
    return reports


def format_report_messages(result: ImportResult, *, max_errors: int = 50) -> list[str]:
    """Build flat, user-facing error lines from an import result.

    Example:
        >>> format_report_messages(result)
        ['Row 2, 姓名: required']

    Args:
        result: Result of an import call
        max_errors: Maximum number of field error lines to emit; a trailing
            line reports how many were left out
    """
    if not result.template_valid:
        return ["The uploaded file does not match the import template."]

    messages: list[str] = []
    error_count = 0
    for report in result.reports:
        for field_name, message in report.field_errors.items():
            error_count += 1
            if error_count <= max_errors:
                messages.append(f"Row {report.row_index}, {field_name}: {message}")

    if error_count > max_errors:
        remaining = error_count - max_errors
        messages.append(
            f"... and {remaining} more error(s). Please fix the errors above and try again."
        )
    return messages
