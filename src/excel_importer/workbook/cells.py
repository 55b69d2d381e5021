"""Cell rendering and typed coercion.

Every decoder works from the cell's rendered text, except that native values
already of the target type (an openpyxl ``datetime``, an ``int``) are used
as-is. Parse failures never raise: the field falls back to its zero value,
or ``None`` when the annotation is optional, and validation decides whether
that is acceptable.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable

from dateutil import parser as date_parser

from ..config import ImporterSettings
from ..schema import ColumnDescriptor, ValueKind


def cell_text(value: Any) -> str:
    """Render a raw cell value the way it reads in the sheet.

    ``None`` renders as ``""`` and integral floats drop their ``.0``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_integer(value: Any, text: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return int(text.strip())


def _parse_decimal(value: Any, text: str) -> Decimal:
    parsed = Decimal(str(value)) if _is_number(value) else Decimal(text.strip())
    if not parsed.is_finite():
        raise ValueError(f"{text!r} is not a finite decimal")
    return parsed


def _parse_float(value: Any, text: str) -> float:
    if _is_number(value):
        return float(value)
    return float(text.strip())


def _parse_datetime(value: Any, text: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not text.strip():
        raise ValueError("empty date/time")
    return date_parser.parse(text)


def _parse_date(value: Any, text: str) -> date:
    return _parse_datetime(value, text).date()


_PARSERS: dict[ValueKind, Callable[[Any, str], Any]] = {
    ValueKind.integer: _parse_integer,
    ValueKind.decimal: _parse_decimal,
    ValueKind.float: _parse_float,
    ValueKind.datetime: _parse_datetime,
    ValueKind.date: _parse_date,
}

_ZERO_VALUES: dict[ValueKind, Any] = {
    ValueKind.integer: 0,
    ValueKind.decimal: Decimal(0),
    ValueKind.float: 0.0,
    ValueKind.datetime: datetime.min,
    ValueKind.date: date.min,
}


def zero_value(column: ColumnDescriptor) -> Any:
    """Value a field takes when its cell cannot be parsed."""
    if column.nullable:
        return None
    return _ZERO_VALUES.get(column.value_kind, "")


def coerce_cell(value: Any, column: ColumnDescriptor, settings: ImporterSettings) -> Any:
    """Convert a raw cell value for a non-enumeration column.

    Booleans are ``True`` only for the exact ``settings.true_label`` text.
    Text columns receive the rendered text; optional text columns receive
    ``None`` for empty cells.
    """
    text = cell_text(value)

    if column.value_kind is ValueKind.boolean:
        return text == settings.true_label

    parser = _PARSERS.get(column.value_kind)
    if parser is None:
        if column.nullable and text == "":
            return None
        return text

    try:
        return parser(value, text)
    except (ValueError, ArithmeticError):
        return zero_value(column)
