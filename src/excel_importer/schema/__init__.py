"""Import model declaration and schema descriptors."""

from __future__ import annotations

from .descriptors import (
    ColumnDescriptor,
    ColumnKind,
    SchemaDescriptor,
    ValueKind,
    build_descriptors,
    resolve_value_kind,
)
from .fields import ImporterHeader, LabeledEnum, Required, enum_display_names
from .model import MAX_ROW_CEILING, ImportModel, SchemaBinding, resolve_binding

__all__ = [
    "MAX_ROW_CEILING",
    "ColumnDescriptor",
    "ColumnKind",
    "ImportModel",
    "ImporterHeader",
    "LabeledEnum",
    "Required",
    "SchemaBinding",
    "SchemaDescriptor",
    "ValueKind",
    "build_descriptors",
    "enum_display_names",
    "resolve_binding",
    "resolve_value_kind",
]
