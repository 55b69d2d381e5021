"""Schema descriptor builder.

Derives the ordered column descriptors of an import model from its declared
fields. Column order equals field declaration order; every downstream step
(template layout, header check, row decoding, error mapping) relies on it.
"""

from __future__ import annotations

import types
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Mapping, Type, Union, get_args, get_origin

from pydantic import BaseModel

from ..errors import SchemaError
from .fields import ImporterHeader, Required, enum_display_names, find_marker


class ValueKind(str, Enum):
    """How a cell is coerced into a field value."""

    text = "text"
    boolean = "boolean"
    integer = "integer"
    decimal = "decimal"
    float = "float"
    date = "date"
    datetime = "datetime"
    enumeration = "enumeration"


class ColumnKind(str, Enum):
    """Whether a column is constrained to a choice list."""

    plain = "plain"
    boolean = "boolean"
    enumeration = "enumeration"


@dataclass(frozen=True)
class ColumnDescriptor:
    """Resolved definition of one template column.

    Attributes:
        field_name: Attribute name on the import model
        display_name: Header text shown in, and expected from, the sheet
        position: 1-based column index
        value_kind: Coercion applied to cells of this column
        required: Whether the field carries a ``Required`` marker
        nullable: Whether the field annotation admits ``None``
        enum_choices: Ordered ``label -> member`` mapping for enumeration columns
    """

    field_name: str
    display_name: str
    position: int
    value_kind: ValueKind
    description: str | None = None
    author: str | None = None
    required: bool = False
    nullable: bool = False
    enum_choices: Mapping[str, Enum] | None = None

    @property
    def kind(self) -> ColumnKind:
        if self.value_kind is ValueKind.enumeration:
            return ColumnKind.enumeration
        if self.value_kind is ValueKind.boolean:
            return ColumnKind.boolean
        return ColumnKind.plain

    @property
    def header_text(self) -> str:
        """Expected header text, falling back to the field name."""
        return self.display_name or self.field_name


@dataclass(frozen=True)
class SchemaDescriptor:
    """Ordered column descriptors of one import model."""

    model: Type[BaseModel]
    columns: tuple[ColumnDescriptor, ...]
    _by_field: Mapping[str, ColumnDescriptor] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "_by_field",
            MappingProxyType({column.field_name: column for column in self.columns}),
        )

    def __iter__(self):
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def enum_columns(self) -> dict[int, Mapping[str, Enum]]:
        """Enumeration columns keyed by 1-based position."""
        return {
            column.position: column.enum_choices
            for column in self.columns
            if column.enum_choices is not None
        }

    @property
    def boolean_columns(self) -> tuple[int, ...]:
        """1-based positions of boolean columns."""
        return tuple(
            column.position for column in self.columns if column.kind is ColumnKind.boolean
        )

    def column_for(self, field_name: str) -> ColumnDescriptor | None:
        return self._by_field.get(field_name)

    def display_name_for(self, field_name: str) -> str:
        """Display name of a field, or the field name itself if it has no column."""
        column = self._by_field.get(field_name)
        return column.display_name if column is not None else field_name


def resolve_value_kind(annotation: Any) -> tuple[ValueKind, bool, Type[Enum] | None]:
    """Resolve a field annotation to ``(value_kind, nullable, enum_type)``.

    ``X | None`` / ``Optional[X]`` unwrap to ``X`` with ``nullable`` set.
    Anything not recognized is treated as text.
    """
    nullable = False

    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        non_none = [arg for arg in args if arg is not type(None)]
        if len(non_none) != 1:
            return ValueKind.text, len(non_none) != len(args), None
        nullable = len(non_none) != len(args)
        annotation = non_none[0]
        if get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]

    if get_origin(annotation) is not None or not isinstance(annotation, type):
        return ValueKind.text, nullable, None

    # Order matters: bool is an int, IntEnum is an int, datetime is a date.
    if issubclass(annotation, bool):
        return ValueKind.boolean, nullable, None
    if issubclass(annotation, Enum):
        return ValueKind.enumeration, nullable, annotation
    if issubclass(annotation, int):
        return ValueKind.integer, nullable, None
    if issubclass(annotation, Decimal):
        return ValueKind.decimal, nullable, None
    if issubclass(annotation, float):
        return ValueKind.float, nullable, None
    if issubclass(annotation, datetime):
        return ValueKind.datetime, nullable, None
    if issubclass(annotation, date):
        return ValueKind.date, nullable, None
    return ValueKind.text, nullable, None


def build_descriptors(model: Type[BaseModel]) -> SchemaDescriptor:
    """Derive the column descriptors of ``model``.

    Raises:
        SchemaError: If the model declares no fields, or a field lacks an
            ``ImporterHeader`` with a non-empty name
    """
    fields = model.model_fields
    if not fields:
        raise SchemaError(f"Import model {model.__name__} declares no fields")

    columns: list[ColumnDescriptor] = []
    for position, (field_name, field_info) in enumerate(fields.items(), start=1):
        header = find_marker(field_info.metadata, ImporterHeader)
        if header is None or not header.name or not header.name.strip():
            raise SchemaError(
                f"Field '{field_name}' of import model {model.__name__} is missing "
                f"header metadata: annotate it with ImporterHeader(name)"
            )

        value_kind, nullable, enum_type = resolve_value_kind(field_info.annotation)
        enum_choices = None
        if enum_type is not None:
            enum_choices = MappingProxyType(enum_display_names(enum_type))

        columns.append(
            ColumnDescriptor(
                field_name=field_name,
                display_name=header.name,
                position=position,
                value_kind=value_kind,
                description=header.description,
                author=header.author,
                required=find_marker(field_info.metadata, Required) is not None,
                nullable=nullable,
                enum_choices=enum_choices,
            )
        )

    return SchemaDescriptor(model=model, columns=tuple(columns))
