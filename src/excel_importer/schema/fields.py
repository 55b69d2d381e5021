"""Field-level metadata markers for import models.

Markers are attached with ``typing.Annotated``::

    class Person(ImportModel):
        class Meta:
            sheet_name = "Person"

        name: Annotated[str, ImporterHeader("姓名"), Required()]
        age: Annotated[int, ImporterHeader("年龄", description="Age in years")]
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Type, TypeVar

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, PydanticCustomError, core_schema

TEnum = TypeVar("TEnum", bound=Enum)


@dataclass(frozen=True)
class ImporterHeader:
    """Column header metadata for one field.

    Attributes:
        name: Display name written to, and expected in, the header row
        description: Optional note rendered as a header comment in templates
        author: Optional author of the header comment
    """

    name: str
    description: str | None = None
    author: str | None = None


@dataclass(frozen=True)
class Required:
    """Marks a field as required.

    Besides flagging the column in templates, the marker is a Pydantic
    constraint: ``None`` and blank strings fail validation with ``message``.
    """

    message: str = "required"

    def __get_pydantic_core_schema__(
        self,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        message = self.message

        def _check(value: Any) -> Any:
            if value is None or (isinstance(value, str) and not value.strip()):
                raise PydanticCustomError("required", message)
            return value

        return core_schema.no_info_after_validator_function(_check, handler(source_type))


class LabeledEnum(Enum):
    """Enum whose members carry a display label.

    Members are declared as ``(value, label)`` tuples; a bare value leaves
    the label unset and the member name is displayed instead::

        class Gender(LabeledEnum):
            MALE = (1, "男")
            FEMALE = (2, "女")
    """

    def __new__(cls, value: Any, label: str | None = None):
        obj = object.__new__(cls)
        obj._value_ = value
        obj.label = label
        return obj


def enum_display_names(enum_type: Type[TEnum]) -> dict[str, TEnum]:
    """Return the ordered ``label -> member`` mapping for an enum.

    Members are visited in declaration order and aliases are skipped. When two
    members share a label the later one wins.
    """
    names: dict[str, TEnum] = {}
    for member in enum_type:
        label = getattr(member, "label", None) or member.name
        names[str(label)] = member
    return names


def find_marker(metadata: list[Any], marker_type: type) -> Any:
    """Return the first ``marker_type`` instance in a field's metadata, or ``None``."""
    for item in metadata:
        if isinstance(item, marker_type):
            return item
    return None


