"""Import model base class and sheet binding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Type

from pydantic import BaseModel, ConfigDict

from ..errors import SchemaError

if TYPE_CHECKING:
    from .descriptors import SchemaDescriptor

# Maximum number of data rows a single sheet may hold.
MAX_ROW_CEILING = 65000


class ImportModel(BaseModel):
    """Base class for records bound to a worksheet.

    Subclass once per sheet layout and declare the binding on an inner
    ``Meta`` class:

    Example:
        class Person(ImportModel):
            class Meta:
                sheet_name = "Person"
                max_row_number = 5000

            name: Annotated[str, ImporterHeader("姓名"), Required()]
            age: Annotated[int, ImporterHeader("年龄")]

    ``sheet_name`` defaults to the class name when omitted. ``max_row_number``
    is clamped to ``MAX_ROW_CEILING``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def describe(cls) -> "SchemaDescriptor":
        """Build the column descriptors for this model."""
        from .descriptors import build_descriptors

        return build_descriptors(cls)

    @classmethod
    def binding(cls) -> "SchemaBinding":
        """Resolve the sheet binding declared on ``Meta``."""
        return resolve_binding(cls)


@dataclass(frozen=True)
class SchemaBinding:
    """Sheet-level metadata of an import model."""

    sheet_name: str
    max_row_number: int = MAX_ROW_CEILING

    def __post_init__(self):
        if not self.sheet_name or not self.sheet_name.strip():
            raise SchemaError("sheet_name must not be empty")
        if self.max_row_number < 1:
            raise SchemaError("max_row_number must be >= 1")
        if self.max_row_number > MAX_ROW_CEILING:
            object.__setattr__(self, "max_row_number", MAX_ROW_CEILING)


def resolve_binding(model: Type[BaseModel]) -> SchemaBinding:
    """Read the ``Meta`` binding of an import model.

    Raises:
        SchemaError: If ``Meta`` is missing, declares a blank sheet name or a
            non-integer ``max_row_number``
    """
    meta = getattr(model, "Meta", None)
    if meta is None:
        raise SchemaError(
            f"Import model {model.__name__} is missing import metadata: "
            f"define an inner Meta class with 'sheet_name'"
        )

    sheet_name = getattr(meta, "sheet_name", model.__name__)
    if not isinstance(sheet_name, str) or not sheet_name.strip():
        raise SchemaError(
            f"Import model {model.__name__} is missing import metadata: "
            f"Meta.sheet_name must be a non-empty string"
        )

    max_row_number = getattr(meta, "max_row_number", MAX_ROW_CEILING)
    if isinstance(max_row_number, bool) or not isinstance(max_row_number, int):
        raise SchemaError(
            f"Import model {model.__name__}: Meta.max_row_number must be an integer, "
            f"got {max_row_number!r}"
        )
    try:
        return SchemaBinding(sheet_name=sheet_name, max_row_number=max_row_number)
    except SchemaError as exc:
        raise SchemaError(f"Import model {model.__name__}: {exc}") from exc


def template_sheet_name(model: Type[BaseModel]) -> str:
    """Sheet title for a generated template (class name when ``Meta`` is absent)."""
    if getattr(model, "Meta", None) is None:
        return model.__name__
    return resolve_binding(model).sheet_name
