"""Tests for the schema descriptor builder."""

from datetime import date, datetime
from decimal import Decimal
from enum import IntEnum
from typing import Annotated, Any, Optional

import pytest
from pydantic import BaseModel

from excel_importer.errors import SchemaError
from excel_importer.schema import (
    ColumnKind,
    ImporterHeader,
    ImportModel,
    LabeledEnum,
    Required,
    ValueKind,
    build_descriptors,
    resolve_value_kind,
)


class Gender(LabeledEnum):
    MALE = (1, "男")
    FEMALE = (2, "女")


class Employee(ImportModel):
    class Meta:
        sheet_name = "Employees"

    name: Annotated[str, ImporterHeader("姓名", description="Full name", author="HR"), Required()]
    gender: Annotated[Gender, ImporterHeader("性别")]
    active: Annotated[bool, ImporterHeader("在职")]
    salary: Annotated[Decimal, ImporterHeader("薪资")]
    hired_on: Annotated[date, ImporterHeader("入职日期")]
    score: Annotated[float, ImporterHeader("评分")]
    age: Annotated[int | None, ImporterHeader("年龄")] = None
    note: Annotated[Optional[str], ImporterHeader("备注")] = None


class TestBuildDescriptors:
    def test_columns_follow_declaration_order(self):
        schema = build_descriptors(Employee)

        assert [c.field_name for c in schema] == [
            "name",
            "gender",
            "active",
            "salary",
            "hired_on",
            "score",
            "age",
            "note",
        ]
        assert [c.position for c in schema] == list(range(1, 9))
        assert schema.columns[0].display_name == "姓名"

    def test_header_metadata_is_copied(self):
        name = build_descriptors(Employee).column_for("name")

        assert name.description == "Full name"
        assert name.author == "HR"
        assert name.required is True

    def test_required_only_from_marker(self):
        schema = build_descriptors(Employee)
        assert [c.field_name for c in schema if c.required] == ["name"]

    def test_value_kinds(self):
        schema = build_descriptors(Employee)
        kinds = {c.field_name: c.value_kind for c in schema}

        assert kinds == {
            "name": ValueKind.text,
            "gender": ValueKind.enumeration,
            "active": ValueKind.boolean,
            "salary": ValueKind.decimal,
            "hired_on": ValueKind.date,
            "score": ValueKind.float,
            "age": ValueKind.integer,
            "note": ValueKind.text,
        }

    def test_nullable_fields(self):
        schema = build_descriptors(Employee)
        assert [c.field_name for c in schema if c.nullable] == ["age", "note"]

    def test_enum_and_boolean_positions(self):
        schema = build_descriptors(Employee)

        assert list(schema.enum_columns) == [2]
        assert dict(schema.enum_columns[2]) == {"男": Gender.MALE, "女": Gender.FEMALE}
        assert schema.boolean_columns == (3,)
        assert schema.column_for("gender").kind is ColumnKind.enumeration
        assert schema.column_for("active").kind is ColumnKind.boolean
        assert schema.column_for("name").kind is ColumnKind.plain

    def test_display_name_fallback(self):
        schema = build_descriptors(Employee)

        assert schema.display_name_for("age") == "年龄"
        assert schema.display_name_for("unknown_field") == "unknown_field"

    def test_describe_classmethod(self):
        assert Employee.describe() == build_descriptors(Employee)

    def test_plain_base_model_is_supported(self):
        class Row(BaseModel):
            code: Annotated[str, ImporterHeader("编码")]

        assert [c.display_name for c in build_descriptors(Row)] == ["编码"]

    def test_missing_header_metadata_fails(self):
        class Broken(ImportModel):
            class Meta:
                sheet_name = "Broken"

            code: Annotated[str, ImporterHeader("编码")]
            name: str

        with pytest.raises(SchemaError, match="Field 'name' of import model Broken is missing header metadata"):
            build_descriptors(Broken)

    def test_blank_header_name_fails(self):
        class Blank(ImportModel):
            code: Annotated[str, ImporterHeader("  ")]

        with pytest.raises(SchemaError, match="missing header metadata"):
            build_descriptors(Blank)

    def test_model_without_fields_fails(self):
        class Empty(ImportModel):
            class Meta:
                sheet_name = "Empty"

        with pytest.raises(SchemaError, match="declares no fields"):
            build_descriptors(Empty)


class TestResolveValueKind:
    class Priority(IntEnum):
        LOW = 1
        HIGH = 2

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (str, ValueKind.text),
            (bool, ValueKind.boolean),
            (int, ValueKind.integer),
            (Decimal, ValueKind.decimal),
            (float, ValueKind.float),
            (datetime, ValueKind.datetime),
            (date, ValueKind.date),
            (list[int], ValueKind.text),
            (Any, ValueKind.text),
        ],
    )
    def test_plain_annotations(self, annotation, expected):
        assert resolve_value_kind(annotation) == (expected, False, None)

    def test_int_enum_is_enumeration(self):
        assert resolve_value_kind(self.Priority) == (ValueKind.enumeration, False, self.Priority)

    def test_optional_unwraps(self):
        assert resolve_value_kind(Optional[datetime]) == (ValueKind.datetime, True, None)
        assert resolve_value_kind(bool | None) == (ValueKind.boolean, True, None)

    def test_multi_type_union_is_text(self):
        assert resolve_value_kind(int | str) == (ValueKind.text, False, None)
