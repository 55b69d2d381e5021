"""Tests for template workbook generation."""

import io
from typing import Annotated

import pytest
from openpyxl import load_workbook

from excel_importer.config import ImporterSettings
from excel_importer.errors import ConfigurationError, SchemaError
from excel_importer.schema import ImporterHeader, ImportModel, LabeledEnum, Required
from excel_importer.workbook import import_workbook
from excel_importer.workbook.template import (
    CHOICES_SHEET_NAME,
    EXCEL_MAX_ROWS,
    build_template,
    list_formula,
    needs_choice_range,
    save_template,
    template_bytes,
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
    age: Annotated[int | None, ImporterHeader("年龄")] = None


class Untitled(ImportModel):
    code: Annotated[str, ImporterHeader("编码")]


class Region(LabeledEnum):
    NORTH = (1, "North, upper")
    SOUTH = (2, "South")


Product = LabeledEnum("Product", {f"P{i:02d}": (i, f"product-{i:02d}") for i in range(30)})


class Catalog(ImportModel):
    class Meta:
        sheet_name = "Catalog"

    region: Annotated[Region, ImporterHeader("区域")]
    product: Annotated[Product, ImporterHeader("产品")]
    label: Annotated[str, ImporterHeader("名称")]


@pytest.fixture
def settings():
    return ImporterSettings()


def _validations(ws):
    return {str(dv.sqref): dv for dv in ws.data_validations.dataValidation}


def _font_rgb(cell):
    color = cell.font.color
    if color is None or color.type != "rgb":
        return None
    return color.rgb


class TestBuildTemplate:
    def test_sheet_and_headers(self, settings):
        ws = build_template(Employee, settings).active

        assert ws.title == "Employees"
        assert [c.value for c in ws[1]] == ["姓名", "性别", "在职", "年龄"]
        assert ws.max_row == 1

    def test_required_headers_are_marked(self, settings):
        ws = build_template(Employee, settings).active

        assert _font_rgb(ws["A1"]) == "00FF0000"
        assert _font_rgb(ws["B1"]) is None

    def test_header_comment(self, settings):
        ws = build_template(Employee, settings).active

        assert ws["A1"].comment.text == "Full name"
        assert ws["A1"].comment.author == "HR"
        assert ws["B1"].comment is None

    def test_header_styling(self, settings):
        cell = build_template(Employee, settings).active["C1"]

        assert cell.fill.fill_type == "solid"
        assert cell.alignment.horizontal == "center"
        assert cell.alignment.wrap_text is True
        assert cell.border.left.style == "thin"

    def test_choice_lists(self, settings):
        validations = _validations(build_template(Employee, settings).active)

        assert set(validations) == {f"B2:B{EXCEL_MAX_ROWS}", f"C2:C{EXCEL_MAX_ROWS}"}
        assert validations[f"B2:B{EXCEL_MAX_ROWS}"].formula1 == '"男,女"'
        assert validations[f"C2:C{EXCEL_MAX_ROWS}"].formula1 == '"是,否"'
        assert validations[f"B2:B{EXCEL_MAX_ROWS}"].type == "list"

    def test_boolean_labels_from_settings(self):
        ws = build_template(Employee, ImporterSettings(true_label="Yes", false_label="No")).active
        assert _validations(ws)[f"C2:C{EXCEL_MAX_ROWS}"].formula1 == '"Yes,No"'

    def test_sheet_name_defaults_to_class_name(self, settings):
        assert build_template(Untitled, settings).active.title == "Untitled"

    def test_missing_header_metadata(self, settings):
        class Broken(ImportModel):
            code: str

        with pytest.raises(SchemaError, match="missing header metadata"):
            build_template(Broken, settings)


class TestListFormula:
    def test_quotes_are_escaped(self):
        assert list_formula(['say "hi"', "b"]) == '"say ""hi"",b"'


class TestChoiceRange:
    PRODUCT_LABELS = [f"product-{i:02d}" for i in range(30)]

    def test_needs_choice_range(self):
        assert needs_choice_range(["男", "女"]) is False
        assert needs_choice_range(["A,B", "C"]) is True
        assert needs_choice_range(self.PRODUCT_LABELS) is True

    def test_comma_label_written_to_hidden_sheet(self, settings):
        wb = build_template(Catalog, settings)
        validations = _validations(wb["Catalog"])

        assert validations[f"A2:A{EXCEL_MAX_ROWS}"].formula1 == "Choices_region"
        assert wb.defined_names["Choices_region"].attr_text == "'_Choices'!$A$1:$A$2"

        choices = wb[CHOICES_SHEET_NAME]
        assert choices.sheet_state == "hidden"
        assert [choices.cell(row=r, column=1).value for r in (1, 2)] == ["North, upper", "South"]

    def test_long_list_written_to_hidden_sheet(self, settings):
        wb = build_template(Catalog, settings)
        validations = _validations(wb["Catalog"])

        assert validations[f"B2:B{EXCEL_MAX_ROWS}"].formula1 == "Choices_product"
        assert wb.defined_names["Choices_product"].attr_text == "'_Choices'!$B$1:$B$30"
        choices = wb[CHOICES_SHEET_NAME]
        assert [choices.cell(row=r, column=2).value for r in range(1, 31)] == self.PRODUCT_LABELS

    def test_short_lists_stay_inline(self, settings):
        assert CHOICES_SHEET_NAME not in build_template(Employee, settings).sheetnames

    def test_filled_template_imports(self, settings):
        wb = load_workbook(io.BytesIO(template_bytes(Catalog, settings)))
        assert wb.sheetnames == ["Catalog", CHOICES_SHEET_NAME]
        assert "Choices_product" in wb.defined_names
        wb["Catalog"].append(["North, upper", "product-07", "widget"])
        fp = io.BytesIO()
        wb.save(fp)
        fp.seek(0)

        result = import_workbook(fp, Catalog, settings=settings)

        assert result.template_valid is True
        (record,) = result.records
        assert (record.region, record.product) == (Region.NORTH, Product["P07"])
        assert result.reports == ()


class TestTemplateOutputs:
    def test_bytes_round_trip(self, settings):
        data = template_bytes(Employee, settings)

        wb = load_workbook(io.BytesIO(data))
        ws = wb["Employees"]
        assert [c.value for c in ws[1]] == ["姓名", "性别", "在职", "年龄"]
        assert len(ws.data_validations.dataValidation) == 2

    def test_save_to_path(self, tmp_path, settings):
        path = save_template(Employee, tmp_path / "employees.xlsx", settings)

        assert path == tmp_path / "employees.xlsx"
        assert path.exists()
        assert load_workbook(path).sheetnames == ["Employees"]

    @pytest.mark.parametrize("file_name", ["", "   "])
    def test_empty_file_name(self, settings, file_name):
        with pytest.raises(ConfigurationError, match="must not be empty"):
            save_template(Employee, file_name, settings)
