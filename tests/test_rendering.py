import pytest

from regmanifest.lir import ConversionKind, Field, FieldConversionMethod
from regmanifest.rendering import (
    description_to_docstring,
    get_command_fieldset_name,
    get_defmt_fmt_string,
    get_super_prefix,
)


def _field(name, base_type, kind=ConversionKind.NONE, type_path=None):
    return Field(
        name=name,
        address=range(0, 8),
        base_type=base_type,
        conversion_method=FieldConversionMethod(kind=kind, type_path=type_path),
        access="RW",
    )


def test_docstring_prefixes_each_line():
    assert description_to_docstring("first\nsecond") == "/// first\n/// second"


def test_docstring_of_empty_description():
    assert description_to_docstring("") == ""


def test_docstring_ignores_trailing_newline_and_cr():
    assert description_to_docstring("first\r\nsecond\n") == "/// first\n/// second"


def test_docstring_keeps_special_characters():
    text = "\\\\\\/\\/\\/\\////\\/\\/;{}'\"`'"
    assert description_to_docstring(text) == "/// " + text


def test_docstring_line_count_matches():
    text = "a\n\nb\nc"
    out = description_to_docstring(text)
    assert len(out.split("\n")) == 4
    assert all(line.startswith("///") for line in out.split("\n"))


@pytest.mark.parametrize(
    "type_path", ["::core::primitive::u8", "crate::Thing", "  crate::Thing", " ::x::Y"]
)
def test_no_super_prefix_for_absolute_paths(type_path):
    method = FieldConversionMethod(kind=ConversionKind.INTO, type_path=type_path)
    assert get_super_prefix(method) == ""


@pytest.mark.parametrize(
    "kind", [ConversionKind.INTO, ConversionKind.UNSAFE_INTO, ConversionKind.TRY_INTO]
)
def test_super_prefix_for_relative_paths(kind):
    method = FieldConversionMethod(kind=kind, type_path="MyEnum")
    assert get_super_prefix(method) == "super::"


@pytest.mark.parametrize("kind", [ConversionKind.NONE, ConversionKind.BOOL])
def test_no_super_prefix_without_conversion_type(kind):
    assert get_super_prefix(FieldConversionMethod(kind=kind)) == ""


def test_defmt_string_plain_field_uses_base_type():
    assert get_defmt_fmt_string(_field("value", "u32")) == "value: {=u32}, "


def test_defmt_string_bool_field():
    assert get_defmt_fmt_string(_field("value_wo", "u8", ConversionKind.BOOL)) == (
        "value_wo: {=bool}, "
    )


def test_defmt_string_converted_field_has_no_hint():
    field = _field("mode", "u8", ConversionKind.TRY_INTO, "MyEnum")
    assert get_defmt_fmt_string(field) == "mode: {}, "


def test_command_fieldset_name():
    assert get_command_fieldset_name("FooFieldsIn") == "field_sets::FooFieldsIn"
    assert get_command_fieldset_name(None) == "()"