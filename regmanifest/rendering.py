"""Helpers used when rendering the low-level representation to source text."""

from __future__ import annotations

from .lir import ConversionKind, Field, FieldConversionMethod


def _lines(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def description_to_docstring(description: str) -> str:
    """Turn a description into doc-comment lines, one ``///`` per line."""
    return "\n".join(f"/// {line}" for line in _lines(description))


def get_super_prefix(conversion_method: FieldConversionMethod) -> str:
    """The path prefix needed to reach a conversion type from the field-set module."""
    conversion_type = conversion_method.conversion_type()
    if conversion_type is None:
        return ""
    stripped = conversion_type.lstrip()
    if stripped.startswith("::") or stripped.startswith("crate"):
        return ""
    return "super::"


def get_defmt_fmt_string(field: Field) -> str:
    """The format-string fragment that prints one field."""
    kind = field.conversion_method.kind
    if kind is ConversionKind.NONE:
        hint = f"={field.base_type}"
    elif kind is ConversionKind.BOOL:
        hint = "=bool"
    else:
        hint = ""
    return f"{field.name}: {{{hint}}}, "


def get_command_fieldset_name(fieldset: str | None) -> str:
    """The type path for a command's field set, or the unit type when absent."""
    return "()" if fieldset is None else f"field_sets::{fieldset}"