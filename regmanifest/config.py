"""Reading the global ``config`` section of a manifest."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from .casing import Boundary
from .model import Access, BitOrder, ByteOrder, GlobalConfig, Integer
from .values import ManifestError, ManifestValue

_ACCESS = {
    "ReadWrite": Access.RW,
    "RW": Access.RW,
    "ReadOnly": Access.RO,
    "RO": Access.RO,
    "WriteOnly": Access.WO,
    "WO": Access.WO,
}

_BYTE_ORDERS = {"LE": ByteOrder.LE, "BE": ByteOrder.BE}

_BIT_ORDERS = {"LSB0": BitOrder.LSB0, "MSB0": BitOrder.MSB0}

_INTEGERS = {
    "u8": Integer.U8,
    "u16": Integer.U16,
    "u32": Integer.U32,
    "i8": Integer.I8,
    "i16": Integer.I16,
    "i32": Integer.I32,
    "i64": Integer.I64,
}


@contextmanager
def _context(message: str) -> Iterator[None]:
    try:
        yield
    except ManifestError as err:
        raise err.with_context(message) from err


def transform_access(value: ManifestValue) -> Access:
    """Read an access specifier."""
    text = value.as_string()
    try:
        return _ACCESS[text]
    except KeyError:
        raise ManifestError(
            f"No access value `{text}` exists. Values are limited to `ReadWrite`, `RW`, "
            "`ReadOnly`, `RO`, `WriteOnly`, `WO`"
        ) from None


def transform_byte_order(value: ManifestValue) -> ByteOrder:
    """Read a byte order."""
    text = value.as_string()
    try:
        return _BYTE_ORDERS[text]
    except KeyError:
        raise ManifestError(
            f"No byte order value `{text}` exists. Values are limited to `LE` and `BE`"
        ) from None


def transform_bit_order(value: ManifestValue) -> BitOrder:
    """Read a bit order."""
    text = value.as_string()
    try:
        return _BIT_ORDERS[text]
    except KeyError:
        raise ManifestError(
            f"No bit order value `{text}` exists. Values are limited to `LSB0` and `MSB0`"
        ) from None


def transform_integer_type(value: ManifestValue) -> Integer:
    """Read an integer type name."""
    text = value.as_string()
    try:
        return _INTEGERS[text]
    except KeyError:
        raise ManifestError(
            f"No integer type value `{text}` exists. Values are limited to `u8`, `u16`, "
            "`u32`, `i8`, `i16`, `i32`, `i64`"
        ) from None


def _boundary_by_name(name: str) -> Boundary:
    for boundary in Boundary:
        if boundary.value.lower() == name.lower():
            return boundary
    expected = "[" + ", ".join(b.value for b in Boundary) + "]"
    raise ManifestError(
        f"`{name}` is not a valid boundary name. One of the following was expected: {expected}"
    )


def transform_name_word_boundaries(value: ManifestValue) -> list[Boundary]:
    """Read word boundaries, either as an example string or as a list of names."""
    try:
        text = value.as_string()
    except ManifestError:
        pass
    else:
        return Boundary.list_from(text)

    try:
        items = value.as_array()
    except ManifestError:
        raise ManifestError("Expected a string or an array") from None
    return [_boundary_by_name(item.as_string()) for item in items]


def _set_defmt_feature(config: GlobalConfig, value: ManifestValue) -> None:
    config.defmt_feature = value.as_string()


_SETTERS = {
    "default_register_access": lambda c, v: setattr(
        c, "default_register_access", transform_access(v)
    ),
    "default_field_access": lambda c, v: setattr(c, "default_field_access", transform_access(v)),
    "default_buffer_access": lambda c, v: setattr(
        c, "default_buffer_access", transform_access(v)
    ),
    "default_byte_order": lambda c, v: setattr(c, "default_byte_order", transform_byte_order(v)),
    "default_bit_order": lambda c, v: setattr(c, "default_bit_order", transform_bit_order(v)),
    "register_address_type": lambda c, v: setattr(
        c, "register_address_type", transform_integer_type(v)
    ),
    "command_address_type": lambda c, v: setattr(
        c, "command_address_type", transform_integer_type(v)
    ),
    "buffer_address_type": lambda c, v: setattr(
        c, "buffer_address_type", transform_integer_type(v)
    ),
    "name_word_boundaries": lambda c, v: setattr(
        c, "name_word_boundaries", transform_name_word_boundaries(v)
    ),
    "defmt_feature": _set_defmt_feature,
}


def transform_global_config(value: ManifestValue) -> GlobalConfig:
    """Read the global configuration map."""
    config = GlobalConfig()
    for key, item in value.as_map().items():
        setter = _SETTERS.get(key)
        if setter is None:
            raise ManifestError(f"No config with key `{key}` is recognized")
        with _context(f"Parsing error for {key}"):
            setter(config, item)
    return config