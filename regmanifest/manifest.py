"""Turning a parsed manifest document into the mid-level device description."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from .config import (
    transform_access,
    transform_bit_order,
    transform_byte_order,
    transform_global_config,
)
from .model import (
    BaseType,
    Block,
    BlockOverride,
    Buffer,
    Cfg,
    Command,
    CommandOverride,
    Device,
    EnumDefinition,
    EnumValue,
    EnumVariant,
    Field,
    FieldConversion,
    GlobalConfig,
    Object,
    ObjectOverride,
    RefObject,
    Register,
    RegisterOverride,
    Repeat,
    ResetValue,
)
from .values import ManifestError, ManifestValue

_T = TypeVar("_T")

_U8_MAX = 2**8 - 1
_U32_MAX = 2**32 - 1
_OUT_OF_RANGE = "out of range integral type conversion attempted"

_BASE_TYPES = {"bool": BaseType.BOOL, "int": BaseType.INT, "uint": BaseType.UINT}


@contextmanager
def _context(message: str) -> Iterator[None]:
    try:
        yield
    except ManifestError as err:
        raise err.with_context(message) from err


def _parse(reader: Callable[[ManifestValue], _T], value: ManifestValue, key: str) -> _T:
    with _context(f"Parsing error for `{key}`"):
        return reader(value)


def _read_string(value: ManifestValue, key: str) -> str:
    return _parse(ManifestValue.as_string, value, key)


def _read_cfg(value: ManifestValue) -> Cfg:
    return Cfg(_read_string(value, "cfg"))


def _read_u32(value: ManifestValue, key: str) -> int:
    number = _parse(ManifestValue.as_uint, value, key)
    if number > _U32_MAX:
        raise ManifestError(_OUT_OF_RANGE).with_context(f"Parsing error for `{key}`")
    return number


def _read_byte(item: ManifestValue) -> int:
    with _context("Array must contain bytes"):
        number = item.as_uint()
    if number > _U8_MAX:
        raise ManifestError(_OUT_OF_RANGE).with_context("Array must contain bytes")
    return number


def _read_reset_value(value: ManifestValue) -> ResetValue:
    try:
        return ResetValue(value.as_uint())
    except ManifestError:
        pass
    try:
        items = value.as_array()
    except ManifestError:
        raise ManifestError("Field must be an integer or an array").with_context(
            "Parsing error for `reset_value`"
        ) from None
    with _context("Parsing error for `reset_value`"):
        return ResetValue(bytes([_read_byte(item) for item in items]))


def _require(entries: dict[str, ManifestValue], keys: Iterable[str], kind: str) -> None:
    for key in keys:
        if key not in entries:
            raise ManifestError(f"{kind} definition must contain the `{key}` field")


def _object_type(entries: dict[str, ManifestValue]) -> str:
    type_value = entries.get("type")
    if type_value is None:
        raise ManifestError("No `type` field present")
    return type_value.as_string()


def transform(value: ManifestValue) -> Device:
    """Read a whole manifest document into a device description."""
    device_map = value.as_map()

    if "config" in device_map:
        with _context("Parsing error in global config"):
            global_config = transform_global_config(device_map["config"])
    else:
        global_config = GlobalConfig()

    objects = [
        transform_object(key, item) for key, item in device_map.items() if key != "config"
    ]
    return Device(name=None, global_config=global_config, objects=objects)


def transform_object(key: str, value: ManifestValue) -> Object:
    """Read one named object: a block, register, command, buffer or ref."""
    with _context(f"Parsing object `{key}`"):
        entries = value.as_map()
        object_type = _object_type(entries)
        match object_type:
            case "block":
                return _transform_block(key, entries)
            case "register":
                return _transform_register(key, entries)
            case "command":
                return _transform_command(key, entries)
            case "buffer":
                return _transform_buffer(key, entries)
            case "ref":
                return _transform_ref(key, entries)
            case _:
                raise ManifestError(
                    f"Unexpected object type `{object_type}`. Select one of `block`, "
                    "`register`, `command`, `buffer` or `ref`"
                )


def _transform_block(name: str, entries: dict[str, ManifestValue]) -> Block:
    block = Block(name=name)
    for key, value in entries.items():
        match key:
            case "type":
                pass
            case "cfg":
                block.cfg_attr = _read_cfg(value)
            case "description":
                block.description = _read_string(value, "description")
            case "address_offset":
                block.address_offset = _parse(ManifestValue.as_int, value, "address_offset")
            case "repeat":
                block.repeat = _parse(transform_repeat, value, "repeat")
            case "objects":
                with _context("Parsing error for `objects`"):
                    block.objects = [
                        transform_object(child_key, child)
                        for child_key, child in value.as_map().items()
                    ]
            case _:
                raise ManifestError(
                    f"Unexpected key found: `{key}`. Choose one of `type`, `cfg`, "
                    "`description`, `address_offset`, `repeat` or `objects`"
                )
    return block


def _transform_register(name: str, entries: dict[str, ManifestValue]) -> Register:
    register = Register(name=name)
    _require(entries, ("address", "size_bits"), "Register")

    for key, value in entries.items():
        match key:
            case "type":
                pass
            case "cfg":
                register.cfg_attr = _read_cfg(value)
            case "description":
                register.description = _read_string(value, "description")
            case "access":
                register.access = _parse(transform_access, value, "access")
            case "byte_order":
                register.byte_order = _parse(transform_byte_order, value, "byte_order")
            case "bit_order":
                register.bit_order = _parse(transform_bit_order, value, "bit_order")
            case "address":
                register.address = _parse(ManifestValue.as_int, value, "address")
            case "size_bits":
                register.size_bits = _read_u32(value, "size_bits")
            case "reset_value":
                register.reset_value = _read_reset_value(value)
            case "repeat":
                register.repeat = _parse(transform_repeat, value, "repeat")
            case "allow_bit_overlap":
                register.allow_bit_overlap = _parse(
                    ManifestValue.as_bool, value, "allow_bit_overlap"
                )
            case "allow_address_overlap":
                register.allow_address_overlap = _parse(
                    ManifestValue.as_bool, value, "allow_address_overlap"
                )
            case "fields":
                register.fields = _parse(transform_fields, value, "fields")
            case _:
                raise ManifestError(f"Unexpected key: `{key}`")
    return register


def _transform_command(name: str, entries: dict[str, ManifestValue]) -> Command:
    command = Command(name=name)
    _require(entries, ("address",), "Command")

    for key, value in entries.items():
        match key:
            case "type":
                pass
            case "cfg":
                command.cfg_attr = _read_cfg(value)
            case "description":
                command.description = _read_string(value, "description")
            case "byte_order":
                command.byte_order = _parse(transform_byte_order, value, "byte_order")
            case "bit_order":
                command.bit_order = _parse(transform_bit_order, value, "bit_order")
            case "address":
                command.address = _parse(ManifestValue.as_int, value, "address")
            case "size_bits_in":
                command.size_bits_in = _read_u32(value, "size_bits_in")
            case "size_bits_out":
                command.size_bits_out = _read_u32(value, "size_bits_out")
            case "repeat":
                command.repeat = _parse(transform_repeat, value, "repeat")
            case "allow_bit_overlap":
                command.allow_bit_overlap = _parse(
                    ManifestValue.as_bool, value, "allow_bit_overlap"
                )
            case "allow_address_overlap":
                command.allow_address_overlap = _parse(
                    ManifestValue.as_bool, value, "allow_address_overlap"
                )
            case "fields_in":
                command.in_fields = _parse(transform_fields, value, "fields_in")
            case "fields_out":
                command.out_fields = _parse(transform_fields, value, "fields_out")
            case _:
                raise ManifestError(f"Unexpected key: `{key}`")
    return command


def _transform_buffer(name: str, entries: dict[str, ManifestValue]) -> Buffer:
    buffer = Buffer(name=name)
    _require(entries, ("address",), "Buffer")

    for key, value in entries.items():
        match key:
            case "type":
                pass
            case "cfg":
                buffer.cfg_attr = _read_cfg(value)
            case "description":
                buffer.description = _read_string(value, "description")
            case "access":
                buffer.access = _parse(transform_access, value, "access")
            case "address":
                buffer.address = _parse(ManifestValue.as_int, value, "address")
            case _:
                raise ManifestError(f"Unexpected key: `{key}`")
    return buffer


def _transform_ref(name: str, entries: dict[str, ManifestValue]) -> RefObject:
    ref_object = RefObject(name=name)
    _require(entries, ("target", "override"), "Ref")

    target = _read_string(entries["target"], "target")
    override_value = entries["override"]

    for key, value in entries.items():
        match key:
            case "type" | "target" | "override":
                pass
            case "cfg":
                ref_object.cfg_attr = _read_cfg(value)
            case "description":
                ref_object.description = _read_string(value, "description")
            case _:
                raise ManifestError(f"Unexpected key: `{key}`")

    with _context("Parsing error for `override`"):
        ref_object.object_override = transform_object_override(target, override_value)
    return ref_object


def transform_object_override(target: str, value: ManifestValue) -> ObjectOverride:
    """Read the override part of a ref that points at ``target``."""
    entries = value.as_map()
    object_type = _object_type(entries)
    match object_type:
        case "block":
            return _transform_block_override(target, entries)
        case "register":
            return _transform_register_override(target, entries)
        case "command":
            return _transform_command_override(target, entries)
        case "buffer":
            raise ManifestError("Cannot make refs to `buffer`s")
        case "ref":
            raise ManifestError("Cannot make refs to `ref`s")
        case _:
            raise ManifestError(
                f"Unexpected object type `{object_type}`. Select one of `block`, "
                "`register` or `command`"
            )


def _transform_block_override(name: str, entries: dict[str, ManifestValue]) -> BlockOverride:
    block = BlockOverride(name=name)
    for key, value in entries.items():
        match key:
            case "type":
                pass
            case "address_offset":
                block.address_offset = _parse(ManifestValue.as_int, value, "address_offset")
            case "repeat":
                block.repeat = _parse(transform_repeat, value, "repeat")
            case _:
                raise ManifestError(
                    f"Unexpected key found: `{key}`. Choose one of `type`, "
                    "`address_offset` or `repeat`"
                )
    return block


def _transform_register_override(
    name: str, entries: dict[str, ManifestValue]
) -> RegisterOverride:
    register = RegisterOverride(name=name)
    for key, value in entries.items():
        match key:
            case "type":
                pass
            case "access":
                register.access = _parse(transform_access, value, "access")
            case "address":
                register.address = _parse(ManifestValue.as_int, value, "address")
            case "reset_value":
                register.reset_value = _read_reset_value(value)
            case "repeat":
                register.repeat = _parse(transform_repeat, value, "repeat")
            case "allow_address_overlap":
                register.allow_address_overlap = _parse(
                    ManifestValue.as_bool, value, "allow_address_overlap"
                )
            case _:
                raise ManifestError(f"Unexpected key: `{key}`")
    return register


def _transform_command_override(
    name: str, entries: dict[str, ManifestValue]
) -> CommandOverride:
    command = CommandOverride(name=name)
    for key, value in entries.items():
        match key:
            case "type":
                pass
            case "address":
                command.address = _parse(ManifestValue.as_int, value, "address")
            case "repeat":
                with _context("Parsing error for `repeat"):
                    command.repeat = transform_repeat(value)
            case "allow_address_overlap":
                command.allow_address_overlap = _parse(
                    ManifestValue.as_bool, value, "allow_address_overlap"
                )
            case _:
                raise ManifestError(f"Unexpected key: `{key}`")
    return command


def transform_repeat(value: ManifestValue) -> Repeat:
    """Read a ``repeat`` map holding exactly ``count`` and ``stride``."""
    entries = value.as_map()

    count_value = entries.get("count")
    if count_value is None:
        raise ManifestError("Missing field `count`")
    with _context("Parsing field `count`"):
        count = count_value.as_uint()

    stride_value = entries.get("stride")
    if stride_value is None:
        raise ManifestError("Missing field `stride`")
    with _context("Parsing field `stride`"):
        stride = stride_value.as_int()

    unknown = next((key for key in entries if key not in ("count", "stride")), None)
    if unknown is not None:
        raise ManifestError(
            f"Unrecognized key: `{unknown}`. Only `count` and `stride` are valid fields"
        )

    return Repeat(count=count, stride=stride)


def transform_fields(value: ManifestValue) -> list[Field]:
    """Read a map of named fields."""
    fields = []
    for name, item in value.as_map().items():
        with _context(f"Parsing field `{name}`"):
            fields.append(transform_field(name, item))
    return fields


def _transform_base_type(value: ManifestValue) -> BaseType:
    text = value.as_string()
    try:
        return _BASE_TYPES[text]
    except KeyError:
        raise ManifestError(
            f"Unexpected value: `{text}`. Choose one of `bool`, `int` or `uint`"
        ) from None


def transform_field(name: str, value: ManifestValue) -> Field:
    """Read a single field definition."""
    field = Field(name=name)
    entries = value.as_map()
    _require(entries, ("base", "start"), "Field")

    start = field.field_address.start
    end = field.field_address.stop

    for key, item in entries.items():
        match key:
            case "cfg":
                field.cfg_attr = _read_cfg(item)
            case "description":
                field.description = _read_string(item, "description")
            case "access":
                field.access = _parse(transform_access, item, "access")
            case "base":
                field.base_type = _parse(_transform_base_type, item, "base")
            case "conversion":
                with _context("Parsing error for `conversion`"):
                    field.field_conversion = transform_field_conversion(item, False)
            case "try_conversion":
                if "conversion" in entries:
                    raise ManifestError(
                        "Cannot have both `conversion` and `try_conversion` on a field. "
                        "Pick one."
                    )
                with _context("Parsing error for `try_conversion`"):
                    field.field_conversion = transform_field_conversion(item, True)
            case "start":
                start = _read_u32(item, "start")
                if "end" not in entries:
                    end = start
            case "end":
                end = _read_u32(item, "end")
            case _:
                raise ManifestError(f"Unexpected key: `{key}`")

    field.field_address = range(start, end)
    return field


def transform_field_conversion(value: ManifestValue, use_try: bool) -> FieldConversion:
    """Read a conversion: a type name, or a map defining a new enum."""
    try:
        type_name = value.as_string()
    except ManifestError:
        pass
    else:
        return FieldConversion.direct(type_name, use_try)

    try:
        entries = value.as_map()
    except ManifestError:
        raise ManifestError(
            "Value must a string (to denote an existing type) or a map (to generate a new enum)"
        ) from None

    name_value = entries.get("name")
    if name_value is None:
        raise ManifestError("Missing `name` field")
    name = name_value.as_string()

    description_value = entries.get("description")
    description = "" if description_value is None else description_value.as_string()

    variants = []
    with _context("Parsing error for enum variant"):
        for key, item in entries.items():
            if key in ("name", "description"):
                continue
            with _context(f"Parsing variant `{key}`"):
                variants.append(transform_enum_variant(key, item))

    return FieldConversion.enum(EnumDefinition(description, name, variants), use_try)


def transform_enum_variant(name: str, value: ManifestValue) -> EnumVariant:
    """Read an enum variant, either as a bare value or as an extended map."""
    try:
        entries = value.as_map()
    except ManifestError:
        try:
            enum_value = transform_enum_value(value)
        except ManifestError as err:
            raise ManifestError(
                f"Enum variant `{name}` not recognized. Must be a `map` for the extended "
                f"definition. Cannot parse value as value directly: {err:#}"
            ) from err
        return EnumVariant(name=name, value=enum_value)

    cfg = None
    if "cfg" in entries:
        with _context("Parsing `cfg`"):
            cfg = entries["cfg"].as_string()
    description = ""
    if "description" in entries:
        with _context("Parsing `description`"):
            description = entries["description"].as_string()
    enum_value = EnumValue.unspecified()
    if "value" in entries:
        with _context("Parsing `description`"):
            enum_value = transform_enum_value(entries["value"])

    return EnumVariant(
        name=name,
        value=enum_value,
        description=description,
        cfg_attr=Cfg(cfg),
    )


def transform_enum_value(value: ManifestValue) -> EnumValue:
    """Read an enum value: null, an integer, ``default`` or ``catch_all``."""
    if value.raw is None:
        return EnumValue.unspecified()
    try:
        return EnumValue.specified(value.as_int())
    except ManifestError:
        pass
    try:
        text = value.as_string()
    except ManifestError:
        raise ManifestError(
            "Enum variant value not recognized. Must be one of `null`, `int` or `string`"
        ) from None
    match text:
        case "default":
            return EnumValue.default()
        case "catch_all":
            return EnumValue.catch_all()
        case _:
            raise ManifestError(
                f"Unexpected string value: `{text}`. Choose one of `default` or `catch_all`"
            )