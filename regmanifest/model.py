"""Mid-level description of a device, as read from a manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .casing import DEFAULT_BOUNDARIES, Boundary


class Access(Enum):
    """Which operations are allowed on a register, field or buffer."""

    RW = "RW"
    RO = "RO"
    WO = "WO"


class BitOrder(Enum):
    """Numbering of bits within a field set."""

    LSB0 = "LSB0"
    MSB0 = "MSB0"


class ByteOrder(Enum):
    """Order of bytes within a field set."""

    LE = "LE"
    BE = "BE"


class Integer(Enum):
    """Integer types usable as address types."""

    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"


class BaseType(Enum):
    """The raw type a field is stored as."""

    UNSPECIFIED = "unspecified"
    BOOL = "bool"
    UINT = "uint"
    INT = "int"


@dataclass(frozen=True)
class Cfg:
    """An optional conditional-compilation attribute."""

    value: str | None = None


@dataclass(frozen=True, kw_only=True)
class Repeat:
    """Repetition of an object: ``count`` copies, ``stride`` apart."""

    count: int
    stride: int


@dataclass(frozen=True)
class ResetValue:
    """A reset value, either a single integer or an explicit byte array."""

    value: int | bytes

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool):
            raise TypeError("a reset value cannot be a bool")
        if isinstance(value, int):
            if value < 0:
                raise ValueError("an integer reset value cannot be negative")
            return
        if isinstance(value, (bytes, bytearray, list, tuple)):
            object.__setattr__(self, "value", bytes(value))
            return
        raise TypeError("a reset value must be an integer or a byte array")

    @property
    def is_integer(self) -> bool:
        """True when the value is a single integer."""
        return isinstance(self.value, int)


_ENUM_VALUE_KINDS = frozenset({"unspecified", "specified", "default", "catch_all"})


@dataclass(frozen=True)
class EnumValue:
    """The value of an enum variant: unspecified, a number, default or catch-all."""

    kind: str = "unspecified"
    number: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in _ENUM_VALUE_KINDS:
            raise ValueError(f"unknown enum value kind `{self.kind}`")
        if (self.kind == "specified") != (self.number is not None):
            raise ValueError("only a specified enum value carries a number")

    @classmethod
    def unspecified(cls) -> EnumValue:
        return cls("unspecified")

    @classmethod
    def specified(cls, number: int) -> EnumValue:
        return cls("specified", number)

    @classmethod
    def default(cls) -> EnumValue:
        return cls("default")

    @classmethod
    def catch_all(cls) -> EnumValue:
        return cls("catch_all")


@dataclass(kw_only=True)
class EnumVariant:
    """One variant of an enum defined in a manifest."""

    cfg_attr: Cfg = field(default_factory=Cfg)
    description: str = ""
    name: str = ""
    value: EnumValue = field(default_factory=EnumValue)


@dataclass
class EnumDefinition:
    """An enum to be generated for a field conversion."""

    description: str = ""
    name: str = ""
    variants: list[EnumVariant] = field(default_factory=list)
    cfg_attr: Cfg = field(default_factory=Cfg)


@dataclass(kw_only=True)
class FieldConversion:
    """Conversion of a field to an existing type or to a newly defined enum."""

    use_try: bool = False
    type_name: str | None = None
    enum_value: EnumDefinition | None = None

    def __post_init__(self) -> None:
        if (self.type_name is None) == (self.enum_value is None):
            raise ValueError("a field conversion needs exactly one of a type name or an enum")

    @classmethod
    def direct(cls, type_name: str, use_try: bool = False) -> FieldConversion:
        return cls(type_name=type_name, use_try=use_try)

    @classmethod
    def enum(cls, enum_value: EnumDefinition, use_try: bool = False) -> FieldConversion:
        return cls(enum_value=enum_value, use_try=use_try)


@dataclass(kw_only=True)
class Field:
    """A field in a register or command, occupying a range of bits."""

    cfg_attr: Cfg = field(default_factory=Cfg)
    description: str = ""
    name: str = ""
    access: Access = Access.RW
    base_type: BaseType = BaseType.UNSPECIFIED
    field_conversion: FieldConversion | None = None
    field_address: range = range(0, 0)


@dataclass(kw_only=True)
class Register:
    """A register definition."""

    cfg_attr: Cfg = field(default_factory=Cfg)
    description: str = ""
    name: str = ""
    access: Access = Access.RW
    byte_order: ByteOrder | None = None
    bit_order: BitOrder = BitOrder.LSB0
    allow_bit_overlap: bool = False
    allow_address_overlap: bool = False
    address: int = 0
    size_bits: int = 0
    reset_value: ResetValue | None = None
    repeat: Repeat | None = None
    fields: list[Field] = field(default_factory=list)


@dataclass(kw_only=True)
class Command:
    """A command definition with optional input and output fields."""

    cfg_attr: Cfg = field(default_factory=Cfg)
    description: str = ""
    name: str = ""
    address: int = 0
    byte_order: ByteOrder | None = None
    bit_order: BitOrder = BitOrder.LSB0
    allow_bit_overlap: bool = False
    allow_address_overlap: bool = False
    size_bits_in: int = 0
    size_bits_out: int = 0
    repeat: Repeat | None = None
    in_fields: list[Field] = field(default_factory=list)
    out_fields: list[Field] = field(default_factory=list)


@dataclass(kw_only=True)
class Buffer:
    """A buffer definition."""

    cfg_attr: Cfg = field(default_factory=Cfg)
    description: str = ""
    name: str = ""
    access: Access = Access.RW
    address: int = 0


@dataclass(kw_only=True)
class Block:
    """A group of objects sharing an address offset."""

    cfg_attr: Cfg = field(default_factory=Cfg)
    description: str = ""
    name: str = ""
    address_offset: int = 0
    repeat: Repeat | None = None
    objects: list[Object] = field(default_factory=list)


@dataclass(kw_only=True)
class BlockOverride:
    """Changes a ref makes to a block it copies."""

    name: str = ""
    address_offset: int | None = None
    repeat: Repeat | None = None


@dataclass(kw_only=True)
class RegisterOverride:
    """Changes a ref makes to a register it copies."""

    name: str = ""
    access: Access | None = None
    address: int | None = None
    allow_address_overlap: bool = False
    reset_value: ResetValue | None = None
    repeat: Repeat | None = None


@dataclass(kw_only=True)
class CommandOverride:
    """Changes a ref makes to a command it copies."""

    name: str = ""
    address: int | None = None
    allow_address_overlap: bool = False
    repeat: Repeat | None = None


ObjectOverride = Union[BlockOverride, RegisterOverride, CommandOverride]


@dataclass(kw_only=True)
class RefObject:
    """A copy of another object with some properties overridden."""

    cfg_attr: Cfg = field(default_factory=Cfg)
    description: str = ""
    name: str = ""
    object_override: ObjectOverride | None = None


Object = Union[Block, Register, Command, Buffer, RefObject]


@dataclass(kw_only=True)
class GlobalConfig:
    """Settings that apply to the whole device."""

    default_register_access: Access = Access.RW
    default_field_access: Access = Access.RW
    default_buffer_access: Access = Access.RW
    default_byte_order: ByteOrder | None = None
    default_bit_order: BitOrder = BitOrder.LSB0
    register_address_type: Integer | None = None
    command_address_type: Integer | None = None
    buffer_address_type: Integer | None = None
    name_word_boundaries: list[Boundary] = field(
        default_factory=lambda: list(DEFAULT_BOUNDARIES)
    )
    defmt_feature: str | None = None


@dataclass(kw_only=True)
class Device:
    """A whole device: its configuration and its top-level objects."""

    name: str | None = None
    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    objects: list[Object] = field(default_factory=list)