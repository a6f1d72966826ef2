"""Low-level representation of a device, close to the shape of generated code."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(kw_only=True)
class Repeated:
    """Repetition of a block method: ``count`` copies, ``stride`` apart."""

    count: int
    stride: int


@dataclass(kw_only=True)
class BlockTarget:
    """A method that yields a child block."""

    name: str


@dataclass(kw_only=True)
class RegisterTarget:
    """A method that yields a register operation."""

    field_set_name: str
    access: Any
    address_type: Any
    reset_value_function: str


@dataclass(kw_only=True)
class CommandTarget:
    """A method that yields a command operation."""

    field_set_name_in: str | None
    field_set_name_out: str | None
    address_type: Any


@dataclass(kw_only=True)
class BufferTarget:
    """A method that yields a buffer operation."""

    access: Any
    address_type: Any


MethodTarget = BlockTarget | RegisterTarget | CommandTarget | BufferTarget


@dataclass(kw_only=True)
class BlockMethod:
    """One accessor on a block."""

    cfg_attr: str = ""
    description: str = ""
    name: str
    address: int
    # Only consulted by the passes, not by code generation.
    allow_address_overlap: bool = False
    repeat: Repeated | None = None
    target: MethodTarget


@dataclass(kw_only=True)
class Block:
    """A group of methods; the root block is the driver itself."""

    cfg_attr: str = ""
    description: str = ""
    root: bool = False
    name: str
    methods: list[BlockMethod] = field(default_factory=list)


class ConversionKind(Enum):
    """How a raw field value is converted to its public type."""

    NONE = "none"
    INTO = "into"
    UNSAFE_INTO = "unsafe_into"
    TRY_INTO = "try_into"
    BOOL = "bool"


_TYPED_KINDS = frozenset(
    {ConversionKind.INTO, ConversionKind.UNSAFE_INTO, ConversionKind.TRY_INTO}
)


@dataclass(frozen=True, kw_only=True)
class FieldConversionMethod:
    """A conversion kind together with the target type path where one is needed."""

    kind: ConversionKind = ConversionKind.NONE
    type_path: str | None = None

    def __post_init__(self) -> None:
        if self.kind in _TYPED_KINDS and self.type_path is None:
            raise ValueError(f"conversion {self.kind.value} needs a type path")
        if self.kind not in _TYPED_KINDS and self.type_path is not None:
            raise ValueError(f"conversion {self.kind.value} takes no type path")

    def conversion_type(self) -> str | None:
        """The type path converted to, if any."""
        return self.type_path if self.kind in _TYPED_KINDS else None


@dataclass(kw_only=True)
class Field:
    """A field within a field set, occupying a range of bits."""

    cfg_attr: str = ""
    description: str = ""
    name: str
    address: range
    base_type: str
    conversion_method: FieldConversionMethod = field(default_factory=FieldConversionMethod)
    access: Any


@dataclass(kw_only=True)
class FieldSet:
    """A set of fields, like a register or a command's input or output."""

    cfg_attr: str = ""
    description: str = ""
    name: str
    byte_order: Any
    bit_order: Any
    size_bits: int
    reset_value: bytes = b""
    ref_reset_overrides: list[tuple[str, bytes]] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)

    def size_bytes(self) -> int:
        """Number of bytes needed to hold ``size_bits`` bits."""
        return -(-self.size_bits // 8)


@dataclass(kw_only=True)
class EnumVariant:
    """One variant of a generated enum."""

    cfg_attr: str = ""
    description: str = ""
    name: str
    number: int
    default: bool = False
    catch_all: bool = False


@dataclass(kw_only=True)
class EnumDef:
    """A generated enum."""

    cfg_attr: str = ""
    description: str = ""
    name: str
    base_type: str
    variants: list[EnumVariant] = field(default_factory=list)

    def default_variant(self) -> EnumVariant | None:
        """The first variant marked as default, if any."""
        return next((v for v in self.variants if v.default), None)

    def catch_all_variant(self) -> EnumVariant | None:
        """The first variant marked as catch-all, if any."""
        return next((v for v in self.variants if v.catch_all), None)


@dataclass(kw_only=True)
class Device:
    """The whole device: blocks, field sets and enums."""

    internal_address_type: Any
    register_address_type: Any
    blocks: list[Block] = field(default_factory=list)
    field_sets: list[FieldSet] = field(default_factory=list)
    enums: list[EnumDef] = field(default_factory=list)
    defmt_feature: str | None = None