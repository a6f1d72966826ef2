from textwrap import dedent

import pytest

from regmanifest.manifest import (
    transform,
    transform_enum_value,
    transform_enum_variant,
    transform_field,
    transform_fields,
    transform_field_conversion,
    transform_object,
    transform_object_override,
    transform_repeat,
)
from regmanifest.model import (
    Access,
    BaseType,
    BitOrder,
    Block,
    Buffer,
    ByteOrder,
    Cfg,
    CommandOverride,
    Device,
    EnumDefinition,
    EnumValue,
    EnumVariant,
    Field,
    FieldConversion,
    GlobalConfig,
    Integer,
    RefObject,
    Register,
    RegisterOverride,
    Repeat,
    ResetValue,
)
from regmanifest.values import ManifestError, parse_manifest


def _yaml(text):
    return parse_manifest(dedent(text), "yaml")


def _root(err):
    return str(err.value.root_cause())


def test_register_requires_address():
    with pytest.raises(ManifestError) as err:
        transform_object("my_register", _yaml("type: register\n"))
    assert _root(err) == "Register definition must contain the `address` field"


def test_register_requires_size_bits():
    with pytest.raises(ManifestError) as err:
        transform_object("my_register", _yaml("type: register\naddress: 42\n"))
    assert _root(err) == "Register definition must contain the `size_bits` field"


def test_minimal_register():
    result = transform_object(
        "my_register", _yaml("type: register\naddress: 42\nsize_bits: 8\n")
    )
    assert result == Register(name="my_register", address=42, size_bits=8)


def test_full_register():
    result = transform_object(
        "my_register",
        _yaml(
            """
            type: register
            address: 42
            size_bits: 8
            access: WO
            allow_address_overlap: true
            allow_bit_overlap: true
            bit_order: MSB0
            byte_order: BE
            repeat:
                count: 12
                stride: -3
            reset_value: [1, 2, 3]
            description: hello!
            cfg: windows
            """
        ),
    )
    assert result == Register(
        name="my_register",
        address=42,
        size_bits=8,
        access=Access.WO,
        allow_address_overlap=True,
        allow_bit_overlap=True,
        bit_order=BitOrder.MSB0,
        byte_order=ByteOrder.BE,
        repeat=Repeat(count=12, stride=-3),
        reset_value=ResetValue(bytes([1, 2, 3])),
        description="hello!",
        cfg_attr=Cfg("windows"),
    )


def test_register_with_fields():
    result = transform_object(
        "my_register",
        _yaml(
            """
            type: register
            address: 42
            size_bits: 9
            fields:
                test:
                    cfg: unix
                    description: The test field
                    base: int
                    access: RO
                    start: 0
                    end: 3
                test2:
                    base: uint
                    start: 3
                    end: 6
                    try_conversion: MyStruct
                test3:
                    base: int
                    start: 6
                    end: 9
                    conversion:
                        name: MyEnum
                        description: This is my enum
                        var1: 1
                        varEmpty:
                        varDefault: default
                        varDocumented:
                            cfg: feature = "foo"
                            description: This one is documented
                            value: catch_all
            """
        ),
    )
    expected = Register(
        name="my_register",
        address=42,
        size_bits=9,
        fields=[
            Field(
                cfg_attr=Cfg("unix"),
                description="The test field",
                name="test",
                access=Access.RO,
                base_type=BaseType.INT,
                field_conversion=None,
                field_address=range(0, 3),
            ),
            Field(
                name="test2",
                base_type=BaseType.UINT,
                field_conversion=FieldConversion.direct("MyStruct", use_try=True),
                field_address=range(3, 6),
            ),
            Field(
                name="test3",
                base_type=BaseType.INT,
                field_conversion=FieldConversion.enum(
                    EnumDefinition(
                        "This is my enum",
                        "MyEnum",
                        [
                            EnumVariant(name="var1", value=EnumValue.specified(1)),
                            EnumVariant(name="varEmpty", value=EnumValue.unspecified()),
                            EnumVariant(name="varDefault", value=EnumValue.default()),
                            EnumVariant(
                                cfg_attr=Cfg('feature = "foo"'),
                                description="This one is documented",
                                name="varDocumented",
                                value=EnumValue.catch_all(),
                            ),
                        ],
                    ),
                    use_try=False,
                ),
                field_address=range(6, 9),
            ),
        ],
    )
    assert result == expected


def test_transform_device_with_block():
    device = transform(
        _yaml(
            """
            config:
                register_address_type: u8
            blk:
                type: block
                address_offset: 4
                repeat: {count: 2, stride: 8}
                objects:
                    buf:
                        type: buffer
                        address: 1
                        access: RO
            """
        )
    )
    assert device == Device(
        global_config=GlobalConfig(register_address_type=Integer.U8),
        objects=[
            Block(
                name="blk",
                address_offset=4,
                repeat=Repeat(count=2, stride=8),
                objects=[Buffer(name="buf", address=1, access=Access.RO)],
            )
        ],
    )


def test_global_config_error_gets_context():
    with pytest.raises(ManifestError) as err:
        transform(_yaml("config:\n    test: 1\n"))
    assert str(err.value) == "Parsing error in global config"
    assert _root(err) == "No config with key `test` is recognized"


def test_unknown_object_type():
    with pytest.raises(ManifestError) as err:
        transform_object("x", _yaml("type: thing\n"))
    assert str(err.value) == "Parsing object `x`"
    assert _root(err) == (
        "Unexpected object type `thing`. Select one of `block`, `register`, "
        "`command`, `buffer` or `ref`"
    )


def test_missing_type():
    with pytest.raises(ManifestError) as err:
        transform_object("x", _yaml("address: 1\n"))
    assert _root(err) == "No `type` field present"


def test_block_unexpected_key():
    with pytest.raises(ManifestError) as err:
        transform_object("b", _yaml("type: block\naddress: 3\n"))
    assert _root(err).startswith("Unexpected key found: `address`")


def test_reset_value_array_must_hold_bytes():
    with pytest.raises(ManifestError) as err:
        transform_object(
            "r", _yaml("type: register\naddress: 1\nsize_bits: 8\nreset_value: [1, 300]\n")
        )
    assert format(err.value, "#").startswith(
        "Parsing object `r`: Parsing error for `reset_value`: Array must contain bytes"
    )


def test_reset_value_wrong_type():
    with pytest.raises(ManifestError) as err:
        transform_object(
            "r", _yaml("type: register\naddress: 1\nsize_bits: 8\nreset_value: abc\n")
        )
    assert _root(err) == "Field must be an integer or an array"


def test_repeat_values_and_errors():
    assert transform_repeat(_yaml("{count: 3, stride: -2}")) == Repeat(count=3, stride=-2)

    with pytest.raises(ManifestError) as err:
        transform_repeat(_yaml("{count: 3, stride: 1, extra: 0}"))
    assert str(err.value) == (
        "Unrecognized key: `extra`. Only `count` and `stride` are valid fields"
    )

    with pytest.raises(ManifestError) as err:
        transform_repeat(_yaml("{stride: 1}"))
    assert str(err.value) == "Missing field `count`"


def test_ref_with_register_override():
    result = transform_object(
        "r",
        _yaml(
            """
            type: ref
            target: foo
            description: copy
            override:
                type: register
                address: 7
                reset_value: 5
            """
        ),
    )
    assert result == RefObject(
        name="r",
        description="copy",
        object_override=RegisterOverride(
            name="foo", address=7, reset_value=ResetValue(5)
        ),
    )


def test_override_of_buffer_rejected():
    with pytest.raises(ManifestError) as err:
        transform_object_override("foo", _yaml("type: buffer\n"))
    assert str(err.value) == "Cannot make refs to `buffer`s"


def test_command_override():
    result = transform_object_override(
        "cmd", _yaml("type: command\naddress: 2\nallow_address_overlap: true\n")
    )
    assert result == CommandOverride(name="cmd", address=2, allow_address_overlap=True)


def test_field_start_without_end():
    field = transform_field("f", _yaml("base: bool\nstart: 5\n"))
    assert field.field_address == range(5, 5)
    assert field.base_type is BaseType.BOOL


def test_field_conflicting_conversions():
    with pytest.raises(ManifestError) as err:
        transform_field("f", _yaml("base: uint\nstart: 0\nconversion: A\ntry_conversion: B\n"))
    assert str(err.value) == (
        "Cannot have both `conversion` and `try_conversion` on a field. Pick one."
    )


def test_fields_error_names_field():
    with pytest.raises(ManifestError) as err:
        transform_fields(_yaml("f:\n    start: 0\n"))
    assert str(err.value) == "Parsing field `f`"
    assert _root(err) == "Field definition must contain the `base` field"


def test_field_conversion_wrong_type():
    with pytest.raises(ManifestError) as err:
        transform_field_conversion(_yaml("[1]"), False)
    assert str(err.value).startswith("Value must a string")


def test_enum_variant_bad_string():
    with pytest.raises(ManifestError) as err:
        transform_enum_variant("v", _yaml("nope"))
    assert str(err.value) == (
        "Enum variant `v` not recognized. Must be a `map` for the extended definition. "
        "Cannot parse value as value directly: Unexpected string value: `nope`. "
        "Choose one of `default` or `catch_all`"
    )


def test_enum_value_kinds():
    assert transform_enum_value(_yaml("null")) == EnumValue.unspecified()
    assert transform_enum_value(_yaml("-4")) == EnumValue.specified(-4)
    assert transform_enum_value(_yaml("default")) == EnumValue.default()
    with pytest.raises(ManifestError) as err:
        transform_enum_value(_yaml("true"))
    assert str(err.value) == (
        "Enum variant value not recognized. Must be one of `null`, `int` or `string`"
    )