# regmanifest

`regmanifest` reads a description of a device's registers, commands and
buffers from a YAML, JSON or TOML manifest, validates it, and turns it into
typed dataclasses (`regmanifest.model`). It also holds a lower-level
block/method model (`regmanifest.lir`) with an address-overlap check, and a
few helpers for emitting driver source text.

## Installation

```
pip install regmanifest
```

YAML is read with PyYAML; JSON and TOML with the standard library.

## Writing a manifest

Every top-level key names an object, except `config`, which holds global
settings. Each object has a `type`: `block`, `register`, `command`, `buffer`
or `ref`.

```yaml
config:
  default_register_access: RW
  default_byte_order: LE
  register_address_type: u8

foo:
  type: register
  address: 0
  size_bits: 24
  fields:
    value:
      base: uint
      start: 0
      end: 24
```

Recognised `config` keys are `default_register_access`,
`default_field_access`, `default_buffer_access`, `default_byte_order`,
`default_bit_order`, `register_address_type`, `command_address_type`,
`buffer_address_type`, `name_word_boundaries` and `defmt_feature`. Any other
key is an error.

- Registers require `address` and `size_bits`; commands and buffers require
  `address`; refs require `target` and `override`.
- Fields require `base` (`bool`, `int` or `uint`) and `start`; `end` defaults
  to `start`. A field may have `conversion` or `try_conversion`, never both.
  A conversion is either a type name or a map that defines a new enum
  (`name`, optional `description`, and one entry per variant, whose value is
  null, an integer, `default`, `catch_all`, or a map with `cfg`,
  `description` and `value`).
- `repeat` takes exactly `count` and `stride`.
- `reset_value` is an unsigned integer or an array of bytes.
- Access values are `ReadWrite`/`RW`, `ReadOnly`/`RO`, `WriteOnly`/`WO`.

## Loading a manifest

```python
from regmanifest.generate import device_from_yaml

with open("device.yaml") as fh:
    device = device_from_yaml(fh.read())

print(device.global_config.register_address_type)
for obj in device.objects:
    print(obj)
```

`device_from_json` and `device_from_toml` do the same for the other formats.
The same manifest content gives the same model in every format.

For lower-level access, `regmanifest.values.parse_manifest(source, fmt)`
(`fmt` is `"json"`, `"yaml"` or `"toml"`) returns a `ManifestValue` with
typed accessors (`as_map`, `as_array`, `as_string`, `as_int`, `as_uint`,
`as_bool`, `as_null`), and `regmanifest.manifest.transform` turns it into a
`model.Device`.

## Errors

An invalid manifest raises `regmanifest.values.ManifestError` (a value of the
wrong type raises its subclass `ValueTypeError`). Each error wraps the one
that caused it, adding context such as ``Parsing object `foo` `` or
``Parsing error for `access` ``. `str(err)` is the outermost message,
`format(err, "#")` joins the whole chain with `": "`, and `root_cause()`
returns the innermost error:

```python
from regmanifest.generate import device_from_yaml
from regmanifest.values import ManifestError

try:
    device_from_yaml("foo:\n  type: register\n")
except ManifestError as err:
    print(err.root_cause())
    # Register definition must contain the `address` field
```

`regmanifest.generate.error_to_compile_error(error)` renders an error, with
its full chain, as a `compile_error!` invocation that a generator can emit in
place of driver code.

## Address checks

`regmanifest.lir` describes a device as blocks of methods, each targeting a
child block, a register, a command or a buffer. `regmanifest.passes.run_passes`
checks that no two registers, commands or buffers of the same kind share an
address, following child blocks and repeats from the root block:

```python
from regmanifest.lir import Block, BlockMethod, Device, RegisterTarget
from regmanifest.model import Access, Integer
from regmanifest.passes import AddressOverlapError, run_passes

def register(name, address):
    return BlockMethod(
        name=name,
        address=address,
        target=RegisterTarget(
            field_set_name=name,
            access=Access.RW,
            address_type=Integer.U8,
            reset_value_function="new",
        ),
    )

device = Device(
    internal_address_type=Integer.U8,
    register_address_type=Integer.U8,
    blocks=[Block(root=True, name="Root", methods=[register("foo", 0), register("bar", 0)])],
)

try:
    run_passes(device)
except AddressOverlapError as err:
    print(err)
    # Objects "Foo" and "Bar" use the same address (0). If this is intended,
    # then allow address overlap on both objects.
```

Setting `allow_address_overlap=True` on both methods permits the overlap.
`passes.claimed_addresses(device)` lists every claimed address.

## Other helpers

- `regmanifest.casing`: `Boundary`, `split_words` and `to_pascal_case`, used
  for identifier names and for the `name_word_boundaries` setting (given
  either as an example string or as a list of boundary names).
- `regmanifest.rendering`: small text helpers for doc comments, module path
  prefixes, format strings and command field-set names.
- `regmanifest.generate.format_code(text)` pipes text through `rustfmt`
  (which must be installed) and returns the result; a non-zero exit raises
  `RuntimeError` carrying the formatter's stderr.

## What this package does not do

It does not lower a `model.Device` into the `lir` model, and it has no
template that renders a complete driver: it reads and validates manifests,
checks addresses on a `lir.Device` you build, and supplies the helpers above.
There is no command-line tool.