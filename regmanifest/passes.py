"""Consistency checks run over the low-level representation."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from itertools import combinations

from .casing import to_pascal_case
from .lir import (
    Block,
    BlockTarget,
    BufferTarget,
    CommandTarget,
    Device,
    RegisterTarget,
)


class AddressOverlapError(ValueError):
    """Two objects of the same kind claim the same address."""


_ADDRESS_KINDS = {
    RegisterTarget: "register",
    CommandTarget: "command",
    BufferTarget: "buffer",
}


@dataclass(frozen=True, kw_only=True)
class ClaimedAddress:
    """An address occupied by a register, command or buffer."""

    name: str
    repeat_index: int | None
    address: int
    allow_overlap: bool
    address_type: str

    @property
    def display_name(self) -> str:
        if self.repeat_index is None:
            return self.name
        return f"{self.name} (index: {self.repeat_index})"


def _find_block(device: Device, name: str) -> Block:
    for block in device.blocks:
        if block.name == name:
            return block
    raise ValueError(f"no block named `{name}`")


def _block_claims(
    device: Device, block: Block, offset: int, name_stack: tuple[str, ...]
) -> Iterator[ClaimedAddress]:
    for method in block.methods:
        base = offset + method.address
        if method.repeat is None:
            count, stride = 1, 0
        else:
            count, stride = method.repeat.count, method.repeat.stride

        target = method.target
        if isinstance(target, BlockTarget):
            sub_block = _find_block(device, target.name)
            block_name = to_pascal_case(target.name)
            for i in range(count):
                yield from _block_claims(
                    device,
                    sub_block,
                    base + i * stride,
                    (*name_stack, f"{block_name} (index: {i})"),
                )
            continue

        kind = _ADDRESS_KINDS[type(target)]
        name = "::".join((*name_stack, to_pascal_case(method.name)))
        for i in range(count):
            yield ClaimedAddress(
                name=name,
                repeat_index=i if method.repeat is not None else None,
                address=base + i * stride,
                allow_overlap=method.allow_address_overlap,
                address_type=kind,
            )


def claimed_addresses(device: Device) -> list[ClaimedAddress]:
    """Every address claimed by the device, starting from the root block."""
    root = next((block for block in device.blocks if block.root), None)
    if root is None:
        raise ValueError("the device has no root block")
    return list(_block_claims(device, root, 0, ()))


def check_addresses_non_overlapping(device: Device) -> None:
    """Raise AddressOverlapError if two objects of one kind share an address."""
    for first, second in combinations(claimed_addresses(device), 2):
        if (
            first.address == second.address
            and first.address_type == second.address_type
            and not (first.allow_overlap and second.allow_overlap)
        ):
            raise AddressOverlapError(
                f'Objects "{first.display_name}" and "{second.display_name}" use the same '
                f"address ({first.address}). If this is intended, then allow address "
                "overlap on both objects."
            )


def run_passes(device: Device) -> None:
    """Run every check over the device."""
    check_addresses_non_overlapping(device)