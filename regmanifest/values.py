"""Format-independent access to parsed manifest documents."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

import yaml

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U64_MAX = 2**64 - 1

_FORMATS = ("json", "yaml", "toml")


class ManifestError(Exception):
    """An error in a manifest, optionally wrapping the error that caused it.

    ``str(err)`` gives only this error's message; ``format(err, "#")`` gives
    the whole chain, outermost first, separated by ``": "``.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def __format__(self, spec: str) -> str:
        if spec == "#":
            return ": ".join(str(err) for err in self._chain())
        return format(str(self), spec)

    def _chain(self) -> Iterator[BaseException]:
        current: BaseException | None = self
        while current is not None:
            yield current
            current = current.cause if isinstance(current, ManifestError) else None

    def root_cause(self) -> BaseException:
        """The innermost error in the chain."""
        *_, last = self._chain()
        return last

    def with_context(self, message: str) -> ManifestError:
        """A new error with ``message`` that has this error as its cause."""
        return ManifestError(message, self)


class ValueTypeError(ManifestError):
    """A manifest value did not have the expected type."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f"Value had an unexpected type. `{expected}` was expected, "
            f"but the actual value was `{actual}`"
        )
        self.expected = expected
        self.actual = actual


def _type_name(raw: Any) -> str:
    if raw is None:
        return "null"
    if isinstance(raw, bool):
        return "bool"
    if isinstance(raw, int):
        return "(u)int"
    if isinstance(raw, float):
        return "float"
    if isinstance(raw, str):
        return "string"
    if isinstance(raw, dict):
        return "map"
    if isinstance(raw, list):
        return "array"
    if isinstance(raw, (datetime, date, time)):
        return "datetime"
    return type(raw).__name__


@dataclass(frozen=True)
class ManifestValue:
    """One node of a parsed manifest, with typed accessors."""

    raw: Any

    @property
    def type_name(self) -> str:
        """The manifest-level name of this value's type."""
        return _type_name(self.raw)

    def as_map(self) -> dict[str, ManifestValue]:
        """The value as an ordered mapping from string keys to values."""
        if not isinstance(self.raw, dict):
            raise ValueTypeError("map", self.type_name)
        result: dict[str, ManifestValue] = {}
        for key, value in self.raw.items():
            if not isinstance(key, str):
                raise ManifestError(f"Map keys must be strings, found `{key!r}`")
            result[key] = ManifestValue(value)
        return result

    def as_array(self) -> list[ManifestValue]:
        """The value as a list of values."""
        if not isinstance(self.raw, list):
            raise ValueTypeError("array", self.type_name)
        return [ManifestValue(item) for item in self.raw]

    def as_string(self) -> str:
        """The value as a string."""
        if not isinstance(self.raw, str):
            raise ValueTypeError("string", self.type_name)
        return self.raw

    def _as_integer(self) -> int:
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise ValueTypeError("(u)int", self.type_name)
        return self.raw

    def as_int(self) -> int:
        """The value as a signed 64-bit integer."""
        number = self._as_integer()
        if not _I64_MIN <= number <= _I64_MAX:
            raise ManifestError(f"Integer `{number}` does not fit in a signed 64-bit integer")
        return number

    def as_uint(self) -> int:
        """The value as an unsigned 64-bit integer."""
        number = self._as_integer()
        if number < 0:
            raise ManifestError(
                f"Integer `{number}` is negative, but an unsigned integer was expected"
            )
        if number > _U64_MAX:
            raise ManifestError(
                f"Integer `{number}` does not fit in an unsigned 64-bit integer"
            )
        return number

    def as_bool(self) -> bool:
        """The value as a boolean."""
        if not isinstance(self.raw, bool):
            raise ValueTypeError("bool", self.type_name)
        return self.raw

    def as_null(self) -> None:
        """Succeed only when the value is null."""
        if self.raw is not None:
            raise ValueTypeError("null", self.type_name)
        return None


def parse_manifest(source: str, fmt: str) -> ManifestValue:
    """Parse ``source`` written in ``fmt`` (``json``, ``yaml`` or ``toml``)."""
    fmt = fmt.lower()
    if fmt not in _FORMATS:
        raise ValueError(f"unknown manifest format `{fmt}`; expected one of {', '.join(_FORMATS)}")
    try:
        if fmt == "json":
            raw = json.loads(source)
        elif fmt == "yaml":
            raw = yaml.safe_load(source)
        else:
            raw = tomllib.loads(source)
    except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as err:
        raise ManifestError(f"Could not parse {fmt} manifest: {err}", err) from err
    return ManifestValue(raw)