"""Entry points that read manifests in each format, and output helpers."""

from __future__ import annotations

import subprocess

from .manifest import transform
from .model import Device
from .values import ManifestError, parse_manifest


def _device_from(source: str, fmt: str) -> Device:
    return transform(parse_manifest(source, fmt))


def device_from_json(source: str) -> Device:
    """Read a device description from a JSON manifest."""
    return _device_from(source, "json")


def device_from_yaml(source: str) -> Device:
    """Read a device description from a YAML manifest."""
    return _device_from(source, "yaml")


def device_from_toml(source: str) -> Device:
    """Read a device description from a TOML manifest."""
    return _device_from(source, "toml")


def _string_literal(text: str) -> str:
    escapes = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}
    parts = []
    for ch in text:
        if ch in escapes:
            parts.append(escapes[ch])
        elif ch.isprintable():
            parts.append(ch)
        else:
            parts.append(f"\\u{{{ord(ch):x}}}")
    return '"' + "".join(parts) + '"'


def error_to_compile_error(error: BaseException) -> str:
    """Render an error, with its whole context chain, as a compile-error invocation."""
    message = format(error, "#") if isinstance(error, ManifestError) else str(error)
    return f":: core :: compile_error ! {{ {_string_literal(message)} }}"


def format_code(text: str) -> str:
    """Pipe ``text`` through rustfmt and return the formatted result."""
    result = subprocess.run(
        ["rustfmt", "--edition", "2024", "--config", "newline_style=native"],
        input=text,
        capture_output=True,
        text=True,
        encoding="utf-8",
    )
    if result.returncode != 0:
        raise RuntimeError(
            f"rustfmt exited unsuccesfully (exit status: {result.returncode}):\n"
            f"{result.stderr or ''}"
        )
    return result.stdout