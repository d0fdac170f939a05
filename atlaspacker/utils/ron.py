"""Reader and writer for the subset of RON (Rusty Object Notation) used by atlas files.

Supported: named and anonymous structs, maps, lists, tuples, strings, integers,
floats, booleans, ``Some(...)``/``None`` and unit enum variants. Structs and maps
both load as ``dict``; tuples load as ``list``; unit variants load as their name.
"""

from __future__ import annotations

import json
import re
from typing import Any

__all__ = ["RonError", "Struct", "Some", "dumps", "loads"]

_NUMBER = re.compile(r"[+-]?(0x[0-9a-fA-F_]+|0b[01_]+|0o[0-7_]+|[0-9][0-9_]*(\.[0-9_]*)?([eE][+-]?[0-9]+)?|\.[0-9]+)")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "n": "\n", "t": "\t", "r": "\r", "0": "\0", "b": "\b", "f": "\f"}


class RonError(ValueError):
    """Raised when RON text cannot be parsed or a value cannot be written."""


class Struct(dict):
    """Mapping written as a RON struct ``(field: value)`` rather than a map."""


class Some:
    """Explicit ``Some(value)`` wrapper for optional fields."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value


def dumps(value: Any, indent: int = 4) -> str:
    """Serialize value as pretty-printed RON."""

    return _write(value, 0, indent)


def _write(value: Any, level: int, indent: int) -> str:
    pad = " " * (indent * (level + 1))
    end_pad = " " * (indent * level)
    if isinstance(value, Some):
        return f"Some({_write(value.value, level, indent)})"
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Struct):
        if not value:
            return "()"
        fields = "".join(f"{pad}{key}: {_write(item, level + 1, indent)},\n" for key, item in value.items())
        return f"(\n{fields}{end_pad})"
    if isinstance(value, dict):
        if not value:
            return "{}"
        entries = "".join(
            f"{pad}{_write(key, level + 1, indent)}: {_write(item, level + 1, indent)},\n" for key, item in value.items()
        )
        return f"{{\n{entries}{end_pad}}}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = "".join(f"{pad}{_write(item, level + 1, indent)},\n" for item in value)
        return f"[\n{items}{end_pad}]"
    raise RonError(f"Cannot serialize {type(value).__name__} to RON")


def loads(text: str) -> Any:
    """Parse RON text into plain Python values."""

    parser = _Parser(text)
    value = parser.value()
    parser.skip_ignored()
    if parser.pos != len(text):
        parser.fail("Unexpected trailing content")
    return value


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def fail(self, message: str):
        line = self.text.count("\n", 0, self.pos) + 1
        raise RonError(f"{message} at line {line}, offset {self.pos}")

    def skip_ignored(self) -> None:
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                newline = text.find("\n", self.pos)
                self.pos = len(text) if newline == -1 else newline + 1
            elif text.startswith("/*", self.pos):
                close = text.find("*/", self.pos + 2)
                if close == -1:
                    self.fail("Unterminated block comment")
                self.pos = close + 2
            else:
                break

    def peek(self) -> str:
        self.skip_ignored()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            self.fail(f"Expected {char!r}")
        self.pos += 1

    def ident(self) -> str | None:
        self.skip_ignored()
        match = _IDENT.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return match.group()

    def value(self) -> Any:
        char = self.peek()
        if not char:
            self.fail("Unexpected end of input")
        if char == "(":
            return self.struct_or_tuple()
        if char == "{":
            return self.mapping()
        if char == "[":
            return self.sequence()
        if char == '"':
            return self.string()
        if char == "'":
            return self.char_literal()
        if char in "+-.0123456789":
            return self.number()
        name = self.ident()
        if name is None:
            self.fail(f"Unexpected character {char!r}")
        if name == "true":
            return True
        if name == "false":
            return False
        if name == "None":
            return None
        if name == "Some":
            self.expect("(")
            inner = self.value()
            if self.peek() == ",":
                self.pos += 1
            self.expect(")")
            return inner
        if self.peek() == "(":
            return self.struct_or_tuple()
        return name

    def struct_or_tuple(self) -> Any:
        self.expect("(")
        if self.peek() == ")":
            self.pos += 1
            return {}
        start = self.pos
        name = self.ident()
        is_struct = name is not None and self.peek() == ":"
        self.pos = start
        if is_struct:
            fields: dict[str, Any] = {}
            while self.peek() != ")":
                key = self.ident()
                if key is None:
                    self.fail("Expected field name")
                self.expect(":")
                fields[key] = self.value()
                if self.peek() != ",":
                    break
                self.pos += 1
            self.expect(")")
            return fields
        items = []
        while self.peek() != ")":
            items.append(self.value())
            if self.peek() != ",":
                break
            self.pos += 1
        self.expect(")")
        return items

    def mapping(self) -> dict:
        self.expect("{")
        result: dict = {}
        while self.peek() != "}":
            key = self.value()
            self.expect(":")
            result[key] = self.value()
            if self.peek() != ",":
                break
            self.pos += 1
        self.expect("}")
        return result

    def sequence(self) -> list:
        self.expect("[")
        items = []
        while self.peek() != "]":
            items.append(self.value())
            if self.peek() != ",":
                break
            self.pos += 1
        self.expect("]")
        return items

    def string(self) -> str:
        self.expect('"')
        text = self.text
        out = []
        while True:
            if self.pos >= len(text):
                self.fail("Unterminated string")
            char = text[self.pos]
            if char == '"':
                self.pos += 1
                return "".join(out)
            if char == "\\":
                escape = text[self.pos + 1 : self.pos + 2]
                if escape == "u":
                    digits = text[self.pos + 2 : self.pos + 6]
                    try:
                        out.append(chr(int(digits, 16)))
                    except ValueError:
                        self.fail("Invalid unicode escape")
                    self.pos += 6
                    continue
                if escape not in _ESCAPES:
                    self.fail(f"Invalid escape \\{escape}")
                out.append(_ESCAPES[escape])
                self.pos += 2
                continue
            out.append(char)
            self.pos += 1

    def char_literal(self) -> str:
        self.expect("'")
        end = self.text.find("'", self.pos)
        if end == -1:
            self.fail("Unterminated char literal")
        value = self.text[self.pos : end]
        self.pos = end + 1
        return value

    def number(self) -> int | float:
        self.skip_ignored()
        match = _NUMBER.match(self.text, self.pos)
        if not match:
            self.fail("Invalid number")
        self.pos = match.end()
        literal = match.group().replace("_", "")
        try:
            if literal.lstrip("+-")[:2] in ("0x", "0b", "0o"):
                return int(literal, 0)
            if any(c in literal for c in ".eE"):
                return float(literal)
            return int(literal)
        except ValueError:
            self.fail(f"Invalid number {match.group()!r}")
