"""Shared text utilities for the Java emitter."""

from __future__ import annotations

import re

_NUMBER_RE = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")
_LINE_BREAK_RE = re.compile(r"(?!\n\Z)\n")

_SIMPLE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\f": "\\f",
    "\b": "\\b",
}


def escape_string(value: str) -> str:
    """Escape a string for use in a Java string literal (without quotes).

    Control characters and anything outside printable ASCII become \\uXXXX
    escapes; characters beyond the BMP are written as surrogate pairs.
    """
    result: list[str] = []
    for c in value:
        if c in _SIMPLE_ESCAPES:
            result.append(_SIMPLE_ESCAPES[c])
            continue
        code = ord(c)
        if 0x20 <= code < 0x7F:
            result.append(c)
        elif code > 0xFFFF:
            code -= 0x10000
            result.append("\\u%04x" % (0xD800 + (code >> 10)))
            result.append("\\u%04x" % (0xDC00 + (code & 0x3FF)))
        else:
            result.append("\\u%04x" % code)
    return "".join(result)


def quote(value: str) -> str:
    """Encode `value` as a complete, properly escaped Java string literal."""
    return '"' + escape_string(value) + '"'


def is_number(text: str) -> bool:
    """True for a bare decimal literal such as `42`, `-3` or `0.25`."""
    return _NUMBER_RE.match(text) is not None


def prefix_lines(text: str, prefix: str) -> str:
    """Prepend `prefix` to every line; a trailing newline does not start a new line."""
    return prefix + _LINE_BREAK_RE.sub("\n" + prefix, text)


def collapse_blank_lines(text: str) -> str:
    """Collapse runs of blank lines to a single blank line."""
    return re.sub(r"\n\n+", "\n\n", text)


def tidy(code: str) -> str:
    """Strip leading blank lines, trailing blank lines and trailing spaces on each line."""
    code = re.sub(r"^\s+\n", "", code)
    code = re.sub(r"\n\s+$", "\n", code)
    return re.sub(r"[ \t]+\n", "\n", code)


class Emitter:
    """Line buffer with indentation tracking."""

    def __init__(self, indent_str: str = "    ") -> None:
        self.indent: int = 0
        self.lines: list[str] = []
        self._indent_str = indent_str

    def line(self, text: str = "") -> None:
        """Emit a line with current indentation."""
        if text:
            self.lines.append(self._indent_str * self.indent + text)
        else:
            self.lines.append("")

    def block(self, text: str) -> None:
        """Emit pre-rendered multi-line text at the current indentation."""
        for piece in text.rstrip("\n").split("\n"):
            self.line(piece)

    def output(self) -> str:
        """Return the accumulated output as a string."""
        return "\n".join(self.lines)
