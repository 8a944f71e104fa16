"""
Indentation-aware text buffer for emitting C# source.
"""

from contextlib import contextmanager
from typing import Iterator


class CodeWriter:
    """
    Text buffer that tracks the current indent depth.

    Usage:
        writer = CodeWriter()
        with writer.block_scope("public class Foo"):
            writer.append_line("public Foo() { }")
        source = str(writer)
    """

    def __init__(self, indent_size: int = 4):
        self.indent_size = indent_size
        self._parts: list[str] = []
        self._indent_level = 0

    @property
    def indent_level(self) -> int:
        return self._indent_level

    def _indentation(self) -> str:
        return " " * (self._indent_level * self.indent_size)

    def append(self, value: str, indent: bool = True) -> None:
        """Append a fragment, optionally prefixed with the current indentation."""
        if indent:
            self._parts.append(self._indentation())
        self._parts.append(value)

    def append_line_break(self, indent: bool = True) -> None:
        """End the current line; with indent, the next line starts indented."""
        self._parts.append("\n")
        if indent:
            self._parts.append(self._indentation())

    def append_line(self, value: str | None = None, indent: bool = True) -> None:
        """Append a full line. An empty value writes a bare line break."""
        if not value:
            self._parts.append("\n")
        elif indent:
            self._parts.append(f"{self._indentation()}{value}\n")
        else:
            self._parts.append(f"{value}\n")

    def append_byte_array(self, data: bytes) -> None:
        """Append bytes as a brace-delimited literal, e.g. '{ 1, 2, 255 }'."""
        self._parts.append("{ " + ", ".join(str(b) for b in data) + " }")

    def increase_indent(self) -> None:
        self._indent_level += 1

    def decrease_indent(self) -> None:
        if self._indent_level > 0:
            self._indent_level -= 1

    def begin_block(self) -> None:
        self.append_line("{")
        self.increase_indent()

    def end_block(self) -> None:
        self.decrease_indent()
        self.append_line("}")

    @contextmanager
    def indent_scope(self, start_line: str | None = None) -> Iterator["CodeWriter"]:
        """Write an optional line, then indent everything written inside the block."""
        if start_line:
            self.append_line(start_line)
        self.increase_indent()
        try:
            yield self
        finally:
            self.decrease_indent()

    @contextmanager
    def block_scope(self, start_line: str | None = None) -> Iterator["CodeWriter"]:
        """Write an optional line, then a braced block closed exactly once on exit."""
        if start_line:
            self.append_line(start_line)
        self.begin_block()
        try:
            yield self
        finally:
            self.end_block()

    def clear(self) -> None:
        """Reset to an empty buffer at depth zero."""
        self._parts.clear()
        self._indent_level = 0

    def __str__(self) -> str:
        return "".join(self._parts)
