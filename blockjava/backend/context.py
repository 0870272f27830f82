"""Per-run generation state.

A GenerationContext is created at the start of every run and dropped when the
run returns, so nothing one run records can leak into the next. Everything a
block emitter may touch during the walk hangs off it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .definitions import HelperRegistry, ImportSet
from .names import CLASS, NameDB
from .types import UNKNOWN_TYPE, TypeResolver

if TYPE_CHECKING:
    from .java import JavaConfig


class Diagnostic:
    """A recoverable anomaly noticed during generation."""

    def __init__(self, category: str, message: str, block_id: str | None = None):
        self.category: str = category  # "type" | "block" | "input"
        self.message: str = message
        self.block_id: str | None = block_id

    def __repr__(self) -> str:
        text = "warning: [" + self.category + "] " + self.message
        if self.block_id is not None:
            text += " (block " + self.block_id + ")"
        return text

    def __str__(self) -> str:
        return repr(self)


class GenerationResult:
    """Generated compilation unit plus whatever was degraded along the way."""

    def __init__(self, code: str, diagnostics: list[Diagnostic]) -> None:
        self.code: str = code
        self.diagnostics: list[Diagnostic] = diagnostics

    def warnings(self) -> list[Diagnostic]:
        return self.diagnostics

    def ok(self) -> bool:
        return len(self.diagnostics) == 0


class GenerationContext:
    """Registries, caches and single-use modifiers for one generation run."""

    def __init__(self, config: JavaConfig) -> None:
        self.config: JavaConfig = config
        self.diagnostics: list[Diagnostic] = []
        self.names: NameDB = NameDB(config.reserved_words)
        self.imports: ImportSet = ImportSet(config.need_imports)
        self.helpers: HelperRegistry = HelperRegistry(self.names)
        self.types: TypeResolver = TypeResolver(self.warn)
        self.variable_types: dict[str, str] = {}  # variable -> Java type
        self.blockly_types: dict[str, str] = {}  # variable -> resolved logical type
        self.local_variables: set[str] = set()
        self.globals: dict[str, str | None] = {}  # variable -> initializer
        self.interfaces: list[str] = []
        self.extra_classes: dict[str, str] = dict(config.extra_classes)
        self.target_type: str | None = None
        # Single-use modifiers, consumed by the next scrub
        self.postfix: str = ""
        self.extra_indent: str = ""
        for iface in config.interfaces:
            self.add_interface(iface)

    def warn(self, category: str, message: str, block_id: str | None = None) -> None:
        self.diagnostics.append(Diagnostic(category, message, block_id))

    def declare_variable(self, name: str, candidates: set[str], is_local: bool = False) -> None:
        """Resolve a variable's type once, before emission reads it by name."""
        logical = self.types.resolve(candidates)
        self.blockly_types[name] = logical
        self.variable_types[name] = self.types.map_type(logical)
        if is_local:
            self.local_variables.add(name)

    def get_variable_type(self, name: str) -> str:
        return self.variable_types.get(name) or UNKNOWN_TYPE

    def get_blockly_type(self, name: str) -> str | None:
        return self.blockly_types.get(name)

    def add_interface(self, iface: str) -> None:
        if iface not in self.interfaces:
            self.names.claim(iface, CLASS)
            self.interfaces.append(iface)

    def set_target_type(self, typ: str | None) -> str | None:
        """Set the type the enclosing emitter expects; returns the previous one."""
        old = self.target_type
        self.target_type = typ
        return old

    def take_modifiers(self) -> tuple[str, str]:
        """Return and clear the staged (postfix, extra_indent)."""
        postfix, extra_indent = self.postfix, self.extra_indent
        self.postfix = ""
        self.extra_indent = ""
        return postfix, extra_indent
