"""Java backend: block graph -> App Inventor extension source.

A run produces one compilation unit:

    header comment, package, sorted imports
    @SimpleObject / @DesignerComponent annotations
    public class App extends Base implements I1, I2 {
        constructor
        fields for every global the blocks registered
        helper functions, static ones first
        the code emitted for the top-level blocks
    }
    extra classes, verbatim
"""

from __future__ import annotations

import datetime
import sys
from dataclasses import dataclass, field
from typing import Callable

from ..blocks import STORAGE_LOCAL, Block, Workspace
from ..middleend.settle import settle
from .context import GenerationContext, GenerationResult
from .definitions import HelperDefinition
from .generator import BlockEmitter, EmitFn
from .names import CLASS, VARIABLE
from .precedence import ORDER_NONE
from .types import DYNAMIC_TYPE
from .util import Emitter, collapse_blank_lines, is_number, quote, tidy

FILE_HEADER = """\
/*
 * Copyright (c) <<Year>>, <<Your Name>>
 * All rights reserved.
 *
 * Redistribution and use in source and binary forms, with or without
 * modification, are permitted provided that the following conditions are met:
 *
 * * Redistributions of source code must retain the above copyright notice, this
 *   list of conditions and the following disclaimer.
 * * Redistributions in binary form must reproduce the above copyright notice,
 *   this list of conditions and the following disclaimer in the documentation
 *   and/or other materials provided with the distribution.
 *
 * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
 * AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
 * IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
 * ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
 * LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
 * CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
 * SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
 * INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
 * CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
 * ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
 * POSSIBILITY OF SUCH DAMAGE.
 */
"""

# Every extension depends on these
REQUIRED_IMPORTS = (
    "com.google.appinventor.components.runtime.AndroidNonvisibleComponent",
    "com.google.appinventor.components.runtime.ComponentContainer",
    "com.google.appinventor.components.annotations.SimpleObject",
    "com.google.appinventor.components.annotations.DesignerComponent",
    "com.google.appinventor.components.common.ComponentCategory",
)

DEFAULT_APP_NAME = "MyApp"
DEFAULT_PACKAGE = "demo"
DEFAULT_DESCRIPTION = "An AppInventor 2 Extension. Made With Rapid."

TO_STRING_HELPER = "blocklyToString"

_TO_STRING_LINES = [
    "public static String {{FUNCTION_NAME}}(Object object) {",
    "    if (object instanceof String) {",
    "        return (String) object;",
    "    }",
    "    if (object instanceof Number) {",
    '        NumberFormat formatter = new DecimalFormat("#.#####");',
    "        return formatter.format(((Number) object).doubleValue());",
    "    }",
    '    return "UNKNOWN";',
    "}",
]


class GenerationError(Exception):
    """Generation was asked to walk something that is not a block graph."""

    def __init__(self, msg: str):
        self.msg: str = msg
        super().__init__(msg)


def _current_year() -> int:
    return datetime.date.today().year


@dataclass
class JavaConfig:
    """Settings for the generated extension. A run reads these and never writes them."""

    app_name: str = DEFAULT_APP_NAME
    description: str = DEFAULT_DESCRIPTION
    version_name: str = "1.0"
    version_number: int = 0
    home_website: str = ""
    min_sdk: str = ""
    icon: str = "images/extension.png"
    author: str = "<<Your Name>>"
    year: int = field(default_factory=_current_year)
    package: str = DEFAULT_PACKAGE
    base_class: str = "AndroidNonvisibleComponent"
    interfaces: list[str] = field(default_factory=list)
    extra_imports: list[str] | None = None
    extra_classes: dict[str, str] = field(default_factory=dict)
    need_imports: list[str] = field(default_factory=list)
    reserved_words: list[str] = field(default_factory=list)

    def add_interface(self, iface: str) -> None:
        if iface not in self.interfaces:
            self.interfaces.append(iface)

    def set_extra_class(self, name: str, lines: list[str]) -> None:
        self.extra_classes[name] = "\n".join(lines) + "\n"


class JavaBlockEmitter(BlockEmitter):
    """Block walker with the Java-specific operations block emitters call."""

    def scrub_naked_value(self, line: str) -> str:
        return line + ";\n"

    def get_name(self, name: str, category: str = VARIABLE) -> str:
        return self.ctx.names.get_name(name, category)

    def get_distinct_name(self, name: str, category: str = VARIABLE) -> str:
        return self.ctx.names.get_distinct_name(name, category)

    def to_string_code(self, block: Block, name: str) -> str:
        """Java expression converting the value in input `name` to a String."""
        target = block.get_input_target_block(name)
        if target is None:
            return ""
        item = self.value_to_code(block, name, ORDER_NONE).strip()
        if not item or item.startswith('"'):
            return item
        is_get = target.type == "variables_get"
        if is_get and self.get_variable_type(target.get_field_value("VAR") or "") == DYNAMIC_TYPE:
            return item + ".toString()"
        if is_number(item):
            return '"' + item + '"'
        if not is_get and self.get_variable_type(item) == DYNAMIC_TYPE:
            return item + ".toString()"
        self.add_import("java.text.DecimalFormat")
        self.add_import("java.text.NumberFormat")
        function_name = self.provide_function(TO_STRING_HELPER, _TO_STRING_LINES)
        return function_name + "(" + item + ")"

    def set_global_var(self, block: Block, name: str, value: str | None = None) -> None:
        """Declare `name` as a field of the generated class.

        Ignored for locals, and for globals that already have an initializer.
        """
        if name in self.ctx.local_variables or block.get_local_context(name) is not None:
            return
        if self.ctx.globals.get(name) is None:
            self.ctx.globals[name] = value

    def get_variable_type(self, name: str) -> str:
        return self.ctx.get_variable_type(name)

    def get_blockly_type(self, name: str) -> str | None:
        return self.ctx.get_blockly_type(name)

    def map_type(self, logical: str | None) -> str:
        return self.ctx.types.map_type(logical)

    def compute_java_type(self, candidates: list[str] | set[str]) -> str:
        return self.ctx.types.compute_java_type(candidates)

    def set_target_type(self, typ: str | None) -> str | None:
        return self.ctx.set_target_type(typ)

    def get_target_type(self) -> str | None:
        return self.ctx.target_type

    def add_interface(self, iface: str) -> None:
        self.ctx.add_interface(iface)

    def set_extra_class(self, name: str, lines: list[str]) -> None:
        self.ctx.extra_classes[name] = "\n".join(lines) + "\n"


def render_doc_block(helper: HelperDefinition) -> str:
    """Javadoc skeleton for a helper, or "" when it has no signature."""
    sig = helper.signature
    if sig is None:
        return ""
    lines = ["/**", " * Description goes here"]
    separator = " *"
    for param in sig.params:
        if separator:
            lines.append(separator)
            separator = ""
        lines.append(" * @param " + param)
    if sig.returns and sig.returns not in ("void", "public"):
        if separator:
            lines.append(separator)
        lines.append(" * @return " + sig.returns)
    lines.append(" */")
    return "\n".join(lines) + "\n"


def render_field(ctx: GenerationContext, name: str, value: str | None) -> str:
    typ = ctx.get_variable_type(name)
    if value is not None and value != "":
        initializer = " = " + value
    elif typ == DYNAMIC_TYPE:
        initializer = " = new " + DYNAMIC_TYPE + "()"
    elif typ in ("boolean", "Boolean"):
        initializer = " = false"
    elif typ == "String":
        initializer = ' = ""'
    else:
        initializer = ""
    return "protected " + typ + " " + ctx.names.get_name(name, VARIABLE) + initializer + ";"


def finish(ctx: GenerationContext, body: str) -> str:
    """Prepend fields and helper definitions to the emitted body."""
    parts: list[str] = []
    fields = [render_field(ctx, name, value) for name, value in ctx.globals.items()]
    if fields:
        parts.append("\n".join(fields) + "\n\n")
    for helper in ctx.helpers.ordered():
        parts.append(render_doc_block(helper) + helper.text + "\n\n")
    defs = collapse_blank_lines("".join(parts))
    if defs.strip():
        return defs.rstrip("\n") + "\n\n" + body
    return body


class JavaGenerator:
    """Turns a workspace (or a single block chain) into an extension class.

    Block emitters are registered per type tag and shared by every run; all
    other state lives in the GenerationContext of a single run.
    """

    def __init__(self, config: JavaConfig | None = None) -> None:
        self.config: JavaConfig = config if config is not None else JavaConfig()
        self.emitters: dict[str, EmitFn] = {}
        self.equivalences: dict[str, str] = {}
        self.classes: dict[str, str] = {}
        self.reserved_words: set[str] = set()

    # --- Registration ---

    def register(self, type_tag: str, fn: EmitFn) -> None:
        if not type_tag:
            raise ValueError("block emitter needs a type tag")
        if not callable(fn):
            raise ValueError("block emitter for '" + type_tag + "' is not callable")
        self.emitters[type_tag] = fn

    def block(self, type_tag: str) -> Callable[[EmitFn], EmitFn]:
        """Decorator form of register()."""

        def decorate(fn: EmitFn) -> EmitFn:
            self.register(type_tag, fn)
            return fn

        return decorate

    def register_class(self, logical: str, java_class: str) -> None:
        self.classes[logical] = java_class

    def add_equivalence(self, logical: str, canonical: str) -> None:
        self.equivalences[logical] = canonical

    def add_reserved_words(self, words: list[str] | set[str]) -> None:
        self.reserved_words.update(words)

    # --- Runs ---

    def generate(self, root: Block | Workspace, config: JavaConfig | None = None) -> str:
        """Generate source, reporting recoverable problems on stderr."""
        result = self.run(root, config)
        for diag in result.warnings():
            print(repr(diag), file=sys.stderr)
        return result.code

    def run(self, root: Block | Workspace, config: JavaConfig | None = None) -> GenerationResult:
        """Generate source for `root`. Raises GenerationError for anything else."""
        if config is None:
            config = self.config
        match root:
            case Workspace():
                workspace: Workspace | None = root
                top_blocks = root.get_top_blocks()
                all_blocks = root.get_all_blocks()
            case Block():
                workspace = root.get_workspace()
                top_blocks = [root]
                all_blocks = root.get_descendants()
            case _:
                raise GenerationError("Not a block or workspace: " + repr(root))
        app_name = config.app_name or DEFAULT_APP_NAME
        if workspace is not None and workspace.options.get("app_title"):
            app_name = workspace.options["app_title"]
        ctx = self._new_context(config)
        # Class names are bound first so user names never displace them
        class_name = ctx.names.get_name(app_name, CLASS)
        base_class = ctx.names.claim(config.base_class, CLASS) if config.base_class else ""
        settle(all_blocks)
        if workspace is not None:
            self._declare_variables(ctx, workspace)
        emitter = JavaBlockEmitter(self.emitters, ctx)
        body = emitter.emit_roots(top_blocks)
        for name in REQUIRED_IMPORTS:
            ctx.imports.add(name)
        code = self._assemble(ctx, config, class_name, base_class, finish(ctx, body))
        return GenerationResult(code, ctx.diagnostics)

    def _new_context(self, config: JavaConfig) -> GenerationContext:
        ctx = GenerationContext(config)
        ctx.names.add_reserved_words(self.reserved_words)
        for logical, canonical in self.equivalences.items():
            ctx.types.add_equivalence(logical, canonical)
        for logical, java_class in self.classes.items():
            ctx.types.register_class(logical, java_class)
        return ctx

    def _declare_variables(self, ctx: GenerationContext, workspace: Workspace) -> None:
        for variable in workspace.variables:
            ctx.declare_variable(variable.name, variable.types, variable.storage == STORAGE_LOCAL)

    # --- Assembly ---

    def _designer_component(self, config: JavaConfig) -> str:
        text = (
            "@DesignerComponent(version = "
            + str(config.version_number)
            + ", nonVisible = true, category = ComponentCategory.EXTENSION, iconName = "
            + quote(config.icon)
            + ", description = "
            + quote(config.description)
            + ", versionName = "
            + quote(config.version_name)
        )
        if config.home_website:
            text += ", helpUrl = " + quote(config.home_website)
        if config.min_sdk:
            text += ", androidMinSdk = " + config.min_sdk
        return text + ")"

    def _assemble(
        self, ctx: GenerationContext, config: JavaConfig, class_name: str, base_class: str, members: str
    ) -> str:
        header = FILE_HEADER.replace("<<Your Name>>", config.author).replace("<<Year>>", str(config.year))
        out = Emitter()
        out.block(header)
        out.line("package " + (config.package or DEFAULT_PACKAGE) + ";")
        out.line()
        for name in ctx.imports.get_imports(config.extra_imports):
            out.line("import " + name + ";")
        out.line()
        out.line("@SimpleObject(external=true)")
        out.line(self._designer_component(config))
        signature = "public class " + class_name
        if base_class:
            signature += " extends " + base_class
        if ctx.interfaces:
            signature += " implements " + ", ".join(ctx.interfaces)
        out.line(signature + " {")
        out.line()
        out.indent += 1
        out.line("public " + class_name + "(ComponentContainer container) {")
        out.indent += 1
        out.line("super(container.$form());")
        out.indent -= 1
        out.line("}")
        if members.strip():
            out.line()
            out.block(members)
        out.indent -= 1
        out.line("}")
        classes = "".join(ctx.extra_classes.values())
        if classes:
            out.line()
            out.block(classes)
        return tidy(out.output() + "\n")
