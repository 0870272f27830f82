"""Block walker: block graph -> code fragments.

Each block type supplies its own emitter, looked up by type tag. A statement
emitter returns text; a value emitter returns `(text, order)` where `order` is
the precedence of the expression it produced. The walker handles everything
around that: parenthesizing nested values, indenting nested chains, attaching
comments and following `next` links.
"""

from __future__ import annotations

from typing import Callable, Union

from ..blocks import INPUT_VALUE, Block
from .context import GenerationContext
from .definitions import HelperBody, Signature
from .precedence import ORDER_ATOMIC, ORDER_NONE, needs_parens
from .util import prefix_lines, quote

Fragment = Union[str, tuple[str, int]]
EmitFn = Callable[[Block, "BlockEmitter"], Union[Fragment, None]]


class BlockEmitter:
    """Walks blocks for one generation run."""

    INDENT = "    "
    COMMENT_PREFIX = "// "

    def __init__(self, emitters: dict[str, EmitFn], ctx: GenerationContext) -> None:
        self.emitters: dict[str, EmitFn] = emitters
        self.ctx: GenerationContext = ctx

    # --- Dispatch ---

    def _own_code(self, block: Block) -> Fragment | None:
        fn = self.emitters.get(block.type)
        if fn is None:
            self.ctx.warn("block", "no emitter for block type '" + block.type + "'", block.id)
            if block.output is not None:
                return ("", ORDER_ATOMIC)
            return ""
        return fn(block, self)

    def block_to_code(self, block: Block | None, this_only: bool = False) -> Fragment:
        """Generate code for `block` and, unless `this_only`, the chain after it.

        Disabled blocks contribute nothing; the walk continues with their
        successor. An emitter returning None has emitted its code elsewhere
        (e.g. as a helper definition) and ends the chain.
        """
        while block is not None and block.disabled:
            if this_only:
                return ""
            block = block.next_block
        if block is None:
            return ""
        code = self._own_code(block)
        if code is None:
            return ""
        if isinstance(code, tuple):
            return (self.scrub(block, code[0], this_only=True), code[1])
        return self.scrub(block, code, this_only)

    def value_to_code(self, block: Block, name: str, outer_order: int) -> str:
        """Code for the expression in value input `name`, parenthesized for a slot of `outer_order`.

        An unconnected input yields "".
        """
        inp = block.get_input(name)
        if inp is None:
            self.ctx.warn("input", "no input '" + name + "' on block type '" + block.type + "'", block.id)
            return ""
        if inp.target is None:
            return ""
        result = self.block_to_code(inp.target)
        if isinstance(result, tuple):
            code, inner_order = result
        else:
            if not result:
                return ""
            self.ctx.warn(
                "block", "value block '" + inp.target.type + "' returned plain text", inp.target.id
            )
            code, inner_order = result, ORDER_NONE
        if not code:
            return ""
        if needs_parens(inner_order, outer_order):
            code = "(" + code + ")"
        return code

    def statement_to_code(self, block: Block, name: str) -> str:
        """Code for the chain in statement input `name`, indented one level."""
        inp = block.get_input(name)
        if inp is None:
            self.ctx.warn("input", "no input '" + name + "' on block type '" + block.type + "'", block.id)
            return ""
        result = self.block_to_code(inp.target)
        code = result[0] if isinstance(result, tuple) else result
        if code:
            code = prefix_lines(code, self.INDENT)
        return code

    def emit_roots(self, blocks: list[Block]) -> str:
        """Generate every top-level chain; naked values become statements."""
        parts: list[str] = []
        for block in blocks:
            result = self.block_to_code(block)
            if isinstance(result, tuple):
                line = result[0]
                if line:
                    line = self.scrub_naked_value(line)
            else:
                line = result
            if line:
                parts.append(line)
        return "\n".join(parts)

    # --- Comments and chaining ---

    def scrub(self, block: Block, code: str, this_only: bool = False) -> str:
        """Attach comments to `code` and append the rest of the chain.

        The chain is walked iteratively. Each step consumes the postfix and
        extra indent staged while its block emitted: the postfix is appended
        after everything that follows, the extra indent is applied to what
        follows.
        """
        pieces: list[tuple[str, str, str]] = []
        current: Block | None = block
        while current is not None:
            postfix, extra_indent = self.ctx.take_modifiers()
            pieces.append((self.harvest_comments(current) + code, extra_indent, postfix))
            if this_only:
                break
            current = current.next_block
            while current is not None and current.disabled:
                current = current.next_block
            if current is None:
                break
            own = self._own_code(current)
            if own is None:
                break
            code = own[0] if isinstance(own, tuple) else own
        tail = ""
        for head, extra_indent, postfix in reversed(pieces):
            if tail and extra_indent:
                tail = prefix_lines(tail, extra_indent)
            tail = head + tail + postfix
        return tail

    def harvest_comments(self, block: Block) -> str:
        """Comment lines for `block` and the value blocks plugged into it.

        Inline blocks carry no comments of their own; nested statement chains
        collect theirs when they are walked.
        """
        if block.is_output_connected():
            return ""
        comment_code = ""
        comment = block.get_comment_text()
        if comment:
            comment_code += prefix_lines(comment, self.COMMENT_PREFIX) + "\n"
        for inp in block.inputs:
            if inp.kind != INPUT_VALUE or inp.target is None:
                continue
            nested = self.all_nested_comments(inp.target)
            if nested:
                comment_code += prefix_lines(nested, self.COMMENT_PREFIX)
        return comment_code

    def all_nested_comments(self, block: Block) -> str:
        """Comment text of `block` and its descendants, one per line."""
        comments = [c for c in (b.get_comment_text() for b in block.get_descendants()) if c]
        if comments:
            comments.append("")
        return "\n".join(comments)

    def scrub_naked_value(self, line: str) -> str:
        return line + "\n"

    # --- Single-use modifiers ---

    def stage_postfix(self, text: str) -> None:
        """Append `text` after the current block's chain."""
        self.ctx.postfix = text

    def stage_extra_indent(self, indent: str) -> None:
        """Indent the blocks following the current one by `indent`."""
        self.ctx.extra_indent = indent

    # --- Text and side outputs ---

    def prefix_lines(self, text: str, prefix: str) -> str:
        return prefix_lines(text, prefix)

    def quote(self, value: str) -> str:
        return quote(value)

    def add_import(self, name: str) -> None:
        self.ctx.imports.add(name)

    def provide_function(
        self, logical_name: str, body: HelperBody | str | list[str], signature: Signature | None = None
    ) -> str:
        return self.ctx.helpers.provide_function(logical_name, body, signature)

    def add_definition(
        self, key: str, function_name: str, body: HelperBody | str | list[str], signature: Signature | None = None
    ) -> None:
        self.ctx.helpers.define(key, function_name, body, signature)

    def get_value_type(self, block: Block, name: str) -> list[str] | str:
        """Output check of the block in input `name`, or "" when nothing is connected."""
        target = block.get_input_target_block(name)
        if target is None or target.output is None:
            return ""
        return target.output
