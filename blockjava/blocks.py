"""Block graph model - the in-memory workspace the generator reads.

The visual editor owns the real structure. This module mirrors only the part of
its contract the generator depends on:

    Workspace -> top-level chains of Block
    Block     -> value inputs (expression children), statement inputs (nested
                 chains), one optional `next` link, an optional output check,
                 an optional attached comment

Invariants:
- at most one `next` per block (statement chains are singly linked lists)
- a block has at most one parent connection
- a block is never connected beneath itself or one of its own descendants
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, Literal

InputKind = Literal["value", "statement", "dummy"]

INPUT_VALUE: InputKind = "value"
INPUT_STATEMENT: InputKind = "statement"
INPUT_DUMMY: InputKind = "dummy"

Storage = Literal["global", "local"]

STORAGE_GLOBAL: Storage = "global"
STORAGE_LOCAL: Storage = "local"

_ids = itertools.count(1)


@dataclass
class Input:
    """A named slot on a block.

    `target` is the connected child: an expression block for value inputs, the
    head of a nested chain for statement inputs, always None for dummy inputs.
    `check` lists the logical types the slot accepts (None = anything).
    """

    name: str
    kind: InputKind
    check: list[str] | None = None
    target: Block | None = None


@dataclass
class Variable:
    """A variable declared in the workspace.

    `types` is the set of logical types observed flowing into the variable; the
    type resolver collapses it to one type at the start of each generation run.
    """

    name: str
    types: set[str] = field(default_factory=set)
    storage: Storage = STORAGE_GLOBAL


class Block:
    """A unit of the visual program.

    `output` is the output check (list of logical types) for expression blocks
    and None for statement blocks. `local_variables` names the locals a block
    introduces for its nested code (procedure parameters, loop counters).
    `onchange` is called by the settle pass with the block as argument.
    """

    def __init__(
        self,
        type: str,
        id: str | None = None,
        fields: dict[str, str] | None = None,
        comment: str | None = None,
        output: list[str] | None = None,
        disabled: bool = False,
        onchange: Callable[[Block], None] | None = None,
        local_variables: list[str] | None = None,
    ) -> None:
        self.type: str = type
        self.id: str = id if id is not None else "b" + str(next(_ids))
        self.fields: dict[str, str] = dict(fields) if fields else {}
        self.comment: str | None = comment
        self.output: list[str] | None = output
        self.disabled: bool = disabled
        self.onchange: Callable[[Block], None] | None = onchange
        self.local_variables: list[str] = list(local_variables) if local_variables else []
        self.inputs: list[Input] = []
        self.next_block: Block | None = None
        self.parent: Block | None = None
        self.parent_input: Input | None = None  # None when attached through `next`
        self.workspace: Workspace | None = None

    def __repr__(self) -> str:
        return "Block(" + self.type + ", " + self.id + ")"

    # --- Inputs ---

    def append_value_input(self, name: str, check: list[str] | None = None) -> Input:
        return self._append_input(Input(name, INPUT_VALUE, check))

    def append_statement_input(self, name: str) -> Input:
        return self._append_input(Input(name, INPUT_STATEMENT))

    def append_dummy_input(self, name: str = "") -> Input:
        return self._append_input(Input(name, INPUT_DUMMY))

    def _append_input(self, inp: Input) -> Input:
        if inp.name and self.get_input(inp.name) is not None:
            raise ValueError("duplicate input '" + inp.name + "' on " + repr(self))
        self.inputs.append(inp)
        return inp

    def get_input(self, name: str) -> Input | None:
        for inp in self.inputs:
            if inp.name == name:
                return inp
        return None

    def get_input_target_block(self, name: str) -> Block | None:
        inp = self.get_input(name)
        if inp is None:
            return None
        return inp.target

    def get_field_value(self, name: str) -> str | None:
        return self.fields.get(name)

    def get_comment_text(self) -> str | None:
        return self.comment

    # --- Connections ---

    def connect_value(self, name: str, child: Block) -> Block:
        """Plug expression block `child` into value input `name`. Returns self."""
        inp = self._free_input(name, INPUT_VALUE)
        if child.output is None:
            raise ValueError(repr(child) + " has no output and cannot fill a value input")
        self._adopt(child, inp)
        inp.target = child
        return self

    def connect_statement(self, name: str, child: Block) -> Block:
        """Attach chain head `child` to statement input `name`. Returns self."""
        inp = self._free_input(name, INPUT_STATEMENT)
        if child.output is not None:
            raise ValueError(repr(child) + " is an expression and cannot start a statement chain")
        self._adopt(child, inp)
        inp.target = child
        return self

    def connect_next(self, child: Block) -> Block:
        """Link `child` after this block. Returns `child` so chains read left to right."""
        if self.output is not None or child.output is not None:
            raise ValueError("only statement blocks can be chained")
        if self.next_block is not None:
            raise ValueError(repr(self) + " already has a next block")
        self._adopt(child, None)
        self.next_block = child
        return child

    def _free_input(self, name: str, kind: InputKind) -> Input:
        inp = self.get_input(name)
        if inp is None:
            raise ValueError("no input '" + name + "' on " + repr(self))
        if inp.kind != kind:
            raise ValueError("input '" + name + "' on " + repr(self) + " is a " + inp.kind + " input")
        if inp.target is not None:
            raise ValueError("input '" + name + "' on " + repr(self) + " is already connected")
        return inp

    def _adopt(self, child: Block, inp: Input | None) -> None:
        if child.parent is not None:
            raise ValueError(repr(child) + " is already connected")
        ancestor: Block | None = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError(repr(child) + " cannot be connected beneath itself")
            ancestor = ancestor.parent
        child.parent = self
        child.parent_input = inp

    def is_output_connected(self) -> bool:
        """True when this block feeds a value input of another block."""
        return (
            self.output is not None
            and self.parent_input is not None
            and self.parent_input.kind == INPUT_VALUE
        )

    # --- Traversal ---

    def get_children(self) -> list[Block]:
        """Input targets in input order, then the next block."""
        children: list[Block] = []
        for inp in self.inputs:
            if inp.target is not None:
                children.append(inp.target)
        if self.next_block is not None:
            children.append(self.next_block)
        return children

    def get_descendants(self) -> list[Block]:
        """This block and everything beneath it, depth first, in emission order."""
        result: list[Block] = []
        stack: list[Block] = [self]
        while stack:
            block = stack.pop()
            result.append(block)
            stack.extend(reversed(block.get_children()))
        return result

    def get_root_block(self) -> Block:
        block = self
        while block.parent is not None:
            block = block.parent
        return block

    def get_workspace(self) -> Workspace | None:
        return self.get_root_block().workspace

    def get_local_context(self, name: str) -> Block | None:
        """Return the nearest enclosing block (self included) that declares `name` as a local."""
        block: Block | None = self
        while block is not None:
            if name in block.local_variables:
                return block
            block = block.parent
        return None


class Workspace:
    """Top-level chains plus the variables visible to them."""

    def __init__(
        self,
        top_blocks: list[Block] | None = None,
        variables: list[Variable] | None = None,
        options: dict[str, str] | None = None,
    ) -> None:
        self.top_blocks: list[Block] = []
        self.variables: list[Variable] = list(variables) if variables else []
        self.options: dict[str, str] = dict(options) if options else {}
        for block in top_blocks or []:
            self.add_top_block(block)

    def __repr__(self) -> str:
        return "Workspace(" + str(len(self.top_blocks)) + " top blocks)"

    def add_top_block(self, block: Block) -> Block:
        if block.parent is not None:
            raise ValueError(repr(block) + " is connected and cannot be a top block")
        block.workspace = self
        self.top_blocks.append(block)
        return block

    def add_variable(self, variable: Variable) -> Variable:
        self.variables.append(variable)
        return variable

    def get_top_blocks(self) -> list[Block]:
        return list(self.top_blocks)

    def get_all_blocks(self) -> list[Block]:
        result: list[Block] = []
        for block in self.top_blocks:
            result.extend(block.get_descendants())
        return result

    def get_variable(self, name: str) -> Variable | None:
        for variable in self.variables:
            if variable.name == name:
                return variable
        return None

    def all_variables(self) -> list[str]:
        return [v.name for v in self.variables]

    def all_variable_types(self) -> dict[str, set[str]]:
        """Variable name -> candidate logical types."""
        return {v.name: set(v.types) for v in self.variables}
