"""Generate App Inventor extension Java source from Blockly-style block graphs."""

from .backend.context import Diagnostic, GenerationResult
from .backend.java import GenerationError, JavaBlockEmitter, JavaConfig, JavaGenerator
from .blocks import Block, Input, Variable, Workspace

__all__ = [
    "Block",
    "Diagnostic",
    "GenerationError",
    "GenerationResult",
    "Input",
    "JavaBlockEmitter",
    "JavaConfig",
    "JavaGenerator",
    "Variable",
    "Workspace",
]
