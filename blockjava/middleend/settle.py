"""Settle pass: let change-reactive blocks update before code depends on them."""

from __future__ import annotations

from ..blocks import Block


def settle(blocks: list[Block]) -> None:
    """Call every block's onchange hook once, in emission order."""
    for block in blocks:
        if block.onchange is not None:
            block.onchange(block)
