#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/transforms/__init__.py
"""Tree transforms for STEM equations.

- macros: inline macro scanning and replacement
- rewriter: replacement nodes and inline markup
- stem: the document pass tying everything together
"""

from stemimg.transforms.macros import STEM_INLINE_MACRO_PATTERN, MacroScanner, ScanResult, may_contain_macro
from stemimg.transforms.rewriter import NodeRewriter
from stemimg.transforms.stem import ProcessingReport, RenderContext, StemProcessor, has_block_title, is_prose_node

__all__ = [
    "MacroScanner",
    "NodeRewriter",
    "ProcessingReport",
    "RenderContext",
    "STEM_INLINE_MACRO_PATTERN",
    "ScanResult",
    "StemProcessor",
    "has_block_title",
    "is_prose_node",
    "may_contain_macro",
]
