#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for stemimg.

Options are frozen dataclasses; use ``create_updated`` to derive a modified
copy.
"""

from stemimg.options.base import CloneFrozenMixin
from stemimg.options.math import MathOptions, normalize_format, parse_ppi

__all__ = [
    "CloneFrozenMixin",
    "MathOptions",
    "normalize_format",
    "parse_ppi",
]
