#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/renderers/__init__.py
"""Equation rendering: the renderer front end and the typesetting engines."""

from stemimg.renderers.engine import (
    EngineFactory,
    MathEngine,
    MatplotlibMathEngine,
    default_engine_factory,
    strip_delimiters,
)
from stemimg.renderers.equation import EquationRenderer, RenderResult, wrap_equation

__all__ = [
    "EngineFactory",
    "EquationRenderer",
    "MathEngine",
    "MatplotlibMathEngine",
    "RenderResult",
    "default_engine_factory",
    "strip_delimiters",
    "wrap_equation",
]
