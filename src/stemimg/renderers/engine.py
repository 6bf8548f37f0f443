#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/renderers/engine.py
"""Math typesetting engines.

An engine turns one delimited equation source (``$...$`` or ``$$...$$``) into
image bytes plus the intended display size. The default engine uses
matplotlib's mathtext, which needs no LaTeX installation.

Engines are created once per document from that document's
:class:`~stemimg.options.math.MathOptions`, so format and resolution never
leak from one document to another.
"""

from __future__ import annotations

import logging
import math
from io import BytesIO
from typing import TYPE_CHECKING, Callable, Protocol

from stemimg.constants import BLOCK_DELIMITERS, DEPS_MATH_RENDER, INLINE_DELIMITERS, SVG_PPI
from stemimg.utils.decorators import requires_dependencies

if TYPE_CHECKING:
    from stemimg.options.math import MathOptions
    from stemimg.renderers.equation import RenderResult

logger = logging.getLogger(__name__)


class MathEngine(Protocol):
    """Typesetting engine interface.

    ``parse`` receives the equation including its delimiters and returns the
    rendered bytes with width and height in pixels at 72 ppi.
    """

    def parse(self, source: str) -> RenderResult:
        """Render a delimited equation."""
        ...


EngineFactory = Callable[["MathOptions"], MathEngine]


def strip_delimiters(source: str) -> str:
    """Remove the outer ``$$`` or ``$`` delimiters from an equation source.

    Examples
    --------
        >>> strip_delimiters("$$x^2$$")
        'x^2'
        >>> strip_delimiters("$x$")
        'x'

    """
    for opening, closing in (BLOCK_DELIMITERS, INLINE_DELIMITERS):
        if len(source) >= len(opening) + len(closing) and source.startswith(opening) and source.endswith(closing):
            return source[len(opening) : len(source) - len(closing)]
    return source


class MatplotlibMathEngine:
    """Render equations with matplotlib mathtext.

    Parameters
    ----------
    format : {"png", "svg"}
        Output format
    ppi : float
        Raster resolution for png output
    font_size : float
        Font size in points

    Notes
    -----
    mathtext supports a large subset of TeX math but not environments such
    as ``\\begin{align}``; those raise a RenderingError.

    """

    def __init__(self, format: str, ppi: float, font_size: float):
        """Initialize the engine."""
        self.format = format
        self.ppi = ppi
        self.font_size = font_size

    @classmethod
    def from_options(cls, options: MathOptions) -> MatplotlibMathEngine:
        """Create an engine configured by the document options."""
        return cls(format=options.format, ppi=options.resolution, font_size=options.font_size)

    @requires_dependencies("math", DEPS_MATH_RENDER)
    def parse(self, source: str) -> RenderResult:
        """Typeset a delimited equation.

        Parameters
        ----------
        source : str
            Equation with ``$`` or ``$$`` delimiters

        Returns
        -------
        RenderResult
            Image bytes in the configured format and the size at 72 ppi

        Raises
        ------
        DependencyError
            If matplotlib is not installed
        ValueError
            If mathtext cannot parse the equation

        """
        from matplotlib import mathtext
        from matplotlib.font_manager import FontProperties

        from stemimg.renderers.equation import RenderResult

        body = " ".join(strip_delimiters(source).split())
        text = f"${body}$"
        prop = FontProperties(size=self.font_size)

        # Layout at the nominal resolution gives the display size
        layout = mathtext.MathTextParser("path").parse(text, dpi=SVG_PPI, prop=prop)
        width = int(math.ceil(layout.width))
        height = int(math.ceil(layout.height))

        buffer = BytesIO()
        mathtext.math_to_image(text, buffer, prop=prop, dpi=self.ppi, format=self.format)
        logger.debug("Typeset %r as %s (%dx%d)", body, self.format, width, height)

        return RenderResult(data=buffer.getvalue(), width=width, height=height, format=self.format)


def default_engine_factory(options: MathOptions) -> MathEngine:
    """Return the matplotlib engine for the given options."""
    return MatplotlibMathEngine.from_options(options)
