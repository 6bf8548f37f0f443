#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/renderers/equation.py
"""Equation rendering front end.

:class:`EquationRenderer` wraps an equation body in the delimiters that mark
it as inline (``$...$``) or block (``$$...$$``) math and hands it to the
configured engine. The wrapped source is also what artifact ids are derived
from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stemimg.constants import BLOCK_DELIMITERS, INLINE_DELIMITERS
from stemimg.exceptions import RenderingError, StemImgError

if TYPE_CHECKING:
    from stemimg.options.math import MathOptions
    from stemimg.renderers.engine import MathEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Output of one engine invocation.

    Parameters
    ----------
    data : bytes
        Image bytes
    width : int
        Intended width in pixels at 72 ppi
    height : int
        Intended height in pixels at 72 ppi
    format : str
        ``png`` or ``svg``

    """

    data: bytes
    width: int
    height: int
    format: str


def wrap_equation(body: str, inline: bool) -> str:
    """Wrap an equation body in inline or block math delimiters."""
    opening, closing = INLINE_DELIMITERS if inline else BLOCK_DELIMITERS
    return f"{opening}{body}{closing}"


class EquationRenderer:
    """Render equation bodies through a math engine.

    Parameters
    ----------
    engine : MathEngine
        Engine that typesets delimited equations
    options : MathOptions
        Options of the document being processed

    """

    def __init__(self, engine: MathEngine, options: MathOptions):
        """Initialize the renderer."""
        self.engine = engine
        self.options = options

    def render(self, body: str, inline: bool) -> tuple[str, RenderResult]:
        """Render an equation body.

        Parameters
        ----------
        body : str
            Equation source without delimiters
        inline : bool
            Whether the equation occurs inline in text

        Returns
        -------
        tuple of (str, RenderResult)
            The wrapped source and the engine output

        Raises
        ------
        RenderingError
            If the engine fails to typeset the equation
        DependencyError
            If the engine's dependencies are missing

        """
        wrapped = wrap_equation(body, inline)
        try:
            result = self.engine.parse(wrapped)
        except StemImgError:
            raise
        except Exception as e:
            raise RenderingError(
                f"Failed to render equation {wrapped!r}: {e}", rendering_stage="math", original_error=e
            ) from e

        return wrapped, result
