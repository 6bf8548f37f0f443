#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for STEM equation rendering.

The options are read once per document from its attributes
(``mathematical-format``, ``mathematical-ppi``, ``mathematical-inline``) and
stay fixed for the whole pass over that document.
"""
# src/stemimg/options/math.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stemimg.constants import (
    ATTR_FORMAT,
    ATTR_INLINE,
    ATTR_PPI,
    DEFAULT_FONT_SIZE,
    DEFAULT_FORMAT,
    DEFAULT_PPI,
    SUPPORTED_FORMATS,
    SVG_PPI,
    MathFormat,
)
from stemimg.exceptions import ValidationError
from stemimg.options.base import CloneFrozenMixin

if TYPE_CHECKING:
    from stemimg.ast.nodes import Document

logger = logging.getLogger(__name__)


def normalize_format(value: Any) -> MathFormat:
    """Return a supported output format, falling back to png with a warning."""
    if value is None:
        return DEFAULT_FORMAT
    candidate = str(value).strip().lower()
    if candidate in SUPPORTED_FORMATS:
        return candidate  # type: ignore[return-value]
    logger.warning("Unknown format '%s', retreat to 'png'", value)
    return DEFAULT_FORMAT


def parse_ppi(value: Any, strict: bool = True) -> float:
    """Convert a ppi attribute value to a positive float.

    With ``strict=False`` an invalid value is ignored and the default is
    returned instead; svg output never reads it.

    Raises
    ------
    ValidationError
        If ``strict`` and the value is not a number or not positive

    """
    if value is None:
        return DEFAULT_PPI
    try:
        ppi = float(value)
    except (TypeError, ValueError) as e:
        if not strict:
            logger.debug("Ignoring unusable %s %r", ATTR_PPI, value)
            return DEFAULT_PPI
        raise ValidationError(
            f"{ATTR_PPI} must be a number, got {value!r}",
            parameter_name=ATTR_PPI,
            parameter_value=value,
            original_error=e,
        ) from e
    if not ppi > 0:
        if not strict:
            logger.debug("Ignoring unusable %s %r", ATTR_PPI, value)
            return DEFAULT_PPI
        raise ValidationError(
            f"{ATTR_PPI} must be positive, got {value!r}", parameter_name=ATTR_PPI, parameter_value=value
        )
    return ppi


@dataclass(frozen=True)
class MathOptions(CloneFrozenMixin):
    """Configuration options for equation rendering.

    Parameters
    ----------
    format : {"png", "svg"}, default "png"
        Image format produced for each equation.
    ppi : float, default 300.0
        Raster resolution for png output. SVG output always uses 72.0.
    inline : bool, default False
        Embed rendered equations directly in the document instead of writing
        image files.
    font_size : float, default 12.0
        Point size the equations are typeset at.

    """

    format: MathFormat = field(
        default=DEFAULT_FORMAT,
        metadata={"help": "Image format for rendered equations", "choices": list(SUPPORTED_FORMATS)},
    )
    ppi: float = field(
        default=DEFAULT_PPI,
        metadata={"help": "Raster resolution (pixels per inch) for png output", "type": float},
    )
    inline: bool = field(
        default=False,
        metadata={"help": "Embed equations in the document instead of writing image files"},
    )
    font_size: float = field(
        default=DEFAULT_FONT_SIZE,
        metadata={"help": "Font size in points used to typeset equations", "type": float},
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValidationError
            If the format is unsupported, the font size is not positive, or
            the ppi is not positive for png output

        """
        if self.format not in SUPPORTED_FORMATS:
            raise ValidationError(
                f"format must be one of {', '.join(SUPPORTED_FORMATS)}, got {self.format!r}",
                parameter_name="format",
                parameter_value=self.format,
            )
        if self.format != "svg" and not self.ppi > 0:
            raise ValidationError(
                f"ppi must be positive, got {self.ppi}", parameter_name="ppi", parameter_value=self.ppi
            )
        if not self.font_size > 0:
            raise ValidationError(
                f"font_size must be positive, got {self.font_size}",
                parameter_name="font_size",
                parameter_value=self.font_size,
            )

    @property
    def resolution(self) -> float:
        """Return the resolution the engine renders at (72.0 for svg)."""
        if self.format == "svg":
            return SVG_PPI
        return self.ppi

    @classmethod
    def from_document(cls, document: Document, **overrides: Any) -> MathOptions:
        """Build the options for one document from its attributes.

        Keyword overrides that are not None take precedence over the
        document attributes. An unknown format falls back to png with a
        warning; inline embedding combined with png logs a warning and is
        kept.

        Parameters
        ----------
        document : Document
            Document whose attributes are read
        **overrides : Any
            ``format``, ``ppi``, ``inline`` or ``font_size`` values

        Returns
        -------
        MathOptions
            Options for the document

        Raises
        ------
        ValidationError
            If the ppi value is not a positive number and the format is png

        """
        values: dict[str, Any] = {
            "format": document.attr(ATTR_FORMAT),
            "ppi": document.attr(ATTR_PPI),
            "inline": document.has_attr(ATTR_INLINE),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        values["format"] = normalize_format(values["format"])
        values["ppi"] = parse_ppi(values["ppi"], strict=values["format"] != "svg")
        values["inline"] = bool(values["inline"])

        if values["inline"] and values["format"] == "png":
            logger.warning("Can't use mathematical-inline together with mathematical-format=png")

        return cls(**values)
