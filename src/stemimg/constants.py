#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the stemimg library.

This module centralizes the hardcoded values used across stemimg: document
attribute names, rendering defaults, artifact naming and the AsciiDoc
substitution tables.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Rendering Defaults - Format and resolution settings
3. Document Attributes - Attribute names read from the tree
4. Macro Detection - Inline STEM macro keywords
5. Substitutions - AsciiDoc substitution groups and aliases
6. Dependencies - Optional packages and their version requirements
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

MathFormat = Literal["png", "svg"]
StemStyle = Literal["stem", "latexmath", "asciimath"]
CellStyle = Literal["default", "asciidoc", "literal", "emphasis", "header", "monospaced", "strong"]
ContentModel = Literal["compound", "simple", "verbatim", "raw", "empty"]

# =============================================================================
# Rendering Defaults
# =============================================================================

SUPPORTED_FORMATS: tuple[str, ...] = ("png", "svg")
DEFAULT_FORMAT: MathFormat = "png"
DEFAULT_PPI = 300.0

# SVG output is always produced at the engine's nominal resolution
SVG_PPI = 72.0

# Point size used by the matplotlib engine when typesetting equations
DEFAULT_FONT_SIZE = 12.0

INLINE_DELIMITERS = ("$", "$")
BLOCK_DELIMITERS = ("$$", "$$")

ARTIFACT_ID_PREFIX = "stem-"

# =============================================================================
# Document Attributes
# =============================================================================

ATTR_FORMAT = "mathematical-format"
ATTR_PPI = "mathematical-ppi"
ATTR_INLINE = "mathematical-inline"
ATTR_IMAGESDIR = "imagesdir"
ATTR_IMAGESOUTDIR = "imagesoutdir"
ATTR_OUTDIR = "outdir"
ATTR_ALT = "alt"
ATTR_BASEBACKEND = "basebackend"

OPTION_TO_DIR = "to_dir"
OPTION_BASE_DIR = "base_dir"

DEFAULT_BACKEND = "html5"

# Backends handled by the STEM image pass
SUPPORTED_BACKENDS: tuple[str, ...] = ("pdf",)

# Backend name -> base backend family
BASEBACKEND_MAP: dict[str, str] = {
    "html5": "html",
    "xhtml5": "html",
    "html": "html",
    "pdf": "html",
    "docbook5": "docbook",
    "docbook": "docbook",
    "manpage": "manpage",
}

# =============================================================================
# Macro Detection
# =============================================================================

STEM_MACRO_NAMES: tuple[str, ...] = ("stem", "latexmath", "asciimath")
STEM_MACRO_PREFIXES: tuple[str, ...] = tuple(f"{name}:" for name in STEM_MACRO_NAMES)

STEM_BLOCK_TEMPLATE = '<div class="stemblock"> {payload} </div>'
STEM_INLINE_TEMPLATE = 'pass:[<span class="steminline"> {payload} </span>]'

# =============================================================================
# Substitutions
# =============================================================================

SUB_SPECIALCHARACTERS = "specialcharacters"
SUB_QUOTES = "quotes"
SUB_ATTRIBUTES = "attributes"
SUB_REPLACEMENTS = "replacements"
SUB_MACROS = "macros"
SUB_POST_REPLACEMENTS = "post_replacements"
SUB_CALLOUTS = "callouts"

BASIC_SUBS: tuple[str, ...] = (SUB_SPECIALCHARACTERS,)
NORMAL_SUBS: tuple[str, ...] = (
    SUB_SPECIALCHARACTERS,
    SUB_QUOTES,
    SUB_ATTRIBUTES,
    SUB_REPLACEMENTS,
    SUB_MACROS,
    SUB_POST_REPLACEMENTS,
)
VERBATIM_SUBS: tuple[str, ...] = (SUB_SPECIALCHARACTERS, SUB_CALLOUTS)
NONE_SUBS: tuple[str, ...] = ()
TITLE_SUBS = NORMAL_SUBS

SUB_GROUPS: dict[str, tuple[str, ...]] = {
    "none": NONE_SUBS,
    "normal": NORMAL_SUBS,
    "verbatim": VERBATIM_SUBS,
    "specialchars": BASIC_SUBS,
}

SUB_HINTS: dict[str, str] = {
    "a": SUB_ATTRIBUTES,
    "m": SUB_MACROS,
    "n": "normal",
    "p": SUB_POST_REPLACEMENTS,
    "q": SUB_QUOTES,
    "r": SUB_REPLACEMENTS,
    "c": SUB_SPECIALCHARACTERS,
    "v": "verbatim",
}

SUB_TYPES: frozenset[str] = frozenset(
    {
        SUB_SPECIALCHARACTERS,
        SUB_QUOTES,
        SUB_ATTRIBUTES,
        SUB_REPLACEMENTS,
        SUB_MACROS,
        SUB_POST_REPLACEMENTS,
        SUB_CALLOUTS,
    }
)

# =============================================================================
# Dependencies
# =============================================================================

DEPS_MATH_RENDER = [("matplotlib", "matplotlib", ">=3.5")]
