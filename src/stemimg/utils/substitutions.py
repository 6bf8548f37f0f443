#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/utils/substitutions.py
"""AsciiDoc substitution engine for equation sources and titles.

Inline STEM macros may carry an explicit substitution list
(``stem:c,q[...]``); when they do, the named substitutions are applied to the
equation body before it is handed to the rendering engine. Section titles use
the same engine to build their converted form.

Only the substitutions that are meaningful on text that never leaves the
tree are implemented: ``macros`` and ``callouts`` are accepted and left as
no-ops, since inline macro conversion belongs to the downstream converter.

Examples
--------
    >>> resolve_pass_subs("c,q")
    ['specialcharacters', 'quotes']
    >>> apply_subs("a < b", ["specialcharacters"])
    'a &lt; b'

"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Iterable, Optional

from stemimg.constants import (
    SUB_ATTRIBUTES,
    SUB_CALLOUTS,
    SUB_GROUPS,
    SUB_HINTS,
    SUB_MACROS,
    SUB_POST_REPLACEMENTS,
    SUB_QUOTES,
    SUB_REPLACEMENTS,
    SUB_SPECIALCHARACTERS,
    SUB_TYPES,
)

logger = logging.getLogger(__name__)

AttributeLookup = Callable[[str], Any]

_SPECIAL_CHARS = {"&": "&amp;", "<": "&lt;", ">": "&gt;"}
_SPECIAL_CHARS_PATTERN = re.compile(r"[&<>]")

# (pattern, replacement) pairs, applied in order; group 1 is the escape marker
_QUOTE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(\\?)(?<![\w*])\*(\S|\S.*?\S)\*(?![\w*])", re.DOTALL), "<strong>{}</strong>"),
    (re.compile(r"(\\?)(?<![\w`])`(\S|\S.*?\S)`(?![\w`])", re.DOTALL), "<code>{}</code>"),
    (re.compile(r"(\\?)(?<![\w_])_(\S|\S.*?\S)_(?![\w_])", re.DOTALL), "<em>{}</em>"),
    (re.compile(r"(\\?)(?<![\w#])#(\S|\S.*?\S)#(?![\w#])", re.DOTALL), "<mark>{}</mark>"),
    (re.compile(r"(\\?)\^(\S+?)\^"), "<sup>{}</sup>"),
    (re.compile(r"(\\?)~(\S+?)~"), "<sub>{}</sub>"),
]

_REPLACEMENT_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(\\?)\(C\)"), "&#169;"),
    (re.compile(r"(\\?)\(R\)"), "&#174;"),
    (re.compile(r"(\\?)\(TM\)"), "&#8482;"),
    (re.compile(r"(\\?)(?<= )--(?= )"), "&#8201;&#8212;&#8201;"),
    (re.compile(r"(\\?)(?<=\w)--(?=\w)"), "&#8212;&#8203;"),
    (re.compile(r"(\\?)\.\.\."), "&#8230;&#8203;"),
    (re.compile(r"(\\?)(?<=\w)'(?=\w)"), "&#8217;"),
    (re.compile(r"(\\?)(?:->|-&gt;)"), "&#8594;"),
    (re.compile(r"(\\?)(?:=>|=&gt;)"), "&#8658;"),
    (re.compile(r"(\\?)(?:<-|&lt;-)"), "&#8592;"),
    (re.compile(r"(\\?)(?:<=|&lt;=)"), "&#8656;"),
]

_ATTRIBUTE_REFERENCE_PATTERN = re.compile(r"(\\)?\{(\w[\w-]*)\}")
_HARD_BREAK_PATTERN = re.compile(r" \+$", re.MULTILINE)


def resolve_subs(spec: str, subject: str = "passthrough macro") -> list[str]:
    """Resolve a comma-separated substitution list into substitution names.

    Groups (``normal``, ``verbatim``, ``specialchars``, ``none``) and
    single-letter hints (``c``, ``q``, ``a``, ...) are expanded; duplicates
    are dropped while keeping the first occurrence.

    Parameters
    ----------
    spec : str
        Substitution list as written in the source, e.g. ``"c,q"``
    subject : str, default "passthrough macro"
        What the list belongs to; used in warning messages

    Returns
    -------
    list of str
        Ordered substitution names

    """
    resolved: list[str] = []
    for raw_name in spec.split(","):
        name = raw_name.strip()
        if not name:
            continue

        name = SUB_HINTS.get(name, name)
        if name in SUB_GROUPS:
            candidates: Iterable[str] = SUB_GROUPS[name]
        elif name in SUB_TYPES:
            candidates = (name,)
        else:
            logger.warning("invalid substitution type for %s: %s", subject, raw_name.strip())
            continue

        for candidate in candidates:
            if candidate not in resolved:
                resolved.append(candidate)

    return resolved


def resolve_pass_subs(spec: str) -> list[str]:
    """Resolve the substitution list of a passthrough-style macro.

    Parameters
    ----------
    spec : str
        Substitution list, e.g. ``"specialchars,quotes"``

    Returns
    -------
    list of str
        Ordered substitution names

    """
    return resolve_subs(spec, subject="passthrough macro")


def sub_specialchars(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` as XML entities."""
    if not text:
        return text
    return _SPECIAL_CHARS_PATTERN.sub(lambda m: _SPECIAL_CHARS[m.group(0)], text)


def _apply_patterns(text: str, patterns: list[tuple[re.Pattern[str], str]], wrap: bool) -> str:
    for pattern, template in patterns:

        def _replace(match: re.Match[str], template: str = template) -> str:
            if match.group(1):
                return match.group(0)[1:]
            if wrap:
                return template.format(match.group(2))
            return template

        text = pattern.sub(_replace, text)
    return text


def sub_quotes(text: str) -> str:
    """Convert constrained inline formatting marks to HTML tags."""
    return _apply_patterns(text, _QUOTE_PATTERNS, wrap=True)


def sub_replacements(text: str) -> str:
    """Replace typographic character sequences with their entities."""
    return _apply_patterns(text, _REPLACEMENT_PATTERNS, wrap=False)


def sub_attributes(text: str, lookup: Optional[AttributeLookup]) -> str:
    """Replace ``{name}`` references with attribute values.

    References to missing attributes are left untouched. A reference written
    as ``\\{name}`` is emitted literally without the backslash.

    """
    if lookup is None or "{" not in text:
        return text

    def _replace(match: re.Match[str]) -> str:
        if match.group(1):
            return match.group(0)[1:]
        value = lookup(match.group(2))
        if value is None:
            return match.group(0)
        return str(value)

    return _ATTRIBUTE_REFERENCE_PATTERN.sub(_replace, text)


def sub_post_replacements(text: str) -> str:
    """Turn trailing `` +`` line markers into hard line breaks."""
    return _HARD_BREAK_PATTERN.sub("<br>", text)


def apply_subs(text: str, subs: Iterable[str], lookup: Optional[AttributeLookup] = None) -> str:
    """Apply substitutions to text in the order given.

    Parameters
    ----------
    text : str
        Source text
    subs : iterable of str
        Substitution names, as returned by :func:`resolve_subs`
    lookup : callable, optional
        Attribute resolver used by the ``attributes`` substitution

    Returns
    -------
    str
        Substituted text

    """
    for sub in subs:
        if sub == SUB_SPECIALCHARACTERS:
            text = sub_specialchars(text)
        elif sub == SUB_QUOTES:
            text = sub_quotes(text)
        elif sub == SUB_ATTRIBUTES:
            text = sub_attributes(text, lookup)
        elif sub == SUB_REPLACEMENTS:
            text = sub_replacements(text)
        elif sub == SUB_POST_REPLACEMENTS:
            text = sub_post_replacements(text)
        elif sub in (SUB_MACROS, SUB_CALLOUTS):
            continue
        else:
            raise ValueError(f"Unknown substitution: {sub}")
    return text
