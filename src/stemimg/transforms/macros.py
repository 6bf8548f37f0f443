#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/transforms/macros.py
"""Inline STEM macro detection and replacement.

Inline equations are written as ``stem:[...]``, ``latexmath:[...]`` or
``asciimath:[...]``, optionally with a substitution list between the colon
and the bracket (``stem:c,q[...]``). A closing bracket inside the equation is
escaped as ``\\]``; a whole macro is escaped with a leading backslash.

Scanning returns a new string rather than mutating its input; the caller
writes the text back when it changed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence, Union

from stemimg.constants import STEM_MACRO_PREFIXES
from stemimg.utils.artifacts import ArtifactRecord, ArtifactStore, EmbeddedArtifact
from stemimg.utils.substitutions import apply_subs, resolve_pass_subs

if TYPE_CHECKING:
    from stemimg.ast.nodes import Node
    from stemimg.renderers.equation import EquationRenderer
    from stemimg.transforms.rewriter import NodeRewriter

logger = logging.getLogger(__name__)

STEM_INLINE_MACRO_PATTERN = re.compile(r"\\?(?:stem|latexmath|asciimath):([a-z,]*)\[(.*?[^\\])\]", re.DOTALL)


def may_contain_macro(text: Optional[str]) -> bool:
    """Return whether text is worth scanning for inline STEM macros."""
    if text is None or ":" not in text:
        return False
    return any(prefix in text for prefix in STEM_MACRO_PREFIXES)


@dataclass
class ScanResult:
    """Outcome of scanning one text payload.

    Parameters
    ----------
    text : str or None
        Text with rendered macros replaced and escape markers removed
    rendered : int
        Number of macros that were rendered
    artifacts : list
        Artifacts produced for the rendered macros, in text order

    """

    text: Optional[str]
    rendered: int = 0
    artifacts: list[Union[ArtifactRecord, EmbeddedArtifact]] = field(default_factory=list)

    @property
    def modified(self) -> bool:
        """Whether at least one macro was rendered."""
        return self.rendered > 0


class MacroScanner:
    """Find, render and replace inline STEM macros in text.

    Parameters
    ----------
    renderer : EquationRenderer
        Renderer for equation bodies
    store : ArtifactStore
        Store that writes or embeds the rendered equations
    rewriter : NodeRewriter
        Builds the replacement markup
    default_subs : sequence of str
        Substitutions applied to macros without an explicit list
    inline : bool, default False
        Embed equations instead of writing files

    """

    def __init__(
        self,
        renderer: EquationRenderer,
        store: ArtifactStore,
        rewriter: NodeRewriter,
        default_subs: Sequence[str],
        inline: bool = False,
    ):
        """Initialize the scanner."""
        self.renderer = renderer
        self.store = store
        self.rewriter = rewriter
        self.default_subs = list(default_subs)
        self.inline = inline

    def scan(self, text: Optional[str], node: Node) -> ScanResult:
        """Replace every inline STEM macro in ``text``.

        Parameters
        ----------
        text : str or None
            Raw text payload of ``node``
        node : Node
            Node owning the text; its attributes feed the substitutions and
            its parent decides where artifacts are written

        Returns
        -------
        ScanResult
            The new text, the number of rendered macros and their artifacts

        Raises
        ------
        RenderingError
            If an equation cannot be rendered or written

        """
        result = ScanResult(text=text)
        if not may_contain_macro(text):
            return result

        def _replace(match: re.Match[str]) -> str:
            source = match.group(0)
            if source.startswith("\\"):
                return source[1:]

            body = match.group(2).rstrip()
            if not body:
                return source

            body = body.replace("\\]", "]")
            sub_spec = match.group(1)
            subs = resolve_pass_subs(sub_spec) if sub_spec else self.default_subs
            if subs:
                body = apply_subs(body, subs, lookup=node.attr)

            artifact = self._render_inline(body, node)
            result.rendered += 1
            result.artifacts.append(artifact)
            return self.rewriter.inline_markup(artifact)

        result.text = STEM_INLINE_MACRO_PATTERN.sub(_replace, text)  # type: ignore[arg-type]
        return result

    def _render_inline(self, body: str, node: Node) -> Union[ArtifactRecord, EmbeddedArtifact]:
        wrapped, rendered = self.renderer.render(body, inline=True)
        if self.inline:
            return self.store.embed(rendered)
        return self.store.store(rendered, node.parent or node, wrapped)
