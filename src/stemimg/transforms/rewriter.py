#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/transforms/rewriter.py
"""Node replacement and inline markup for rendered equations.

Block equations are swapped for a generated image or passthrough block at
the same position in their parent. Inline equations become inline macro
markup that the downstream converter understands.
"""

from __future__ import annotations

import logging
from typing import Union

from stemimg.ast.nodes import ImageBlock, PassBlock, StemBlock, replace_node
from stemimg.constants import ATTR_ALT, BLOCK_DELIMITERS, STEM_BLOCK_TEMPLATE, STEM_INLINE_TEMPLATE
from stemimg.utils.artifacts import ArtifactRecord, EmbeddedArtifact

logger = logging.getLogger(__name__)


class NodeRewriter:
    """Build replacement nodes and inline markup for rendered equations.

    Parameters
    ----------
    format : str
        Output format; width and height are only set on png image blocks

    """

    def __init__(self, format: str):
        """Initialize the rewriter."""
        self.format = format

    def image_block(self, stem: StemBlock, record: ArtifactRecord) -> ImageBlock:
        """Build the image block that displays a rendered stem block.

        The alt text is the stem block's own ``alt`` attribute, or the
        equation wrapped in ``$$`` delimiters. Identifier and title carry
        over from the stem block.
        """
        opening, closing = BLOCK_DELIMITERS
        alt = stem.attr(ATTR_ALT, inherit=False)
        if alt is None:
            alt = f"{opening}{stem.content}{closing}"

        image = ImageBlock(target=record.target, alt=alt, align="center", id=stem.id, title=stem.title)
        # svg sizes itself
        if self.format == "png":
            image.width = record.width
            image.height = record.height
        return image

    @staticmethod
    def pass_block(stem: StemBlock, embedded: EmbeddedArtifact) -> PassBlock:
        """Build the passthrough block that embeds a rendered stem block."""
        return PassBlock(
            content=STEM_BLOCK_TEMPLATE.format(payload=embedded.payload),
            id=stem.id,
            title=stem.title,
        )

    def replace_stem(
        self, stem: StemBlock, artifact: Union[ArtifactRecord, EmbeddedArtifact]
    ) -> Union[ImageBlock, PassBlock]:
        """Replace a stem block in its parent with the node for its artifact.

        Parameters
        ----------
        stem : StemBlock
            Stem block attached to a parent
        artifact : ArtifactRecord or EmbeddedArtifact
            Written file or embedded markup for the equation

        Returns
        -------
        ImageBlock or PassBlock
            The node now occupying the stem block's position

        """
        if isinstance(artifact, EmbeddedArtifact):
            replacement: Union[ImageBlock, PassBlock] = self.pass_block(stem, artifact)
        else:
            replacement = self.image_block(stem, artifact)

        replace_node(stem, replacement)
        logger.debug("Replaced stem block %s with %s block", stem.id or "<anonymous>", replacement.context)
        return replacement

    @staticmethod
    def inline_markup(artifact: Union[ArtifactRecord, EmbeddedArtifact]) -> str:
        """Return the inline macro text that stands in for an inline equation.

        Examples
        --------
            >>> NodeRewriter.inline_markup(ArtifactRecord("stem-1", Path("img/stem-1.svg"), 20, 9))
            'image:img/stem-1.svg[width=20,height=9]'

        """
        if isinstance(artifact, EmbeddedArtifact):
            return STEM_INLINE_TEMPLATE.format(payload=artifact.payload)
        return f"image:{artifact.target}[width={artifact.width},height={artifact.height}]"
