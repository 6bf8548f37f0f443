#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/transforms/stem.py
"""STEM image pass over a document tree.

:class:`StemProcessor` replaces every equation in a document with a rendered
image (or embedded markup) in four ordered stages:

1. Stem blocks become image blocks (or passthrough blocks).
2. Inline macros in prose (simple blocks that get macro substitution, and
   list items) are replaced in the raw text.
3. Body and footer cells of every table are scanned; ``asciidoc`` cells are
   processed recursively as documents of their own, ``literal`` cells are
   left alone.
4. Inline macros in block titles are replaced; for sections the cached converted
   title is dropped.

Block queries never descend into the nested documents of ``asciidoc`` cells,
so every nested document is reached exactly once, through stage 3.

Examples
--------
    >>> from stemimg.ast import Document, Paragraph, StemBlock
    >>> doc = Document(
    ...     children=[StemBlock(lines=["E = mc^2"]), Paragraph(lines=["where stem:[c] is the speed of light"])],
    ...     options={"to_dir": "build"},
    ... )
    >>> report = StemProcessor().process(doc)
    >>> doc.children[0].context
    'image'

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union, cast

from stemimg.ast.nodes import Document, Node, Section, StemBlock, Table, TableCell, TextBearing
from stemimg.constants import SUB_MACROS, SUB_SPECIALCHARACTERS
from stemimg.options.math import MathOptions
from stemimg.renderers.engine import EngineFactory, default_engine_factory
from stemimg.renderers.equation import EquationRenderer
from stemimg.transforms.macros import MacroScanner, ScanResult
from stemimg.transforms.rewriter import NodeRewriter
from stemimg.utils.artifacts import ArtifactRecord, ArtifactStore, EmbeddedArtifact
from stemimg.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

# Row groups scanned in tables; header rows are left as they are
TABLE_ROW_GROUPS = ("body", "foot")


@dataclass
class ProcessingReport:
    """Artifacts produced by one pass, including nested documents.

    Parameters
    ----------
    artifacts : list of ArtifactRecord
        Files written, in processing order
    embedded : list of EmbeddedArtifact
        Equations embedded as markup, in processing order
    documents : int
        Number of documents processed (the root plus nested ones)

    """

    artifacts: list[ArtifactRecord] = field(default_factory=list)
    embedded: list[EmbeddedArtifact] = field(default_factory=list)
    documents: int = 0

    @property
    def rendered(self) -> int:
        """Total number of equations rendered."""
        return len(self.artifacts) + len(self.embedded)

    @property
    def paths(self) -> list[str]:
        """Paths of the written files, without duplicates, in first-write order."""
        return list(dict.fromkeys(record.target for record in self.artifacts))

    def add(self, artifact: Union[ArtifactRecord, EmbeddedArtifact]) -> None:
        """Record one artifact."""
        if isinstance(artifact, EmbeddedArtifact):
            self.embedded.append(artifact)
        else:
            self.artifacts.append(artifact)

    def merge(self, other: ProcessingReport) -> None:
        """Append the artifacts of another report (e.g. of a nested document)."""
        self.artifacts.extend(other.artifacts)
        self.embedded.extend(other.embedded)
        self.documents += other.documents


@dataclass
class RenderContext:
    """Everything one document's pass needs, built once per document.

    Parameters
    ----------
    document : Document
        The document being processed
    options : MathOptions
        Options read from the document
    renderer : EquationRenderer
        Renderer bound to the document's engine
    store : ArtifactStore
        Artifact store for the document's format
    rewriter : NodeRewriter
        Node and markup builder for the document's format
    scanner : MacroScanner
        Inline macro scanner

    """

    document: Document
    options: MathOptions
    renderer: EquationRenderer
    store: ArtifactStore
    rewriter: NodeRewriter
    scanner: MacroScanner

    @classmethod
    def create(
        cls,
        document: Document,
        engine_factory: EngineFactory,
        option_overrides: Optional[dict[str, Any]] = None,
    ) -> RenderContext:
        """Read the document options and build the collaborators for its pass."""
        options = MathOptions.from_document(document, **(option_overrides or {}))
        renderer = EquationRenderer(engine_factory(options), options)
        store = ArtifactStore(options.format)
        rewriter = NodeRewriter(options.format)
        default_subs = [SUB_SPECIALCHARACTERS] if document.basebackend("html") else []
        scanner = MacroScanner(renderer, store, rewriter, default_subs, inline=options.inline)
        return cls(
            document=document,
            options=options,
            renderer=renderer,
            store=store,
            rewriter=rewriter,
            scanner=scanner,
        )


def is_prose_node(node: Node) -> bool:
    """Return whether a node's text is scanned as prose.

    That is every simple-content node whose substitutions include macros,
    and every list item.
    """
    if node.context == "list_item":
        return True
    return node.content_model == "simple" and SUB_MACROS in (getattr(node, "subs", None) or ())


def has_block_title(node: Node) -> bool:
    """Return whether a block carries a title; the document header title is not one."""
    return not isinstance(node, Document) and bool(node.title)


class StemProcessor:
    """Replace the equations of a document with rendered images.

    Parameters
    ----------
    engine_factory : callable, optional
        Builds the math engine from a document's options; defaults to the
        matplotlib engine
    option_overrides : dict, optional
        ``format``, ``ppi``, ``inline`` or ``font_size`` values that take
        precedence over document attributes

    """

    def __init__(
        self,
        engine_factory: Optional[EngineFactory] = None,
        option_overrides: Optional[dict[str, Any]] = None,
    ):
        """Initialize the processor."""
        self.engine_factory: EngineFactory = engine_factory or default_engine_factory
        self.option_overrides = dict(option_overrides or {})

    def process(self, document: Document) -> ProcessingReport:
        """Run the STEM image pass over a document, in place.

        Parameters
        ----------
        document : Document
            Root document or nested document of an ``asciidoc`` cell

        Returns
        -------
        ProcessingReport
            Artifacts produced for this document and its nested documents

        Raises
        ------
        ValidationError
            If the document's ``mathematical-ppi`` is invalid
        RenderingError
            If an equation cannot be rendered or written; the pass stops at
            the first failure
        DependencyError
            If the math engine's dependencies are missing

        """
        context = RenderContext.create(document, self.engine_factory, self.option_overrides)
        report = ProcessingReport(documents=1)

        label = "nested document" if document.nested else "document"
        with debug_timer(logger, f"STEM pass over {label}"):
            self._process_stem_blocks(context, report)
            self._process_prose(context, report)
            self._process_tables(context, report)
            self._process_titles(context, report)

        logger.info("Rendered %d equation(s) in %s", report.rendered, label)
        return report

    def _process_stem_blocks(self, context: RenderContext, report: ProcessingReport) -> None:
        for node in context.document.find_by(context="stem"):
            self._handle_stem_block(context, cast(StemBlock, node), report)

    def _handle_stem_block(self, context: RenderContext, stem: StemBlock, report: ProcessingReport) -> None:
        content = stem.content
        if not content.strip():
            logger.debug("Skipping empty stem block %s", stem.id or "<anonymous>")
            return

        wrapped, result = context.renderer.render(content, inline=False)
        artifact: Union[ArtifactRecord, EmbeddedArtifact]
        if context.options.inline:
            artifact = context.store.embed(result)
        else:
            artifact = context.store.store(result, stem.parent or stem, wrapped, explicit_id=stem.id)

        context.rewriter.replace_stem(stem, artifact)
        report.add(artifact)

    def _process_prose(self, context: RenderContext, report: ProcessingReport) -> None:
        for node in context.document.find_by(predicate=is_prose_node):
            self._scan_and_write_back(context, node, report)

    def _process_tables(self, context: RenderContext, report: ProcessingReport) -> None:
        for table in context.document.find_by(context="table"):
            for group in TABLE_ROW_GROUPS:
                for row in cast(Table, table).rows[group]:
                    for cell in row:
                        self._handle_cell(context, cell, report)

    def _handle_cell(self, context: RenderContext, cell: TableCell, report: ProcessingReport) -> None:
        if cell.style == "asciidoc":
            report.merge(self.process(cast(Document, cell.inner_document)))
        elif cell.style != "literal":
            self._scan_and_write_back(context, cell, report)

    def _process_titles(self, context: RenderContext, report: ProcessingReport) -> None:
        for node in context.document.find_by(predicate=has_block_title):
            if isinstance(node, Section):
                self._scan_and_write_back(context, node, report)
                continue
            original = cast(str, node.title)
            result = context.scanner.scan(original, node)
            if result.text is not None and result.text != original:
                node.title = result.text
            for artifact in result.artifacts:
                report.add(artifact)

    def _scan_and_write_back(self, context: RenderContext, node: Node, report: ProcessingReport) -> ScanResult:
        if not isinstance(node, TextBearing):
            return ScanResult(text=None)

        original = node.get_source_text()
        result = context.scanner.scan(original, node)
        if result.text is not None and result.text != original:
            node.set_source_text(result.text)
        for artifact in result.artifacts:
            report.add(artifact)
        return result
