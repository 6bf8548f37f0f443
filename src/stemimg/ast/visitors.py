#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/ast/visitors.py
"""Visitor pattern implementation for document tree traversal.

This module provides the visitor base class and the block query used by the
STEM image pass. Queries mirror AsciiDoc's ``find_by``: a depth-first,
document-order walk over blocks that does not descend into the nested
documents of ``asciidoc`` table cells unless asked to.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from stemimg.ast.nodes import (
    Block,
    Document,
    ImageBlock,
    List,
    ListItem,
    Node,
    Paragraph,
    PassBlock,
    Section,
    StemBlock,
    Table,
    TableCell,
)


class NodeVisitor(ABC):
    """Abstract base class for document tree visitors.

    Subclasses implement a visit_* method for each node type. All visit
    methods accept a node and return Any (typically None for side-effect
    visitors).

    Examples
    --------
    Count stem blocks:

        >>> collector = NodeCollector(lambda n: n.context == "stem")
        >>> document.accept(collector)
        >>> len(collector.collected)

    """

    @abstractmethod
    def visit_document(self, node: Document) -> Any:
        """Visit a Document node."""
        pass

    @abstractmethod
    def visit_section(self, node: Section) -> Any:
        """Visit a Section node."""
        pass

    @abstractmethod
    def visit_block(self, node: Block) -> Any:
        """Visit a generic Block node."""
        pass

    @abstractmethod
    def visit_paragraph(self, node: Paragraph) -> Any:
        """Visit a Paragraph node."""
        pass

    @abstractmethod
    def visit_stem_block(self, node: StemBlock) -> Any:
        """Visit a StemBlock node."""
        pass

    @abstractmethod
    def visit_image_block(self, node: ImageBlock) -> Any:
        """Visit an ImageBlock node."""
        pass

    @abstractmethod
    def visit_pass_block(self, node: PassBlock) -> Any:
        """Visit a PassBlock node."""
        pass

    @abstractmethod
    def visit_list(self, node: List) -> Any:
        """Visit a List node."""
        pass

    @abstractmethod
    def visit_list_item(self, node: ListItem) -> Any:
        """Visit a ListItem node."""
        pass

    @abstractmethod
    def visit_table(self, node: Table) -> Any:
        """Visit a Table node."""
        pass

    @abstractmethod
    def visit_table_cell(self, node: TableCell) -> Any:
        """Visit a TableCell node."""
        pass


class NodeCollector(NodeVisitor):
    """Collect nodes matching a predicate in document order.

    Parameters
    ----------
    predicate : callable, optional
        Function taking a node and returning True to collect it. When None,
        every visited node is collected.
    traverse_documents : bool, default = False
        Whether to descend into the nested documents of ``asciidoc`` cells

    """

    def __init__(self, predicate: Optional[Callable[[Node], bool]] = None, traverse_documents: bool = False):
        """Initialize the collector."""
        self.predicate = predicate
        self.traverse_documents = traverse_documents
        self.collected: list[Node] = []

    def _collect_if_match(self, node: Node) -> None:
        if self.predicate is None or self.predicate(node):
            self.collected.append(node)

    def _visit_children(self, children: list[Any]) -> None:
        for child in children:
            child.accept(self)

    def visit_document(self, node: Document) -> None:
        """Collect the document and walk its blocks."""
        self._collect_if_match(node)
        self._visit_children(node.children)

    def visit_section(self, node: Section) -> None:
        """Collect the section and walk its blocks."""
        self._collect_if_match(node)
        self._visit_children(node.children)

    def visit_block(self, node: Block) -> None:
        """Collect the block and walk its child blocks."""
        self._collect_if_match(node)
        self._visit_children(node.children)

    def visit_paragraph(self, node: Paragraph) -> None:
        """Collect the paragraph."""
        self._collect_if_match(node)

    def visit_stem_block(self, node: StemBlock) -> None:
        """Collect the stem block."""
        self._collect_if_match(node)

    def visit_image_block(self, node: ImageBlock) -> None:
        """Collect the image block."""
        self._collect_if_match(node)

    def visit_pass_block(self, node: PassBlock) -> None:
        """Collect the passthrough block."""
        self._collect_if_match(node)

    def visit_list(self, node: List) -> None:
        """Collect the list and walk its items."""
        self._collect_if_match(node)
        self._visit_children(node.items)

    def visit_list_item(self, node: ListItem) -> None:
        """Collect the item and walk its attached blocks."""
        self._collect_if_match(node)
        self._visit_children(node.children)

    def visit_table(self, node: Table) -> None:
        """Collect the table; cells are only walked when traversing documents."""
        self._collect_if_match(node)
        if not self.traverse_documents:
            return
        for rows in (node.head, node.body, node.foot):
            for row in rows:
                for cell in row:
                    cell.accept(self)

    def visit_table_cell(self, node: TableCell) -> None:
        """Walk the nested document of an ``asciidoc`` cell."""
        if node.style == "asciidoc" and node.inner_document is not None:
            self._visit_children(node.inner_document.children)


def find_by(
    root: Node,
    context: Optional[str] = None,
    predicate: Optional[Callable[[Node], bool]] = None,
    traverse_documents: bool = False,
) -> list[Node]:
    """Find blocks under ``root`` (inclusive) by context and predicate.

    Parameters
    ----------
    root : Node
        Node to start from
    context : str, optional
        Only match nodes with this context (e.g. ``"stem"``, ``"table"``)
    predicate : callable, optional
        Additional filter applied to nodes that pass the context check
    traverse_documents : bool, default = False
        Whether to descend into the nested documents of ``asciidoc`` cells

    Returns
    -------
    list of Node
        Matching nodes in document order

    Examples
    --------
        >>> stems = find_by(document, context="stem")
        >>> prose = find_by(document, predicate=lambda n: n.context == "list_item")

    """

    def _matches(node: Node) -> bool:
        if context is not None and node.context != context:
            return False
        return predicate is None or predicate(node)

    collector = NodeCollector(_matches, traverse_documents=traverse_documents)
    root.accept(collector)
    return collector.collected
