#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/ast/nodes.py
"""Document tree node classes.

This module defines the block-level node hierarchy of an already-parsed
AsciiDoc-style document. The tree is produced by an external parser (or
loaded from JSON via :mod:`stemimg.ast.serialization`) and is rewritten in
place by the STEM image pass.

The node hierarchy is designed to:
- Keep owned, indexable child lists so a node can be replaced at its index
- Link every node to its parent so attributes and options can be inherited
- Expose one text-payload interface (:class:`TextBearing`) for every node
  kind whose text may carry inline macros
- Support the visitor pattern for traversal

Node Hierarchy
--------------
Container nodes:
    - Document, Section, Block, List, ListItem, Table

Leaf nodes:
    - Paragraph, StemBlock, ImageBlock, PassBlock, TableCell

A TableCell styled ``asciidoc`` owns a nested Document.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from stemimg.constants import (
    ATTR_BASEBACKEND,
    BASEBACKEND_MAP,
    DEFAULT_BACKEND,
    NORMAL_SUBS,
    OPTION_BASE_DIR,
    TITLE_SUBS,
)
from stemimg.utils.substitutions import apply_subs


@runtime_checkable
class TextBearing(Protocol):
    """Nodes with a mutable raw-text payload that may contain inline macros."""

    def get_source_text(self) -> Optional[str]:
        """Return the raw text payload, or None when the node has none."""
        ...

    def set_source_text(self, text: str) -> None:
        """Replace the raw text payload."""
        ...


class Node(ABC):
    """Base class for all document nodes.

    Every node carries an optional identifier and title, a dictionary of
    local attributes and a link to its parent. Attribute lookups fall back
    to the owning document unless ``inherit=False`` is passed.

    Parameters
    ----------
    id : str or None, default = None
        Node identifier (anchor)
    title : str or None, default = None
        Node title
    attributes : dict, default = empty dict
        Local attributes of the node

    """

    id: Optional[str]
    title: Optional[str]
    attributes: dict[str, Any]
    parent: Optional[Node]
    context: str
    content_model: str

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass

    def _find_document(self) -> Optional[Document]:
        node: Optional[Node] = self
        while node is not None and not isinstance(node, Document):
            node = node.parent
        return node

    @property
    def document(self) -> Document:
        """Return the document that owns this node.

        Raises
        ------
        ValueError
            If the node is not attached to a document

        """
        document = self._find_document()
        if document is None:
            raise ValueError(f"{type(self).__name__} is not attached to a document")
        return document

    def attr(self, name: str, default: Any = None, inherit: bool = True) -> Any:
        """Look up an attribute on this node, then on its document.

        Parameters
        ----------
        name : str
            Attribute name
        default : Any, optional
            Value returned when the attribute is not set
        inherit : bool, default = True
            Whether to fall back to the owning document's attributes

        Returns
        -------
        Any
            Attribute value or ``default``

        """
        value = self.attributes.get(name)
        if value is not None:
            return value
        if inherit:
            document = self._find_document()
            if document is not None and document is not self:
                return document.attr(name, default)
        return default

    def has_attr(self, name: str, inherit: bool = True) -> bool:
        """Return whether the attribute is set on this node (or its document)."""
        return self.attr(name, inherit=inherit) is not None

    def set_attr(self, name: str, value: Any) -> None:
        """Set a local attribute on this node."""
        self.attributes[name] = value

    def index_in_parent(self) -> int:
        """Return the position of this node in its parent's child list.

        The lookup compares identity, not equality, so structurally equal
        siblings never shadow each other.

        Raises
        ------
        ValueError
            If the node has no parent or is not among the parent's children

        """
        if self.parent is None:
            raise ValueError(f"{type(self).__name__} has no parent")
        for index, child in enumerate(get_node_children(self.parent)):
            if child is self:
                return index
        raise ValueError(f"{type(self).__name__} is not a child of its parent {type(self.parent).__name__}")


def _adopt(parent: Node, children: list[Any]) -> None:
    for child in children:
        child.parent = parent


# ============================================================================
# Container Nodes
# ============================================================================


@dataclass
class Document(Node):
    """Root document node.

    A Document is either the top-level document or the nested document of an
    ``asciidoc`` table cell. Nested documents inherit attributes and options
    from the document that owns their cell.

    Parameters
    ----------
    children : list of Node, default = empty list
        Top-level blocks
    attributes : dict, default = empty dict
        Document attributes (``imagesdir``, ``mathematical-format``, ...)
    options : dict, default = empty dict
        Conversion options (``to_dir``, ``base_dir``)
    backend : str or None, default = None
        Output backend name; nested documents inherit it when unset
    title : str or None, default = None
        Document title

    """

    children: list[Node] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)
    backend: Optional[str] = None
    id: Optional[str] = None
    title: Optional[str] = None
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="document", init=False, repr=False)
    content_model: str = field(default="compound", init=False, repr=False)

    def __post_init__(self) -> None:
        """Link child blocks to this document."""
        _adopt(self, self.children)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this document."""
        return visitor.visit_document(self)

    @property
    def parent_document(self) -> Optional[Document]:
        """Return the document owning the cell of this nested document, if any."""
        if self.parent is None:
            return None
        return self.parent._find_document()

    @property
    def nested(self) -> bool:
        """Whether this is the nested document of a table cell."""
        return self.parent is not None

    def attr(self, name: str, default: Any = None, inherit: bool = True) -> Any:
        """Look up a document attribute, falling back to the parent document."""
        value = self.attributes.get(name)
        if value is not None:
            return value
        parent_document = self.parent_document
        if inherit and parent_document is not None:
            return parent_document.attr(name, default)
        return default

    def option(self, name: str, default: Any = None) -> Any:
        """Look up a conversion option, falling back to the parent document."""
        value = self.options.get(name)
        if value is not None:
            return value
        parent_document = self.parent_document
        if parent_document is not None:
            return parent_document.option(name, default)
        return default

    def resolve_backend(self) -> str:
        """Return the effective backend name."""
        if self.backend:
            return self.backend
        parent_document = self.parent_document
        if parent_document is not None:
            return parent_document.resolve_backend()
        return DEFAULT_BACKEND

    def basebackend(self, name: str) -> bool:
        """Return whether the backend belongs to the given base backend family.

        Parameters
        ----------
        name : str
            Base backend family, e.g. ``"html"``

        """
        family = self.attr(ATTR_BASEBACKEND)
        if family is None:
            backend = self.resolve_backend()
            family = BASEBACKEND_MAP.get(backend, backend)
        return family == name

    @property
    def base_dir(self) -> Path:
        """Return the directory that relative system paths resolve against."""
        base_dir = self.option(OPTION_BASE_DIR)
        if base_dir is None:
            return Path.cwd()
        return Path(base_dir)

    def append(self, child: Node) -> Node:
        """Append a block and link it to this document."""
        child.parent = self
        self.children.append(child)
        return child

    def find_by(self, context: Optional[str] = None, predicate: Any = None) -> list[Node]:
        """Find blocks by context and/or predicate; see :func:`stemimg.ast.visitors.find_by`."""
        from stemimg.ast.visitors import find_by

        return find_by(self, context=context, predicate=predicate)


@dataclass
class Section(Node):
    """Section node with a title and child blocks.

    The converted form of the title is cached; changing the raw title through
    :meth:`set_source_text` invalidates that cache.

    Parameters
    ----------
    title : str
        Raw section title
    level : int, default = 1
        Section level
    children : list of Node, default = empty list
        Blocks inside the section

    """

    title: str = ""
    level: int = 1
    children: list[Node] = field(default_factory=list)
    id: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="section", init=False, repr=False)
    content_model: str = field(default="compound", init=False, repr=False)
    _converted_title: Optional[str] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Link child blocks to this section."""
        _adopt(self, self.children)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this section."""
        return visitor.visit_section(self)

    @property
    def converted_title(self) -> str:
        """Return the title with title substitutions applied (cached)."""
        if self._converted_title is None:
            self._converted_title = apply_subs(self.title, TITLE_SUBS, lookup=self.attr)
        return self._converted_title

    @property
    def title_converted(self) -> bool:
        """Whether the converted title is currently cached."""
        return self._converted_title is not None

    def invalidate_title(self) -> None:
        """Drop the cached converted title."""
        self._converted_title = None

    def get_source_text(self) -> Optional[str]:
        """Return the raw title."""
        return self.title

    def set_source_text(self, text: str) -> None:
        """Replace the raw title and invalidate the converted title."""
        self.title = text
        self.invalidate_title()

    def append(self, child: Node) -> Node:
        """Append a block and link it to this section."""
        child.parent = self
        self.children.append(child)
        return child


@dataclass
class Block(Node):
    """Generic block node.

    Covers the delimited and styled blocks that need no dedicated class
    (sidebar, example, open, quote, literal, listing, admonition, ...). The
    content model decides whether the block holds lines (``simple``,
    ``verbatim``, ``raw``) or child blocks (``compound``).

    Parameters
    ----------
    context : str, default = "open"
        Block context name
    content_model : str, default = "compound"
        One of compound, simple, verbatim, raw, empty
    lines : list of str, default = empty list
        Source lines for non-compound blocks
    children : list of Node, default = empty list
        Child blocks for compound blocks
    subs : list of str, default = empty list
        Substitutions applied to the lines by the downstream converter
    style : str or None, default = None
        Block style

    """

    context: str = "open"
    content_model: str = "compound"
    lines: list[str] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    subs: list[str] = field(default_factory=list)
    style: Optional[str] = None
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Link child blocks to this block."""
        _adopt(self, self.children)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this block."""
        return visitor.visit_block(self)

    def get_source_text(self) -> Optional[str]:
        """Return the lines joined by newlines."""
        return "\n".join(self.lines)

    def set_source_text(self, text: str) -> None:
        """Replace the lines by splitting text on newlines."""
        self.lines = text.split("\n")

    def append(self, child: Node) -> Node:
        """Append a child block and link it to this block."""
        child.parent = self
        self.children.append(child)
        return child


@dataclass
class List(Node):
    """List node (unordered, ordered or callout list).

    Parameters
    ----------
    items : list of ListItem, default = empty list
        List items
    context : str, default = "ulist"
        One of ulist, olist, colist

    """

    items: list[ListItem] = field(default_factory=list)
    context: str = "ulist"
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    content_model: str = field(default="compound", init=False, repr=False)

    def __post_init__(self) -> None:
        """Link items to this list."""
        _adopt(self, self.items)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this list."""
        return visitor.visit_list(self)


@dataclass
class ListItem(Node):
    """List item with principal text and optional attached blocks.

    Parameters
    ----------
    text : str or None, default = None
        Principal text of the item
    children : list of Node, default = empty list
        Blocks attached to the item

    """

    text: Optional[str] = None
    children: list[Node] = field(default_factory=list)
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="list_item", init=False, repr=False)
    content_model: str = field(default="compound", init=False, repr=False)

    def __post_init__(self) -> None:
        """Link attached blocks to this item."""
        _adopt(self, self.children)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this list item."""
        return visitor.visit_list_item(self)

    def get_source_text(self) -> Optional[str]:
        """Return the principal text."""
        return self.text

    def set_source_text(self, text: str) -> None:
        """Replace the principal text."""
        self.text = text


@dataclass
class Table(Node):
    """Table node with head, body and foot row groups.

    Parameters
    ----------
    head : list of list of TableCell, default = empty list
        Header rows
    body : list of list of TableCell, default = empty list
        Body rows
    foot : list of list of TableCell, default = empty list
        Footer rows

    """

    head: list[list[TableCell]] = field(default_factory=list)
    body: list[list[TableCell]] = field(default_factory=list)
    foot: list[list[TableCell]] = field(default_factory=list)
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="table", init=False, repr=False)
    content_model: str = field(default="table", init=False, repr=False)

    def __post_init__(self) -> None:
        """Link every cell to this table."""
        for rows in (self.head, self.body, self.foot):
            for row in rows:
                _adopt(self, row)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table."""
        return visitor.visit_table(self)

    @property
    def rows(self) -> dict[str, list[list[TableCell]]]:
        """Return the row groups keyed by ``head``, ``body`` and ``foot``."""
        return {"head": self.head, "body": self.body, "foot": self.foot}


# ============================================================================
# Leaf Nodes
# ============================================================================


@dataclass
class Paragraph(Node):
    """Paragraph node holding raw source lines.

    Parameters
    ----------
    lines : list of str, default = empty list
        Raw source lines
    subs : list of str, default = normal substitutions
        Substitutions the downstream converter applies to the lines

    """

    lines: list[str] = field(default_factory=list)
    subs: list[str] = field(default_factory=lambda: list(NORMAL_SUBS))
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="paragraph", init=False, repr=False)
    content_model: str = field(default="simple", init=False, repr=False)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this paragraph."""
        return visitor.visit_paragraph(self)

    def get_source_text(self) -> Optional[str]:
        """Return the lines joined by newlines."""
        return "\n".join(self.lines)

    def set_source_text(self, text: str) -> None:
        """Replace the lines by splitting text on newlines."""
        self.lines = text.split("\n")


@dataclass
class StemBlock(Node):
    """Standalone equation block.

    Parameters
    ----------
    lines : list of str, default = empty list
        Equation source lines
    style : str, default = "stem"
        Notation style (stem, latexmath, asciimath)

    """

    lines: list[str] = field(default_factory=list)
    style: str = "stem"
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="stem", init=False, repr=False)
    content_model: str = field(default="raw", init=False, repr=False)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this stem block."""
        return visitor.visit_stem_block(self)

    @property
    def content(self) -> str:
        """Return the equation source."""
        return "\n".join(self.lines)


@dataclass
class ImageBlock(Node):
    """Block image node.

    Parameters
    ----------
    target : str
        Image path or URL
    alt : str or None, default = None
        Alternative text
    align : str or None, default = None
        Horizontal alignment
    width : int or None, default = None
        Intended width in pixels
    height : int or None, default = None
        Intended height in pixels

    """

    target: str = ""
    alt: Optional[str] = None
    align: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="image", init=False, repr=False)
    content_model: str = field(default="empty", init=False, repr=False)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this image block."""
        return visitor.visit_image_block(self)


@dataclass
class PassBlock(Node):
    """Passthrough block whose content reaches the output unmodified.

    Parameters
    ----------
    content : str
        Raw output markup

    """

    content: str = ""
    id: Optional[str] = None
    title: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="pass", init=False, repr=False)
    content_model: str = field(default="raw", init=False, repr=False)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this passthrough block."""
        return visitor.visit_pass_block(self)


@dataclass
class TableCell(Node):
    """Table cell.

    Cells styled ``asciidoc`` own a nested Document instead of plain text;
    cells styled ``literal`` hold text that is never scanned.

    Parameters
    ----------
    text : str or None, default = None
        Raw cell text
    style : str or None, default = None
        Cell style (asciidoc, literal, emphasis, ...)
    inner_document : Document or None, default = None
        Nested document of an ``asciidoc`` cell

    Raises
    ------
    ValueError
        If the cell is styled ``asciidoc`` but has no nested document

    """

    text: Optional[str] = None
    style: Optional[str] = None
    inner_document: Optional[Document] = None
    id: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    parent: Optional[Node] = field(default=None, repr=False, compare=False)
    context: str = field(default="cell", init=False, repr=False)
    content_model: str = field(default="simple", init=False, repr=False)
    title: Optional[str] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate the cell style and link the nested document."""
        if self.style == "asciidoc":
            if self.inner_document is None:
                raise ValueError("TableCell with style 'asciidoc' requires an inner_document")
            self.content_model = "compound"
        if self.inner_document is not None:
            self.inner_document.parent = self

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table cell."""
        return visitor.visit_table_cell(self)

    def get_source_text(self) -> Optional[str]:
        """Return the raw cell text."""
        return self.text

    def set_source_text(self, text: str) -> None:
        """Replace the raw cell text."""
        self.text = text


# ============================================================================
# Tree helpers
# ============================================================================


def get_node_children(node: Node) -> list[Node]:
    """Return the owned block list of a container node.

    The returned list is the node's own list, not a copy, so writing to an
    index replaces the child in place. Table cells are not blocks and are
    reached through :attr:`Table.rows` instead.

    Parameters
    ----------
    node : Node
        Container node

    Returns
    -------
    list of Node
        Child blocks (empty list for leaf nodes)

    """
    if isinstance(node, (Document, Section, Block, ListItem)):
        return node.children
    if isinstance(node, List):
        return node.items  # type: ignore[return-value]
    return []


def replace_node(node: Node, replacement: Node) -> Node:
    """Replace a node with another at the same position in its parent.

    Parameters
    ----------
    node : Node
        Node currently in the tree
    replacement : Node
        Node to put in its place

    Returns
    -------
    Node
        The replacement, now linked to the original parent

    Raises
    ------
    ValueError
        If the node is not attached to a parent

    """
    parent = node.parent
    index = node.index_in_parent()
    get_node_children(parent)[index] = replacement  # type: ignore[arg-type]
    replacement.parent = parent
    node.parent = None
    return replacement
