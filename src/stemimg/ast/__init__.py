#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/ast/__init__.py
"""Document tree module.

This module provides the block-level tree of an already-parsed AsciiDoc-style
document that the STEM image pass rewrites in place.

The module consists of several components:

- nodes: node classes representing document structure
- visitors: visitor base class and ``find_by`` block queries
- serialization: JSON serialization and deserialization of trees

Examples
--------
    >>> from stemimg.ast import Document, Paragraph, StemBlock
    >>> doc = Document(children=[
    ...     StemBlock(lines=["x^2"]),
    ...     Paragraph(lines=["inline stem:[y^2]"]),
    ... ])
    >>> [node.context for node in doc.find_by()]
    ['document', 'stem', 'paragraph']

"""

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
    TextBearing,
    get_node_children,
    replace_node,
)
from stemimg.ast.serialization import ast_to_dict, ast_to_json, dict_to_ast, json_to_ast
from stemimg.ast.visitors import NodeCollector, NodeVisitor, find_by

__all__ = [
    # Nodes
    "Node",
    "TextBearing",
    "Document",
    "Section",
    "Block",
    "List",
    "ListItem",
    "Table",
    "Paragraph",
    "StemBlock",
    "ImageBlock",
    "PassBlock",
    "TableCell",
    # Helpers
    "get_node_children",
    "replace_node",
    # Visitors
    "NodeVisitor",
    "NodeCollector",
    "find_by",
    # Serialization
    "ast_to_dict",
    "dict_to_ast",
    "ast_to_json",
    "json_to_ast",
]
