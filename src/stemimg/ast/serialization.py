#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/ast/serialization.py
"""JSON serialization and deserialization for document trees.

This module converts document trees to and from JSON so that a tree produced
by an external parser can be handed to the command-line tool, rewritten, and
handed back to the downstream converter.

The JSON format preserves:
- All node types and their fields
- Identifiers, titles and local attributes
- Document attributes, options and backend
- Nested documents of ``asciidoc`` table cells

Parent links are not stored; they are rebuilt by the node constructors.

Examples
--------
Serialize a tree to JSON:

    >>> from stemimg.ast import Document, Paragraph
    >>> from stemimg.ast.serialization import ast_to_json
    >>> doc = Document(children=[Paragraph(lines=["area is stem:[pi r^2]"])])
    >>> json_str = ast_to_json(doc, indent=2)

Deserialize JSON back to a tree:

    >>> from stemimg.ast.serialization import json_to_ast
    >>> doc = json_to_ast(json_str)
    >>> doc.children[0].lines
    ['area is stem:[pi r^2]']

"""

from __future__ import annotations

import json
import logging
from typing import Any, cast

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

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _add_common(result: dict[str, Any], node: Node) -> dict[str, Any]:
    """Add id, title and attributes to a serialized node when set."""
    if node.id is not None:
        result["id"] = node.id
    if node.title is not None and not isinstance(node, Section):
        result["title"] = node.title
    if node.attributes:
        result["attributes"] = node.attributes
    return result


def _serialize_children(children: list[Any]) -> list[dict[str, Any]]:
    return [ast_to_dict(child) for child in children]


def _serialize_rows(rows: list[list[TableCell]]) -> list[list[dict[str, Any]]]:
    return [[ast_to_dict(cell) for cell in row] for row in rows]


def _serialize_document(node: Document) -> dict[str, Any]:
    """Serialize a Document node."""
    result: dict[str, Any] = {"node_type": "Document", "children": _serialize_children(node.children)}
    if node.backend is not None:
        result["backend"] = node.backend
    if node.options:
        result["options"] = node.options
    return _add_common(result, node)


def _serialize_section(node: Section) -> dict[str, Any]:
    """Serialize a Section node."""
    result: dict[str, Any] = {
        "node_type": "Section",
        "title": node.title,
        "level": node.level,
        "children": _serialize_children(node.children),
    }
    return _add_common(result, node)


def _serialize_block(node: Block) -> dict[str, Any]:
    """Serialize a generic Block node."""
    result: dict[str, Any] = {
        "node_type": "Block",
        "context": node.context,
        "content_model": node.content_model,
    }
    if node.lines:
        result["lines"] = node.lines
    if node.children:
        result["children"] = _serialize_children(node.children)
    if node.subs:
        result["subs"] = node.subs
    if node.style is not None:
        result["style"] = node.style
    return _add_common(result, node)


def _serialize_paragraph(node: Paragraph) -> dict[str, Any]:
    """Serialize a Paragraph node."""
    result: dict[str, Any] = {"node_type": "Paragraph", "lines": node.lines, "subs": node.subs}
    return _add_common(result, node)


def _serialize_stem_block(node: StemBlock) -> dict[str, Any]:
    """Serialize a StemBlock node."""
    result: dict[str, Any] = {"node_type": "StemBlock", "lines": node.lines, "style": node.style}
    return _add_common(result, node)


def _serialize_image_block(node: ImageBlock) -> dict[str, Any]:
    """Serialize an ImageBlock node."""
    result: dict[str, Any] = {"node_type": "ImageBlock", "target": node.target}
    if node.alt is not None:
        result["alt"] = node.alt
    if node.align is not None:
        result["align"] = node.align
    if node.width is not None:
        result["width"] = node.width
    if node.height is not None:
        result["height"] = node.height
    return _add_common(result, node)


def _serialize_pass_block(node: PassBlock) -> dict[str, Any]:
    """Serialize a PassBlock node."""
    result: dict[str, Any] = {"node_type": "PassBlock", "content": node.content}
    return _add_common(result, node)


def _serialize_list(node: List) -> dict[str, Any]:
    """Serialize a List node."""
    result: dict[str, Any] = {
        "node_type": "List",
        "context": node.context,
        "items": _serialize_children(node.items),
    }
    return _add_common(result, node)


def _serialize_list_item(node: ListItem) -> dict[str, Any]:
    """Serialize a ListItem node."""
    result: dict[str, Any] = {"node_type": "ListItem", "text": node.text}
    if node.children:
        result["children"] = _serialize_children(node.children)
    return _add_common(result, node)


def _serialize_table(node: Table) -> dict[str, Any]:
    """Serialize a Table node."""
    result: dict[str, Any] = {
        "node_type": "Table",
        "head": _serialize_rows(node.head),
        "body": _serialize_rows(node.body),
        "foot": _serialize_rows(node.foot),
    }
    return _add_common(result, node)


def _serialize_table_cell(node: TableCell) -> dict[str, Any]:
    """Serialize a TableCell node."""
    result: dict[str, Any] = {"node_type": "TableCell", "text": node.text}
    if node.style is not None:
        result["style"] = node.style
    if node.inner_document is not None:
        result["inner_document"] = ast_to_dict(node.inner_document)
    return _add_common(result, node)


# Dispatch table mapping node types to their serialization functions
_SERIALIZATION_DISPATCH: dict[type, Any] = {
    Document: _serialize_document,
    Section: _serialize_section,
    Block: _serialize_block,
    Paragraph: _serialize_paragraph,
    StemBlock: _serialize_stem_block,
    ImageBlock: _serialize_image_block,
    PassBlock: _serialize_pass_block,
    List: _serialize_list,
    ListItem: _serialize_list_item,
    Table: _serialize_table,
    TableCell: _serialize_table_cell,
}


def ast_to_dict(node: Node) -> dict[str, Any]:
    """Convert a node to a dictionary representation.

    Parameters
    ----------
    node : Node
        The node to convert

    Returns
    -------
    dict
        Dictionary representation of the node

    Raises
    ------
    ValueError
        If the node type has no serializer

    """
    serializer = _SERIALIZATION_DISPATCH.get(type(node))
    if serializer:
        return serializer(node)

    raise ValueError(f"Unknown node type for serialization: {type(node).__name__}")


def _common_kwargs(data: dict[str, Any], with_title: bool = True) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"id": data.get("id"), "attributes": dict(data.get("attributes", {}))}
    if with_title:
        kwargs["title"] = data.get("title")
    return kwargs


def _deserialize_children(children_data: list[dict[str, Any]], strict_mode: bool) -> list[Node]:
    return [dict_to_ast(child, strict_mode=strict_mode) for child in children_data]


def _deserialize_rows(rows_data: list[list[dict[str, Any]]], strict_mode: bool) -> list[list[TableCell]]:
    return [[cast(TableCell, dict_to_ast(cell, strict_mode=strict_mode)) for cell in row] for row in rows_data]


def _deserialize_document(data: dict[str, Any], strict_mode: bool) -> Document:
    """Deserialize Document node."""
    return Document(
        children=_deserialize_children(data.get("children", []), strict_mode),
        options=dict(data.get("options", {})),
        backend=data.get("backend"),
        **_common_kwargs(data),
    )


def _deserialize_section(data: dict[str, Any], strict_mode: bool) -> Section:
    """Deserialize Section node."""
    return Section(
        title=data.get("title", ""),
        level=data.get("level", 1),
        children=_deserialize_children(data.get("children", []), strict_mode),
        **_common_kwargs(data, with_title=False),
    )


def _deserialize_block(data: dict[str, Any], strict_mode: bool) -> Block:
    """Deserialize generic Block node."""
    return Block(
        context=data.get("context", "open"),
        content_model=data.get("content_model", "compound"),
        lines=list(data.get("lines", [])),
        children=_deserialize_children(data.get("children", []), strict_mode),
        subs=list(data.get("subs", [])),
        style=data.get("style"),
        **_common_kwargs(data),
    )


def _deserialize_paragraph(data: dict[str, Any], strict_mode: bool) -> Paragraph:
    """Deserialize Paragraph node."""
    paragraph = Paragraph(lines=list(data.get("lines", [])), **_common_kwargs(data))
    if "subs" in data:
        paragraph.subs = list(data["subs"])
    return paragraph


def _deserialize_stem_block(data: dict[str, Any], strict_mode: bool) -> StemBlock:
    """Deserialize StemBlock node."""
    return StemBlock(lines=list(data.get("lines", [])), style=data.get("style", "stem"), **_common_kwargs(data))


def _deserialize_image_block(data: dict[str, Any], strict_mode: bool) -> ImageBlock:
    """Deserialize ImageBlock node."""
    return ImageBlock(
        target=data["target"],
        alt=data.get("alt"),
        align=data.get("align"),
        width=data.get("width"),
        height=data.get("height"),
        **_common_kwargs(data),
    )


def _deserialize_pass_block(data: dict[str, Any], strict_mode: bool) -> PassBlock:
    """Deserialize PassBlock node."""
    return PassBlock(content=data.get("content", ""), **_common_kwargs(data))


def _deserialize_list(data: dict[str, Any], strict_mode: bool) -> List:
    """Deserialize List node."""
    return List(
        items=cast(list[ListItem], _deserialize_children(data.get("items", []), strict_mode)),
        context=data.get("context", "ulist"),
        **_common_kwargs(data),
    )


def _deserialize_list_item(data: dict[str, Any], strict_mode: bool) -> ListItem:
    """Deserialize ListItem node."""
    return ListItem(
        text=data.get("text"),
        children=_deserialize_children(data.get("children", []), strict_mode),
        **_common_kwargs(data),
    )


def _deserialize_table(data: dict[str, Any], strict_mode: bool) -> Table:
    """Deserialize Table node."""
    return Table(
        head=_deserialize_rows(data.get("head", []), strict_mode),
        body=_deserialize_rows(data.get("body", []), strict_mode),
        foot=_deserialize_rows(data.get("foot", []), strict_mode),
        **_common_kwargs(data),
    )


def _deserialize_table_cell(data: dict[str, Any], strict_mode: bool) -> TableCell:
    """Deserialize TableCell node."""
    inner_data = data.get("inner_document")
    inner_document = cast(Document, dict_to_ast(inner_data, strict_mode=strict_mode)) if inner_data else None
    return TableCell(
        text=data.get("text"),
        style=data.get("style"),
        inner_document=inner_document,
        **_common_kwargs(data, with_title=False),
    )


# Dispatch table mapping node type strings to deserializer functions
_DESERIALIZATION_DISPATCH: dict[str, Any] = {
    "Document": _deserialize_document,
    "Section": _deserialize_section,
    "Block": _deserialize_block,
    "Paragraph": _deserialize_paragraph,
    "StemBlock": _deserialize_stem_block,
    "ImageBlock": _deserialize_image_block,
    "PassBlock": _deserialize_pass_block,
    "List": _deserialize_list,
    "ListItem": _deserialize_list_item,
    "Table": _deserialize_table,
    "TableCell": _deserialize_table_cell,
}


def dict_to_ast(data: dict[str, Any], strict_mode: bool = True) -> Node:
    """Convert a dictionary representation back to a node.

    Parameters
    ----------
    data : dict
        Dictionary representation of a node
    strict_mode : bool, default True
        If True, raise ValueError on unknown node types. If False, replace
        unknown nodes with an empty open block and log a warning.

    Returns
    -------
    Node
        Reconstructed node

    Raises
    ------
    ValueError
        If the dictionary has no or an unknown node type and strict_mode is True

    """
    node_type = data.get("node_type")
    deserializer = _DESERIALIZATION_DISPATCH.get(node_type) if node_type else None
    if deserializer is None:
        if strict_mode:
            raise ValueError(f"Unknown node type: {node_type}" if node_type else "Dictionary must contain 'node_type'")
        logger.warning("Unknown node type '%s', replacing with an empty block", node_type)
        return Block(context="open")

    return deserializer(data, strict_mode)


def ast_to_json(node: Node, indent: int | None = None) -> str:
    """Serialize a node to a JSON string with schema versioning.

    Parameters
    ----------
    node : Node
        The node to serialize
    indent : int or None, default = None
        Number of spaces for indentation (None for compact format)

    Returns
    -------
    str
        JSON string representation with schema version

    """
    versioned_dict = {"schema_version": SCHEMA_VERSION, **ast_to_dict(node)}
    return json.dumps(versioned_dict, indent=indent, ensure_ascii=False)


def json_to_ast(json_str: str, strict_mode: bool = True) -> Node:
    """Deserialize a JSON string to a node.

    JSON without a ``schema_version`` field is read as version 1.

    Parameters
    ----------
    json_str : str
        JSON string representation
    strict_mode : bool, default True
        If True, raise ValueError on unknown node types

    Returns
    -------
    Node
        Reconstructed node

    Raises
    ------
    ValueError
        If the schema version is unsupported or a node type is unknown
    json.JSONDecodeError
        If JSON string is malformed

    """
    data = json.loads(json_str)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

    schema_version = data.pop("schema_version", SCHEMA_VERSION)
    if schema_version != SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported schema version: {schema_version}. "
            f"This version of stemimg supports schema version {SCHEMA_VERSION} only."
        )

    return dict_to_ast(data, strict_mode=strict_mode)


__all__ = [
    "ast_to_dict",
    "dict_to_ast",
    "ast_to_json",
    "json_to_ast",
]
