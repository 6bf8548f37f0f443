#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/api.py
"""Public entry points for the STEM image pass.

Use :func:`process_document` on a tree that is already in memory and
:func:`process_json_file` on a tree stored as JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from stemimg.ast.nodes import Document
from stemimg.ast.serialization import ast_to_json, json_to_ast
from stemimg.constants import OPTION_BASE_DIR, SUPPORTED_BACKENDS
from stemimg.exceptions import FileError, ValidationError
from stemimg.renderers.engine import EngineFactory
from stemimg.transforms.stem import ProcessingReport, StemProcessor

logger = logging.getLogger(__name__)


def is_supported_backend(document: Document) -> bool:
    """Return whether the document's backend is one the pass is meant for.

    Only ``pdf`` output lacks native math typesetting, so only that backend
    is supported. :func:`process_document` does not check this.
    """
    return document.resolve_backend() in SUPPORTED_BACKENDS


def process_document(
    document: Document,
    *,
    engine_factory: Optional[EngineFactory] = None,
    format: Optional[str] = None,
    ppi: Optional[float] = None,
    inline: Optional[bool] = None,
    font_size: Optional[float] = None,
) -> ProcessingReport:
    """Replace every equation in a document with a rendered image, in place.

    Parameters
    ----------
    document : Document
        Document tree to rewrite
    engine_factory : callable, optional
        Builds the math engine from a document's options (default: matplotlib)
    format : {"png", "svg"}, optional
        Overrides the ``mathematical-format`` attribute
    ppi : float, optional
        Overrides the ``mathematical-ppi`` attribute
    inline : bool, optional
        Overrides the ``mathematical-inline`` attribute
    font_size : float, optional
        Typesetting font size in points

    Returns
    -------
    ProcessingReport
        Written and embedded artifacts, including those of nested documents

    Raises
    ------
    ValidationError
        If an option value is invalid
    RenderingError
        If an equation cannot be rendered or written
    DependencyError
        If the math engine's dependencies are missing

    Examples
    --------
        >>> report = process_document(doc, format="svg")
        >>> report.paths
        ['/project/build/images/stem-0f3c...svg']

    """
    overrides = {"format": format, "ppi": ppi, "inline": inline, "font_size": font_size}
    processor = StemProcessor(engine_factory=engine_factory, option_overrides=overrides)
    return processor.process(document)


def load_document(input_path: Union[str, Path]) -> Document:
    """Load a document tree from a JSON file.

    The document's ``base_dir`` option defaults to the file's directory.

    Raises
    ------
    FileError
        If the file cannot be read
    ValidationError
        If the file is not a valid serialized document

    """
    path = Path(input_path)
    try:
        json_str = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FileError(f"Cannot read input file: {path}", file_path=str(path), original_error=e) from e

    try:
        node = json_to_ast(json_str)
    except (json.JSONDecodeError, ValueError, KeyError, TypeError) as e:
        raise ValidationError(f"Invalid document JSON in {path}: {e}", parameter_name="input", original_error=e) from e

    if not isinstance(node, Document):
        raise ValidationError(
            f"Expected a Document at the root of {path}, got {type(node).__name__}", parameter_name="input"
        )

    node.options.setdefault(OPTION_BASE_DIR, str(path.resolve().parent))
    return node


def save_document(document: Document, output_path: Union[str, Path], indent: Optional[int] = 2) -> None:
    """Write a document tree to a JSON file.

    Raises
    ------
    FileError
        If the file cannot be written

    """
    path = Path(output_path)
    try:
        path.write_text(ast_to_json(document, indent=indent) + "\n", encoding="utf-8")
    except OSError as e:
        raise FileError(f"Cannot write output file: {path}", file_path=str(path), original_error=e) from e


def process_json_file(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    *,
    attributes: Optional[dict[str, Any]] = None,
    options: Optional[dict[str, Any]] = None,
    backend: Optional[str] = None,
    engine_factory: Optional[EngineFactory] = None,
    **option_overrides: Any,
) -> tuple[Document, ProcessingReport]:
    """Load a JSON document tree, run the pass and optionally save the result.

    Parameters
    ----------
    input_path : str or Path
        JSON file produced by :func:`stemimg.ast.serialization.ast_to_json`
    output_path : str or Path, optional
        Where to write the rewritten tree; nothing is written when omitted
    attributes : dict, optional
        Document attributes to set before processing (they replace the
        document's own values)
    options : dict, optional
        Document options (``to_dir``, ``base_dir``) to set before processing
    backend : str, optional
        Backend to set on the document
    engine_factory : callable, optional
        Builds the math engine from a document's options
    **option_overrides
        ``format``, ``ppi``, ``inline`` or ``font_size``, as for
        :func:`process_document`

    Returns
    -------
    tuple of (Document, ProcessingReport)
        The rewritten tree and the pass report

    """
    document = load_document(input_path)
    if attributes:
        document.attributes.update(attributes)
    if options:
        document.options.update(options)
    if backend:
        document.backend = backend

    report = process_document(document, engine_factory=engine_factory, **option_overrides)

    if output_path is not None:
        save_document(document, output_path)
        logger.info("Wrote %s", output_path)

    return document, report


__all__ = [
    "is_supported_backend",
    "load_document",
    "process_document",
    "process_json_file",
    "save_document",
]
