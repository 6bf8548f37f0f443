#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/utils/artifacts.py
"""Artifact naming and persistence for rendered equations.

Rendered equations are either written to disk as image files with
deterministic names, or turned into markup that embeds the image directly in
the document. This module owns both paths.

Artifact ids are derived from the *wrapped* equation source (``$...$`` for
inline occurrences, ``$$...$$`` for blocks) so the same equation typed inline
and as a block yields two distinct files, while repeated occurrences of one
equation share a single file.

"""

from __future__ import annotations

import base64
import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from stemimg.constants import (
    ARTIFACT_ID_PREFIX,
    ATTR_IMAGESDIR,
    ATTR_IMAGESOUTDIR,
    ATTR_OUTDIR,
    OPTION_TO_DIR,
)
from stemimg.exceptions import OutputWriteError

if TYPE_CHECKING:
    from stemimg.ast.nodes import Node
    from stemimg.renderers.equation import RenderResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactRecord:
    """An equation image written to disk.

    Parameters
    ----------
    id : str
        Artifact id (explicit node id or ``stem-<md5>``)
    path : Path
        Full path of the written file
    width : int
        Intended width in pixels
    height : int
        Intended height in pixels

    """

    id: str
    path: Path
    width: int
    height: int

    @property
    def target(self) -> str:
        """Return the path as used in image targets."""
        return str(self.path)


@dataclass(frozen=True)
class EmbeddedArtifact:
    """An equation image embedded as markup instead of a file.

    Parameters
    ----------
    payload : str
        Markup that displays the equation (an ``<svg>`` element or an ``<img>``
        element with a data URI)
    width : int
        Intended width in pixels
    height : int
        Intended height in pixels

    """

    payload: str
    width: int
    height: int


def normalize_system_path(target: Union[str, Path, None], start: Union[str, Path]) -> Path:
    """Resolve a filesystem path against a start directory.

    Absolute targets are kept (after normalization); relative targets and an
    empty target resolve against ``start``.

    Parameters
    ----------
    target : str, Path or None
        Path to resolve
    start : str or Path
        Directory that relative targets are resolved against

    Returns
    -------
    Path
        Normalized path

    """
    start_path = Path(start).expanduser()
    if target is None or str(target) == "":
        path = start_path
    else:
        path = Path(target).expanduser()
        if not path.is_absolute():
            path = start_path / path
    return Path(os.path.normpath(path))


class ArtifactStore:
    """Resolve output locations and write rendered equation images.

    Parameters
    ----------
    format : str
        Output format (``png`` or ``svg``), also used as file extension

    """

    def __init__(self, format: str):
        """Initialize the store for one output format."""
        self.format = format

    def resolve_output_dir(self, parent: Node) -> Path:
        """Return the directory artifacts for nodes under ``parent`` go to.

        ``imagesoutdir`` wins when set. Otherwise ``imagesdir`` is resolved
        against ``outdir`` or, failing that, the document's ``to_dir`` option.
        Relative results are resolved against the document base directory.

        Parameters
        ----------
        parent : Node
            The node owning the equation (its attributes and document are read)

        Returns
        -------
        Path
            Output directory

        """
        document = parent.document
        base_dir = document.base_dir

        images_out_dir = parent.attr(ATTR_IMAGESOUTDIR)
        if images_out_dir:
            return normalize_system_path(images_out_dir, base_dir)

        out_dir = parent.attr(ATTR_OUTDIR) or document.option(OPTION_TO_DIR)
        start = normalize_system_path(out_dir, base_dir) if out_dir else base_dir
        return normalize_system_path(parent.attr(ATTR_IMAGESDIR), start)

    @staticmethod
    def artifact_id(wrapped: str, explicit_id: Optional[str] = None) -> str:
        """Return the artifact id for a wrapped equation.

        Parameters
        ----------
        wrapped : str
            Equation source including its ``$`` or ``$$`` delimiters
        explicit_id : str, optional
            Node id; used verbatim when given

        Returns
        -------
        str
            ``explicit_id`` or ``stem-`` followed by the MD5 hex digest

        """
        if explicit_id:
            return explicit_id
        digest = hashlib.md5(wrapped.encode("utf-8"), usedforsecurity=False).hexdigest()
        return f"{ARTIFACT_ID_PREFIX}{digest}"

    def store(
        self,
        result: RenderResult,
        parent: Node,
        wrapped: str,
        explicit_id: Optional[str] = None,
    ) -> ArtifactRecord:
        """Write a rendered equation to ``<output dir>/<id>.<format>``.

        Existing files are overwritten.

        Raises
        ------
        OutputWriteError
            If the directory cannot be created or the file cannot be written

        """
        output_dir = self.resolve_output_dir(parent)
        artifact_id = self.artifact_id(wrapped, explicit_id)
        path = output_dir / f"{artifact_id}.{self.format}"

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputWriteError(
                str(output_dir), message=f"Failed to create image output directory: {output_dir}", original_error=e
            ) from e

        try:
            path.write_bytes(result.data)
        except OSError as e:
            raise OutputWriteError(str(path), original_error=e) from e

        logger.debug("Wrote %s (%dx%d)", path, result.width, result.height)
        return ArtifactRecord(id=artifact_id, path=path, width=result.width, height=result.height)

    def embed(self, result: RenderResult) -> EmbeddedArtifact:
        """Turn a rendered equation into markup for inline embedding.

        SVG output is embedded as the ``<svg>`` element itself, without any
        XML prolog or doctype. PNG output becomes an ``<img>`` element with a
        base64 data URI instead of the raw image bytes, which text markup
        cannot carry.

        """
        if self.format == "svg":
            markup = result.data.decode("utf-8")
            start = markup.find("<svg")
            payload = markup[start:] if start >= 0 else markup
            payload = payload.strip()
        else:
            encoded = base64.b64encode(result.data).decode("ascii")
            payload = (
                f'<img src="data:image/{self.format};base64,{encoded}" '
                f'width="{result.width}" height="{result.height}">'
            )
        return EmbeddedArtifact(payload=payload, width=result.width, height=result.height)


__all__ = [
    "ArtifactRecord",
    "ArtifactStore",
    "EmbeddedArtifact",
    "normalize_system_path",
]
