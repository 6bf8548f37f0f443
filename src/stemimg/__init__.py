"""stemimg - Render the STEM equations of an AsciiDoc document tree to images.

stemimg post-processes an already-parsed AsciiDoc-style document tree for
output targets that cannot typeset math, such as PDF. Stem blocks and inline
``stem:``, ``latexmath:`` and ``asciimath:`` macros are rendered through
matplotlib's mathtext and replaced by image blocks, inline image macros or
embedded markup.

Document attributes
-------------------
- ``mathematical-format``: png (default) or svg
- ``mathematical-ppi``: png resolution, default 300
- ``mathematical-inline``: embed equations instead of writing files
- ``imagesdir``, ``imagesoutdir``, ``outdir``: where images are written

Examples
--------
    >>> from stemimg import process_document
    >>> from stemimg.ast import Document, StemBlock
    >>> doc = Document(children=[StemBlock(lines=["a^2 + b^2 = c^2"])], backend="pdf")
    >>> report = process_document(doc)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

__version__ = "0.1.0"

from stemimg.api import is_supported_backend, process_document, process_json_file  # noqa: E402
from stemimg.exceptions import (  # noqa: E402
    DependencyError,
    FileError,
    OutputWriteError,
    RenderingError,
    StemImgError,
    ValidationError,
)
from stemimg.options import MathOptions  # noqa: E402
from stemimg.transforms.stem import ProcessingReport, StemProcessor  # noqa: E402

__all__ = [
    "__version__",
    "DependencyError",
    "FileError",
    "MathOptions",
    "OutputWriteError",
    "ProcessingReport",
    "RenderingError",
    "StemImgError",
    "StemProcessor",
    "ValidationError",
    "is_supported_backend",
    "process_document",
    "process_json_file",
]
