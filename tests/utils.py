"""Test utilities for the stemimg test suite.

This module provides a deterministic stand-in for the math engine and helpers
for building documents and predicting artifact names.
"""

import base64
import hashlib
from html import escape
from pathlib import Path

from stemimg.ast import Document
from stemimg.renderers.equation import RenderResult

# Base64 encoded 1x1 pixel PNG for testing
MINIMAL_PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/w8AAn8B9FpQHLwAAAAASUVORK5CYII="
MINIMAL_PNG_BYTES = base64.b64decode(MINIMAL_PNG_B64)

FAKE_HEIGHT = 20


def fake_width(source: str) -> int:
    """Width the fake engine reports for a wrapped equation."""
    return 10 * len(source)


class FakeMathEngine:
    """Math engine that records its inputs and returns predictable output."""

    def __init__(self, format="png", ppi=300.0, fail_on=None):
        self.format = format
        self.ppi = ppi
        self.fail_on = fail_on
        self.sources = []

    def parse(self, source):
        self.sources.append(source)
        if self.fail_on is not None and self.fail_on in source:
            raise ValueError(f"Unknown symbol in {source}")

        if self.format == "svg":
            data = (
                '<?xml version="1.0" encoding="utf-8"?>\n'
                '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">\n'
                f'<svg xmlns="http://www.w3.org/2000/svg">{escape(source)}</svg>\n'
            ).encode("utf-8")
        else:
            data = MINIMAL_PNG_BYTES + source.encode("utf-8")
        return RenderResult(data=data, width=fake_width(source), height=FAKE_HEIGHT, format=self.format)


class FakeEngineFactory:
    """Engine factory that keeps every engine and options object it sees."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.engines = []
        self.options = []

    def __call__(self, options):
        engine = FakeMathEngine(format=options.format, ppi=options.resolution, fail_on=self.fail_on)
        self.engines.append(engine)
        self.options.append(options)
        return engine

    @property
    def sources(self):
        """All sources rendered, across documents, in order."""
        return [source for engine in self.engines for source in engine.sources]


def artifact_name(wrapped: str, format: str = "png") -> str:
    """Expected file name for a wrapped equation without explicit id."""
    return f"stem-{hashlib.md5(wrapped.encode('utf-8')).hexdigest()}.{format}"


def make_document(base_dir: Path, children=None, attributes=None, backend="pdf", **options) -> Document:
    """Build a document rooted at ``base_dir``."""
    return Document(
        children=list(children or []),
        attributes=dict(attributes or {}),
        options={"base_dir": str(base_dir), **options},
        backend=backend,
    )
