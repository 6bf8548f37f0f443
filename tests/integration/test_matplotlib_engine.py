#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Integration tests for the matplotlib mathtext engine."""

import pytest

pytest.importorskip("matplotlib")

from stemimg.api import process_document  # noqa: E402
from stemimg.ast import Document, ImageBlock, Paragraph, PassBlock, StemBlock, Table, TableCell  # noqa: E402
from stemimg.exceptions import RenderingError  # noqa: E402
from stemimg.options import MathOptions  # noqa: E402
from stemimg.renderers import EquationRenderer, MatplotlibMathEngine, default_engine_factory  # noqa: E402

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.mark.integration
class TestMatplotlibEngine:
    """Rendering real equations."""

    def test_png_output(self):
        engine = MatplotlibMathEngine(format="png", ppi=300.0, font_size=12.0)

        result = engine.parse("$$x^2 + y^2 = r^2$$")

        assert result.data.startswith(PNG_MAGIC)
        assert result.format == "png"
        assert result.width > 0
        assert result.height > 0

    def test_svg_output(self):
        engine = default_engine_factory(MathOptions(format="svg"))

        result = engine.parse(r"$\frac{a}{b}$")

        assert b"<svg" in result.data
        assert result.format == "svg"

    def test_size_does_not_depend_on_ppi(self):
        low = MatplotlibMathEngine(format="png", ppi=72.0, font_size=12.0).parse("$$e^{i\\pi}$$")
        high = MatplotlibMathEngine(format="png", ppi=300.0, font_size=12.0).parse("$$e^{i\\pi}$$")

        assert (low.width, low.height) == (high.width, high.height)
        assert len(high.data) > len(low.data)

    def test_font_size_scales_output(self):
        small = MatplotlibMathEngine(format="png", ppi=72.0, font_size=10.0).parse("$x$")
        large = MatplotlibMathEngine(format="png", ppi=72.0, font_size=30.0).parse("$x$")

        assert large.width > small.width

    def test_multiline_body_is_joined(self):
        engine = MatplotlibMathEngine(format="png", ppi=72.0, font_size=12.0)

        result = engine.parse("$$a +\nb$$")

        assert result.width > 0

    def test_invalid_equation_raises_rendering_error(self):
        options = MathOptions()
        renderer = EquationRenderer(default_engine_factory(options), options)

        with pytest.raises(RenderingError) as exc_info:
            renderer.render(r"\frac{", inline=False)

        assert exc_info.value.rendering_stage == "math"


@pytest.mark.integration
@pytest.mark.slow
class TestEndToEnd:
    """Full passes with the default engine."""

    def test_document_pass(self, tmp_path):
        cell = TableCell(style="asciidoc", inner_document=Document(children=[StemBlock(lines=["n!"])]))
        doc = Document(
            children=[
                StemBlock(lines=[r"\sum_{i=1}^{n} i"]),
                Paragraph(lines=["where stem:[n^2] grows"]),
                Table(body=[[cell]]),
            ],
            attributes={"imagesdir": "images"},
            options={"base_dir": str(tmp_path)},
            backend="pdf",
        )

        report = process_document(doc)

        assert isinstance(doc.children[0], ImageBlock)
        assert report.rendered == 3
        assert report.documents == 2
        for path in report.paths:
            with open(path, "rb") as f:
                assert f.read(8) == PNG_MAGIC
        assert all(p.startswith(str(tmp_path / "images")) for p in report.paths)

    def test_inline_svg_pass(self, tmp_path):
        doc = Document(
            children=[StemBlock(lines=["x"])],
            attributes={"mathematical-format": "svg", "mathematical-inline": ""},
            options={"base_dir": str(tmp_path)},
            backend="pdf",
        )

        report = process_document(doc)

        block = doc.children[0]
        assert isinstance(block, PassBlock)
        assert block.content.startswith('<div class="stemblock"> <svg')
        assert report.paths == []
        assert list(tmp_path.iterdir()) == []
