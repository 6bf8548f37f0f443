#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for MathOptions."""

import logging

import pytest

from stemimg.ast import Document
from stemimg.exceptions import ValidationError
from stemimg.options import MathOptions, normalize_format, parse_ppi


@pytest.mark.unit
class TestMathOptionsDefaults:
    """Tests for default values and validation."""

    def test_defaults(self):
        options = MathOptions()

        assert options.format == "png"
        assert options.ppi == 300.0
        assert options.inline is False
        assert options.resolution == 300.0

    def test_svg_resolution_is_fixed(self):
        """svg always renders at 72 ppi."""
        assert MathOptions(format="svg", ppi=150.0).resolution == 72.0

    def test_invalid_format_rejected_on_construction(self):
        with pytest.raises(ValidationError):
            MathOptions(format="jpg")

    @pytest.mark.parametrize("ppi", [0.0, -1.0])
    def test_non_positive_ppi_rejected(self, ppi):
        with pytest.raises(ValidationError):
            MathOptions(ppi=ppi)

    def test_svg_accepts_any_ppi(self):
        assert MathOptions(format="svg", ppi=0.0).resolution == 72.0

    def test_options_are_frozen(self):
        options = MathOptions()
        with pytest.raises(AttributeError):
            options.format = "svg"  # type: ignore[misc]

    def test_create_updated(self):
        """create_updated returns a modified copy."""
        options = MathOptions()
        updated = options.create_updated(format="svg")

        assert updated.format == "svg"
        assert options.format == "png"


@pytest.mark.unit
class TestFromDocument:
    """Tests for reading options from document attributes."""

    def test_reads_attributes(self):
        doc = Document(
            attributes={"mathematical-format": "svg", "mathematical-ppi": "150", "mathematical-inline": ""}
        )

        options = MathOptions.from_document(doc)

        assert options.format == "svg"
        assert options.ppi == 150.0
        assert options.inline is True
        assert options.resolution == 72.0

    def test_unknown_format_falls_back_to_png(self, caplog):
        """jpg falls back to png with a warning and keeps the configured ppi."""
        doc = Document(attributes={"mathematical-format": "jpg", "mathematical-ppi": "200"})

        with caplog.at_level(logging.WARNING):
            options = MathOptions.from_document(doc)

        assert options.format == "png"
        assert options.resolution == 200.0
        assert "Unknown format 'jpg'" in caplog.text

    def test_unknown_format_uses_default_ppi(self):
        options = MathOptions.from_document(Document(attributes={"mathematical-format": "gif"}))

        assert options.format == "png"
        assert options.resolution == 300.0

    def test_inline_with_png_warns_and_proceeds(self, caplog):
        doc = Document(attributes={"mathematical-inline": ""})

        with caplog.at_level(logging.WARNING):
            options = MathOptions.from_document(doc)

        assert options.inline is True
        assert options.format == "png"
        assert "mathematical-inline" in caplog.text

    def test_invalid_ppi_raises(self):
        doc = Document(attributes={"mathematical-ppi": "high"})

        with pytest.raises(ValidationError) as exc_info:
            MathOptions.from_document(doc)

        assert exc_info.value.parameter_name == "mathematical-ppi"

    @pytest.mark.parametrize("ppi", ["0", "-5", "high"])
    def test_svg_ignores_invalid_ppi(self, ppi):
        doc = Document(attributes={"mathematical-format": "svg", "mathematical-ppi": ppi})

        options = MathOptions.from_document(doc)

        assert options.format == "svg"
        assert options.ppi == 300.0
        assert options.resolution == 72.0

    def test_invalid_ppi_still_raises_after_png_fallback(self):
        doc = Document(attributes={"mathematical-format": "jpg", "mathematical-ppi": "0"})

        with pytest.raises(ValidationError):
            MathOptions.from_document(doc)

    def test_overrides_take_precedence(self):
        doc = Document(attributes={"mathematical-format": "svg", "mathematical-ppi": "100"})

        options = MathOptions.from_document(doc, format="png", ppi=None, inline=None)

        assert options.format == "png"
        assert options.ppi == 100.0
        assert options.inline is False

    def test_nested_document_inherits_attributes(self):
        """A cell document reads options from its parent document."""
        from stemimg.ast import Table, TableCell

        inner = Document()
        Document(
            children=[Table(body=[[TableCell(style="asciidoc", inner_document=inner)]])],
            attributes={"mathematical-format": "svg"},
        )

        assert MathOptions.from_document(inner).format == "svg"


@pytest.mark.unit
class TestHelpers:
    """Tests for the value parsers."""

    @pytest.mark.parametrize("value,expected", [(None, "png"), ("SVG", "svg"), (" png ", "png"), ("tiff", "png")])
    def test_normalize_format(self, value, expected):
        assert normalize_format(value) == expected

    @pytest.mark.parametrize("value,expected", [(None, 300.0), ("72", 72.0), (96, 96.0), ("300.5", 300.5)])
    def test_parse_ppi(self, value, expected):
        assert parse_ppi(value) == expected

    @pytest.mark.parametrize("value", ["abc", "0", "-5", ""])
    def test_parse_ppi_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_ppi(value)
