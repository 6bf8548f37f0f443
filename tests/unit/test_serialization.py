#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for JSON serialization of document trees."""

import json
import logging

import pytest

from stemimg.ast import (
    Block,
    Document,
    ImageBlock,
    List,
    ListItem,
    Paragraph,
    PassBlock,
    Section,
    StemBlock,
    Table,
    TableCell,
    ast_to_dict,
    ast_to_json,
    dict_to_ast,
    json_to_ast,
)


def build_sample_document():
    inner = Document(children=[StemBlock(lines=["n"])], attributes={"inner": "yes"})
    return Document(
        children=[
            Section(
                title="Intro stem:[x]",
                level=1,
                id="intro",
                children=[
                    StemBlock(lines=["a^2 + b^2"], id="pyth", title="Pythagoras", attributes={"alt": "theorem"}),
                    Paragraph(lines=["area is stem:[pi r^2]"]),
                    Block(context="sidebar", children=[Paragraph(lines=["aside"])]),
                    Block(context="literal", content_model="verbatim", lines=["raw"], subs=["specialcharacters"]),
                ],
            ),
            List(context="olist", items=[ListItem(text="one", children=[Paragraph(lines=["more"])])]),
            Table(
                head=[[TableCell(text="H")]],
                body=[[TableCell(text="stem:[b]"), TableCell(style="asciidoc", inner_document=inner)]],
                foot=[[TableCell(text="F", style="literal")]],
            ),
            ImageBlock(target="img/x.png", alt="$$x$$", align="center", width=20, height=10),
            PassBlock(content="<div>raw</div>"),
        ],
        attributes={"mathematical-format": "svg"},
        options={"to_dir": "out"},
        backend="pdf",
    )


@pytest.mark.unit
class TestAstToDict:
    """Tests for dictionary conversion."""

    def test_node_types_are_recorded(self):
        data = ast_to_dict(build_sample_document())

        assert data["node_type"] == "Document"
        assert data["backend"] == "pdf"
        assert data["options"] == {"to_dir": "out"}
        assert [child["node_type"] for child in data["children"]] == [
            "Section",
            "List",
            "Table",
            "ImageBlock",
            "PassBlock",
        ]

    def test_common_fields_only_when_set(self):
        data = ast_to_dict(StemBlock(lines=["x"], id="eq", attributes={"alt": "a"}))
        assert data == {
            "node_type": "StemBlock",
            "lines": ["x"],
            "style": "stem",
            "id": "eq",
            "attributes": {"alt": "a"},
        }

    def test_section_title_written_once(self):
        data = ast_to_dict(Section(title="T"))
        assert data["title"] == "T"
        assert "id" not in data

    def test_unknown_node_type(self):
        class Custom(Paragraph):
            pass

        with pytest.raises(ValueError, match="Unknown node type for serialization"):
            ast_to_dict(Custom())


@pytest.mark.unit
class TestDictToAst:
    """Tests for reconstruction from dictionaries."""

    def test_full_tree_survives(self):
        original = build_sample_document()

        restored = dict_to_ast(ast_to_dict(original))

        assert restored == original

    def test_parent_links_are_rebuilt(self):
        restored = dict_to_ast(ast_to_dict(build_sample_document()))

        section = restored.children[0]
        assert section.parent is restored
        assert section.children[0].parent is section
        cell = restored.children[2].body[0][1]
        assert cell.inner_document.parent is cell
        assert cell.inner_document.attr("mathematical-format") == "svg"

    def test_missing_node_type_strict(self):
        with pytest.raises(ValueError, match="must contain 'node_type'"):
            dict_to_ast({"lines": []})

    def test_unknown_node_type_strict(self):
        with pytest.raises(ValueError, match="Unknown node type: Video"):
            dict_to_ast({"node_type": "Video"})

    def test_unknown_node_type_lenient(self, caplog):
        data = {"node_type": "Document", "children": [{"node_type": "Video"}, {"node_type": "Paragraph"}]}

        with caplog.at_level(logging.WARNING):
            doc = dict_to_ast(data, strict_mode=False)

        assert doc.children[0].context == "open"
        assert doc.children[1].context == "paragraph"
        assert "Video" in caplog.text

    def test_paragraph_subs_default(self):
        para = dict_to_ast({"node_type": "Paragraph", "lines": ["x"]})
        assert "macros" in para.subs


@pytest.mark.unit
class TestJson:
    """Tests for the versioned JSON form."""

    def test_schema_version_is_written(self):
        data = json.loads(ast_to_json(Document()))
        assert data["schema_version"] == 1

    def test_non_ascii_is_kept(self):
        text = ast_to_json(Paragraph(lines=["stem:[α + β]"]))
        assert "α + β" in text

    def test_json_round_trip(self):
        original = build_sample_document()
        assert json_to_ast(ast_to_json(original, indent=2)) == original

    def test_missing_version_reads_as_current(self):
        doc = json_to_ast('{"node_type": "Document", "children": []}')
        assert isinstance(doc, Document)

    def test_unsupported_version(self):
        with pytest.raises(ValueError, match="Unsupported schema version: 2"):
            json_to_ast('{"schema_version": 2, "node_type": "Document"}')

    def test_non_object_json(self):
        with pytest.raises(ValueError, match="Expected a JSON object"):
            json_to_ast("[1, 2]")

    def test_malformed_json(self):
        with pytest.raises(json.JSONDecodeError):
            json_to_ast("{not json")
