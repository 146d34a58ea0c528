import pytest
from pydantic import ValidationError

from odt_factory import SAMPLE_CONTENT, build_odt
from odtx.document import Document
from odtx.errors import InvalidArgumentError
from odtx.models import StyleCategory, StyleDefinition
from odtx.style import Style
from odtx.utils.odf import find_child, get_attribute, qn

def test_iterates_existing_styles(doc):
    names = [(s.get_name(), s.get_family()) for s in doc.styles()]
    assert names == [("P1", "paragraph"), ("T1", "text")]

def test_cursor_walk(doc):
    style = doc.styles()
    count = 0
    while style.has_next():
        count += 1
        style.next()
    assert count == 2

def test_add_run_style(doc):
    style = doc.styles().add_style("Bold", "run", [("fo:font-weight", "bold")])

    assert style.get_name() == "Bold"
    assert style.get_family() == "text"
    assert get_attribute(style.current, "style:parent-style-name") == "RegParText"
    props = find_child(style.current, "style:text-properties")
    assert get_attribute(props, "fo:font-weight") == "bold"

def test_add_paragraph_style_links_parent(doc):
    style = doc.styles().add_style("P9", StyleCategory.PARAGRAPH, [("fo:text-align", "center")])
    assert style.get_family() == "paragraph"
    assert get_attribute(style.current, "style:parent-style-name") == "RegPar"
    props = find_child(style.current, "style:paragraph-properties")
    assert get_attribute(props, "fo:text-align") == "center"

@pytest.mark.parametrize(
    "category, family, properties",
    [
        ("table", "table", "style:table-properties"),
        ("column", "table-column", "style:table-column-properties"),
        ("row", "table-row", "style:table-row-properties"),
        ("cell", "table-cell", "style:table-cell-properties"),
    ],
)
def test_table_categories(doc, category, family, properties):
    style = doc.styles().add_style("S", category, [])
    assert style.get_family() == family
    assert get_attribute(style.current, "style:parent-style-name", None) is None
    assert [child.tag for child in style.current] == [qn(properties)]

def test_repeated_keys_keep_last_value(doc):
    style = doc.styles().add_style(
        "Cell1", "cell", [("fo:padding", "0.1in"), ("fo:border", "none"), ("fo:padding", "0.2in")]
    )
    props = find_child(style.current, "style:table-cell-properties")
    assert get_attribute(props, "fo:padding") == "0.2in"
    assert get_attribute(props, "fo:border") == "none"

def test_mapping_attributes(doc):
    style = doc.styles().add_style("Col", "column", {"style:column-width": "1.5in"})
    props = find_child(style.current, "style:table-column-properties")
    assert get_attribute(props, "style:column-width") == "1.5in"

def test_new_style_is_visible_through_document(doc):
    doc.styles().add_style("Bold", "run", [("fo:font-weight", "bold")])
    assert [s.get_name() for s in doc.styles()] == ["P1", "T1", "Bold"]

def test_unknown_category(doc):
    with pytest.raises(InvalidArgumentError):
        doc.styles().add_style("X", "heading", [])

def test_unknown_prefix_leaves_nothing_behind(doc):
    with pytest.raises(InvalidArgumentError):
        doc.styles().add_style("X", "run", [("nope:weight", "bold")])
    assert [s.get_name() for s in doc.styles()] == ["P1", "T1"]

def test_add_style_needs_container():
    with pytest.raises(InvalidArgumentError):
        Style().add_style("X", "run", [])

def test_add_definition(doc):
    definition = StyleDefinition(name="Italic", category="run", properties=[("fo:font-style", "italic")])
    style = doc.styles().add_definition(definition)
    props = find_child(style.current, "style:text-properties")
    assert get_attribute(props, "fo:font-style") == "italic"

def test_definition_validation():
    with pytest.raises(ValidationError):
        StyleDefinition(name="", category="run")
    with pytest.raises(ValidationError):
        StyleDefinition(name="X", category="heading")

def test_malformed_attribute_pair_leaves_nothing_behind(doc):
    with pytest.raises(InvalidArgumentError):
        doc.styles().add_style("X", "run", [("fo:font-weight", "bold", "extra")])
    assert [s.get_name() for s in doc.styles()] == ["P1", "T1"]

def test_missing_container_is_created_before_body(tmp_path):
    content = SAMPLE_CONTENT.replace(
        SAMPLE_CONTENT[SAMPLE_CONTENT.index("<office:automatic-styles>"):SAMPLE_CONTENT.index("<office:body>")], ""
    )
    path = tmp_path / "unstyled.odt"
    path.write_bytes(build_odt(content))
    doc = Document(path)
    doc.open()

    assert not doc.styles().has_next()
    doc.styles().add_style("Bold", "run", [("fo:font-weight", "bold")])

    tags = [child.tag for child in doc.root]
    assert tags == [qn("office:automatic-styles"), qn("office:body")]
    assert [s.get_name() for s in doc.styles()] == ["Bold"]
