from typing import Iterator, Mapping, Sequence, Tuple, Union

import structlog

from odtx.constants import PARAGRAPH_PARENT_STYLE, RUN_PARENT_STYLE
from odtx.errors import InvalidArgumentError
from odtx.models import StyleCategory, StyleDefinition
from odtx.utils.odf import (
    append_child,
    create_attribute,
    find_child,
    get_attribute,
    next_sibling,
)

logger = structlog.get_logger(__name__)

STYLE_TAG = "style:style"

# category -> (style:family, properties element, style:parent-style-name)
_FAMILIES = {
    StyleCategory.TABLE: ("table", "style:table-properties", None),
    StyleCategory.COLUMN: ("table-column", "style:table-column-properties", None),
    StyleCategory.ROW: ("table-row", "style:table-row-properties", None),
    StyleCategory.CELL: ("table-cell", "style:table-cell-properties", None),
    StyleCategory.PARAGRAPH: ("paragraph", "style:paragraph-properties", PARAGRAPH_PARENT_STYLE),
    StyleCategory.RUN: ("text", "style:text-properties", RUN_PARENT_STYLE),
}

Attributes = Union[Sequence[Tuple[str, str]], Mapping[str, str]]


class Style:
    """
    Cursor over the style:style definitions of office:automatic-styles.
    """

    def __init__(self, parent=None, current=None):
        self.set_parent(parent)
        if current is not None:
            self.set_current(current)

    def set_parent(self, node):
        self.parent = node
        self.current = find_child(node, STYLE_TAG)

    def set_current(self, node):
        self.current = node

    def get_name(self) -> str:
        return get_attribute(self.current, "style:name")

    def get_family(self) -> str:
        return get_attribute(self.current, "style:family")

    def add_style(self, name: str, category: Union[StyleCategory, str], attributes: Attributes = ()) -> "Style":
        """
        Appends a style definition. The category picks style:family and the
        properties element; attributes land on that properties element in
        order, so a repeated key keeps its last value.
        """
        if self.parent is None:
            raise InvalidArgumentError("Cannot add a style: no automatic-styles container")
        if not name:
            raise InvalidArgumentError("Style name must not be empty")
        try:
            family, properties_tag, parent_style = _FAMILIES[StyleCategory(category)]
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown style category: {category!r}") from e

        attributes = list(attributes.items()) if isinstance(attributes, Mapping) else list(attributes)
        try:
            # dict() keeps the last value of a repeated key
            properties = dict(attributes)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Style attributes must be (name, value) pairs: {e}") from e

        new_style = append_child(self.parent, STYLE_TAG, {"style:name": name, "style:family": family})
        if parent_style is not None:
            create_attribute(new_style, "style:parent-style-name", parent_style)
        try:
            append_child(new_style, properties_tag, properties)
        except InvalidArgumentError:
            # Unknown prefix: leave no half-written style behind
            self.parent.remove(new_style)
            raise

        logger.debug(f"Added {family} style '{name}' with {len(attributes)} properties")
        return Style(self.parent, new_style)

    def add_definition(self, definition: StyleDefinition) -> "Style":
        return self.add_style(definition.name, definition.category, definition.properties)

    def next(self) -> "Style":
        self.current = next_sibling(self.current, STYLE_TAG)
        return self

    def has_next(self) -> bool:
        return self.current is not None

    def __iter__(self) -> Iterator["Style"]:
        node = self.current
        while node is not None:
            yield Style(self.parent, node)
            node = next_sibling(node, STYLE_TAG)
