from typing import Iterator

import structlog

from odtx.constants import (
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
    DEFAULT_PARAGRAPH_STYLE,
    DEFAULT_RUN_STYLE,
    MEDIA_PREFIX,
)
from odtx.errors import InvalidArgumentError
from odtx.utils.odf import (
    append_child,
    create_attribute,
    element_text,
    find_child,
    get_attribute,
    get_text,
    insert_child_after,
    next_sibling,
    remove_child,
    set_text,
)

logger = structlog.get_logger(__name__)

RUN_TAG = "text:span"
PARAGRAPH_TAG = "text:p"


def require_current(view, action: str):
    if view.current is None:
        raise InvalidArgumentError(f"Cannot {action}: {type(view).__name__} has no current element")


def _fill_text(element, text: str):
    """Text for a freshly created element; lxml refusing it is a caller error."""
    try:
        element.text = text
    except ValueError as e:
        element.getparent().remove(element)
        raise InvalidArgumentError(f"Text cannot be stored in XML: {e}") from e


def fill_paragraph(paragraph: "Paragraph", text: str, stylename: str = DEFAULT_RUN_STYLE) -> "Paragraph":
    """Gives a freshly created paragraph its run, or removes it again if the text is refused."""
    if not text:
        return paragraph
    try:
        paragraph.add_run(text, stylename)
    except InvalidArgumentError:
        remove_child(paragraph.parent, paragraph.current)
        raise
    return paragraph


class Run:
    """
    Cursor over the text:span elements of one paragraph.
    """

    def __init__(self, parent=None, current=None):
        self.set_parent(parent)
        if current is not None:
            self.set_current(current)

    def set_parent(self, node):
        self.parent = node
        self.current = find_child(node, RUN_TAG)

    def set_current(self, node):
        self.current = node

    def get_text(self) -> str:
        return get_text(self.current)

    def set_text(self, text: str) -> bool:
        return set_text(self.current, text)

    def get_style(self) -> str:
        return get_attribute(self.current, "text:style-name")

    def next(self) -> "Run":
        self.current = next_sibling(self.current, RUN_TAG)
        return self

    def has_next(self) -> bool:
        # True while the cursor points at an element, not "a successor exists"
        return self.current is not None

    def __iter__(self) -> Iterator["Run"]:
        node = self.current
        while node is not None:
            yield Run(self.parent, node)
            node = next_sibling(node, RUN_TAG)


class Paragraph:
    """
    Cursor over the text:p elements of a container (the body or a table cell).
    The owned Run view is re-rooted at the current paragraph whenever the
    cursor moves.
    """

    def __init__(self, parent=None, current=None):
        self.run = Run()
        self.set_parent(parent)
        if current is not None:
            self.set_current(current)

    def set_parent(self, node):
        self.parent = node
        self.current = find_child(node, PARAGRAPH_TAG)
        self.run.set_parent(self.current)

    def set_current(self, node):
        self.current = node
        self.run.set_parent(self.current)

    def next(self) -> "Paragraph":
        self.current = next_sibling(self.current, PARAGRAPH_TAG)
        self.run.set_parent(self.current)
        return self

    def has_next(self) -> bool:
        return self.current is not None

    def __iter__(self) -> Iterator["Paragraph"]:
        node = self.current
        while node is not None:
            yield Paragraph(self.parent, node)
            node = next_sibling(node, PARAGRAPH_TAG)

    def runs(self) -> Run:
        self.run.set_parent(self.current)
        return self.run

    def get_text(self) -> str:
        """Full visible text: direct paragraph text plus every span."""
        return element_text(self.current)

    def get_style(self) -> str:
        return get_attribute(self.current, "text:style-name")

    def add_run(self, text: str, stylename: str = DEFAULT_RUN_STYLE) -> Run:
        require_current(self, "add a run")
        new_run = append_child(self.current, RUN_TAG, {"text:style-name": stylename})
        _fill_text(new_run, text)
        logger.debug(f"Added run ({stylename}) with {len(text)} chars")
        return Run(self.current, new_run)

    def insert_paragraph_after(self, text: str, stylename: str = DEFAULT_PARAGRAPH_STYLE) -> "Paragraph":
        """
        Inserts an unstyled paragraph right after this one; stylename goes on
        its run. The returned view is bound to the same parent, so it can be
        iterated with next().
        """
        require_current(self, "insert a paragraph")
        if self.parent is None:
            raise InvalidArgumentError("Cannot insert a paragraph: Paragraph has no parent element")

        new_para = insert_child_after(self.parent, PARAGRAPH_TAG, self.current)
        return fill_paragraph(Paragraph(self.parent, new_para), text, stylename)

    def add_image(self, name: str, width: str = "", height: str = ""):
        """
        Appends an inline image frame pointing at media/<name>.
        Only width given: the frame is square. Nothing given: default size.
        """
        require_current(self, "add an image")
        if not name:
            raise InvalidArgumentError("Image name must not be empty")

        if width:
            height = height or width
        else:
            width, height = DEFAULT_IMAGE_WIDTH, DEFAULT_IMAGE_HEIGHT

        frame = append_child(
            self.current,
            "draw:frame",
            {
                "text:anchor-type": "as-char",
                "svg:width": width,
                "svg:height": height,
                "style:rel-width": "scale",
                "style:rel-height": "scale",
            },
        )
        append_child(
            frame,
            "draw:image",
            {
                "xlink:href": MEDIA_PREFIX + name,
                "xlink:type": "simple",
                "xlink:show": "embed",
                "xlink:actuate": "onLoad",
            },
        )
        logger.debug(f"Added image frame for {MEDIA_PREFIX}{name} ({width} x {height})")

    def set_style(self, name: str):
        require_current(self, "set a style")
        create_attribute(self.current, "text:style-name", name)

    def delete_par(self):
        if self.current is None or self.parent is None:
            return
        remove_child(self.parent, self.current)
        self.current = None
        self.run.set_parent(None)
