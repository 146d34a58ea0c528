import os
from io import BytesIO
from typing import Optional

import structlog
from lxml import etree

from odtx.constants import CONTENT_ENTRY
from odtx.errors import ContentParseError, DocumentNotOpenError, InvalidArgumentError
from odtx.package import Source, create_blank, read_entry, rewrite_archive, write_replacing
from odtx.style import Style
from odtx.table import TABLE_TAG, Table
from odtx.text import PARAGRAPH_TAG, Paragraph
from odtx.utils.odf import append_child, find_child, insert_child_at, parse_xml, qn, serialize

logger = structlog.get_logger(__name__)


class Document:
    """
    An .odt file opened for editing.

    The views returned by paragraphs(), tables() and styles() are owned by the
    document and re-rooted on every call. Views returned by add_* methods
    belong to the caller. All of them become stale when open() is called
    again.
    """

    def __init__(self, source: Optional[Source] = None, content_entry: str = CONTENT_ENTRY):
        self.source = source
        self.content_entry = content_entry
        self.root = None
        self.paragraph = Paragraph()
        self.table = Table()
        self.style = Style()

    @classmethod
    def new(cls, path=None) -> "Document":
        """
        A document over an empty package. With a path, the package is first
        written there so save() works; otherwise it lives in memory.
        """
        data = create_blank()
        if path is None:
            source = BytesIO(data)
        else:
            with open(path, "wb") as f:
                f.write(data)
            source = path
        doc = cls(source)
        doc.open()
        return doc

    @property
    def path(self) -> Optional[str]:
        if self.source is None or hasattr(self.source, "read"):
            return None
        return os.fspath(self.source)

    @path.setter
    def path(self, value):
        self.source = value

    @property
    def is_open(self) -> bool:
        return self.root is not None

    def open(self):
        if self.source is None:
            raise InvalidArgumentError("Document has no path to open")

        data = read_entry(self.source, self.content_entry)
        try:
            self.root = parse_xml(data)
        except etree.XMLSyntaxError as e:
            logger.error(f"Invalid XML in {self.content_entry}", exc_info=True)
            raise ContentParseError(f"Invalid XML in {self.content_entry}: {e}") from e

        self.paragraph.set_parent(self._body())
        logger.info(f"Opened {self.source!r} ({len(data)} bytes of content)")

    def _body(self):
        # office:document-content / office:body / office:text
        if self.root is None or self.root.tag != qn("office:document-content"):
            return None
        return find_child(find_child(self.root, "office:body"), "office:text")

    def _automatic_styles(self):
        if self.root is None:
            return None
        container = find_child(self.root, "office:automatic-styles")
        body = find_child(self.root, "office:body")
        if container is None and body is not None:
            # The container is optional in content.xml but must precede the body
            container = insert_child_at(self.root, self.root.index(body), "office:automatic-styles")
            logger.debug("Created missing office:automatic-styles")
        return container

    def _require_body(self):
        if self.root is None:
            raise DocumentNotOpenError("Document is not open")
        body = self._body()
        if body is None:
            raise InvalidArgumentError("Document content has no office:body/office:text element")
        return body

    def paragraphs(self) -> Paragraph:
        self.paragraph.set_parent(self._body())
        return self.paragraph

    def tables(self) -> Table:
        self.table.set_parent(self._body())
        return self.table

    def styles(self) -> Style:
        self.style.set_parent(self._automatic_styles())
        return self.style

    def add_table(self, stylename: str) -> Table:
        body = self._require_body()
        new_table = append_child(body, TABLE_TAG, {"table:style-name": stylename})
        logger.debug(f"Added table ({stylename})")
        return Table(body, new_table)

    def add_paragraph(self, stylename: str) -> Paragraph:
        body = self._require_body()
        new_para = append_child(body, PARAGRAPH_TAG, {"text:style-name": stylename})
        logger.debug(f"Added paragraph ({stylename})")
        return Paragraph(body, new_para)

    def _serialized(self) -> dict:
        if self.root is None:
            raise DocumentNotOpenError("Document is not open")
        return {self.content_entry: serialize(self.root)}

    def save(self):
        """Rewrites the original file in place."""
        if self.path is None:
            raise InvalidArgumentError("Document was not opened from a path; use save_copy() or save_to_stream()")
        write_replacing(self.source, self.path, self._serialized())

    def save_copy(self, new_path):
        """Writes the edited document to new_path and leaves the original alone."""
        write_replacing(self.source, new_path, self._serialized())

    def save_to_stream(self) -> BytesIO:
        output = BytesIO()
        rewrite_archive(self.source, output, self._serialized())
        output.seek(0)
        return output
