import io
from typing import Iterator, List

import structlog

from odtx.document import Document
from odtx.errors import OdtError
from odtx.table import Table
from odtx.utils.odf import element_text, qn

logger = structlog.get_logger(__name__)

_PARAGRAPH_TAGS = {qn("text:p"), qn("text:h")}
_LIST_TAG = qn("text:list")
_TABLE_TAG = qn("table:table")
_SECTION_TAG = qn("text:section")


def _iter_blocks(container) -> Iterator[str]:
    """
    Yields one string per block in document order. Paragraphs and tables are
    interleaved the way they appear, lists and sections are walked through.
    """
    for child in container:
        if child.tag in _PARAGRAPH_TAGS:
            yield element_text(child)
        elif child.tag == _TABLE_TAG:
            yield from _table_lines(Table(container, child))
        elif child.tag == _LIST_TAG:
            for item in child:
                yield from _iter_blocks(item)
        elif child.tag == _SECTION_TAG:
            yield from _iter_blocks(child)


def _table_lines(table: Table) -> List[str]:
    lines = []
    for row in table.rows():
        cells = row.cells()
        parts = [cell.get_text() for cell in cells]
        parts = [p for p in parts if p]
        if parts:
            lines.append(" | ".join(parts))
    return lines


def extract_text(doc: Document) -> str:
    body = doc.paragraphs().parent
    if body is None:
        return ""
    return "\n\n".join(_iter_blocks(body))


def extract_text_from_stream(file_stream: io.BytesIO, filename: str = "document.odt") -> str:
    """
    Plain text of an .odt stream: paragraphs separated by blank lines, table
    rows rendered as 'cell | cell'.
    """
    try:
        doc = Document(file_stream)
        doc.open()
        return extract_text(doc)
    except OdtError as e:
        logger.error(f"Text extraction failed for {filename}: {e}", exc_info=True)
        raise ValueError(f"Could not extract text from {filename}: {str(e)}") from e
