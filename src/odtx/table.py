from typing import Iterator, Optional, Sequence

import structlog

from odtx.errors import InvalidArgumentError
from odtx.text import PARAGRAPH_TAG, Paragraph, fill_paragraph, require_current
from odtx.utils.odf import (
    append_child,
    find_child,
    get_attribute,
    insert_child_at,
    iter_children,
    next_sibling,
    remove_child,
)

logger = structlog.get_logger(__name__)

TABLE_TAG = "table:table"
ROW_TAG = "table:table-row"
CELL_TAG = "table:table-cell"
COVERED_CELL_TAG = "table:covered-table-cell"
COLUMNS_TAG = "table:table-columns"
COLUMN_TAG = "table:table-column"

# Children of table:table that must come after every column declaration
_ROW_LEVEL_TAGS = (
    ROW_TAG,
    "table:table-header-rows",
    "table:table-rows",
    "table:table-row-group",
)


def _span(element, name: str) -> int:
    try:
        return int(get_attribute(element, name, "1"))
    except ValueError:
        return 1


class TableCell:
    def __init__(self, parent=None, current=None):
        self.paragraph = Paragraph()
        self.set_parent(parent)
        if current is not None:
            self.set_current(current)

    def set_parent(self, node):
        self.parent = node
        self.current = find_child(node, CELL_TAG)
        self.paragraph.set_parent(self.current)

    def set_current(self, node):
        self.current = node
        self.paragraph.set_parent(self.current)

    def paragraphs(self) -> Paragraph:
        self.paragraph.set_parent(self.current)
        return self.paragraph

    def add_paragraph(self, text: str, stylename: Optional[str] = None) -> Paragraph:
        require_current(self, "add a paragraph")
        attributes = {"text:style-name": stylename} if stylename else None
        new_para = append_child(self.current, PARAGRAPH_TAG, attributes)
        return fill_paragraph(Paragraph(self.current, new_para), text)

    def get_text(self) -> str:
        return "\n".join(p.get_text() for p in Paragraph(self.current))

    def column_span(self) -> int:
        return _span(self.current, "table:number-columns-spanned")

    def row_span(self) -> int:
        return _span(self.current, "table:number-rows-spanned")

    def next(self) -> "TableCell":
        # Covered cells are placeholders, not cells: next_sibling skips them
        self.current = next_sibling(self.current, CELL_TAG)
        self.paragraph.set_parent(self.current)
        return self

    def has_next(self) -> bool:
        return self.current is not None

    def __iter__(self) -> Iterator["TableCell"]:
        node = self.current
        while node is not None:
            yield TableCell(self.parent, node)
            node = next_sibling(node, CELL_TAG)


class TableRow:
    def __init__(self, parent=None, current=None):
        self.cell = TableCell()
        self.set_parent(parent)
        if current is not None:
            self.set_current(current)

    def set_parent(self, node):
        self.parent = node
        self.current = find_child(node, ROW_TAG)
        self.cell.set_parent(self.current)

    def set_current(self, node):
        self.current = node
        self.cell.set_parent(self.current)

    def cells(self) -> TableCell:
        self.cell.set_parent(self.current)
        return self.cell

    def add_cell(self, cellstyle: str, parstyle: Optional[str] = None) -> TableCell:
        """
        Appends a cell styled cellstyle. With parstyle, the cell also gets an
        empty paragraph carrying that style.
        """
        require_current(self, "add a cell")
        new_cell = append_child(self.current, CELL_TAG, {"table:style-name": cellstyle})
        if parstyle is not None:
            append_child(new_cell, PARAGRAPH_TAG, {"text:style-name": parstyle})
        return TableCell(self.current, new_cell)

    def add_covered_cell(self):
        require_current(self, "add a covered cell")
        append_child(self.current, COVERED_CELL_TAG)

    def add_united_cell(self, cellstyle: str, parstyle: str, columns: int, rows: int = 1) -> TableCell:
        """
        Appends a merged cell spanning columns x rows, followed by the
        columns - 1 covered cells it consumes in this row.
        """
        for label, value in (("columns", columns), ("rows", rows)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidArgumentError(f"United cell {label} must be a positive integer, got {value!r}")
        require_current(self, "add a united cell")

        attributes = {
            "table:style-name": cellstyle,
            "table:number-columns-spanned": str(columns),
        }
        if rows > 1:
            attributes["table:number-rows-spanned"] = str(rows)

        new_cell = append_child(self.current, CELL_TAG, attributes)
        append_child(new_cell, PARAGRAPH_TAG, {"text:style-name": parstyle})
        for _ in range(columns - 1):
            append_child(self.current, COVERED_CELL_TAG)

        logger.debug(f"Added united cell spanning {columns} columns x {rows} rows")
        return TableCell(self.current, new_cell)

    def delete_row(self):
        if self.current is None or self.parent is None:
            return
        remove_child(self.parent, self.current)
        self.current = None
        self.cell.set_parent(None)

    def next(self) -> "TableRow":
        self.current = next_sibling(self.current, ROW_TAG)
        self.cell.set_parent(self.current)
        return self

    def has_next(self) -> bool:
        return self.current is not None

    def __iter__(self) -> Iterator["TableRow"]:
        node = self.current
        while node is not None:
            yield TableRow(self.parent, node)
            node = next_sibling(node, ROW_TAG)


class Table:
    def __init__(self, parent=None, current=None):
        self.row = TableRow()
        self.set_parent(parent)
        if current is not None:
            self.set_current(current)

    def set_parent(self, node):
        self.parent = node
        self.current = find_child(node, TABLE_TAG)
        self.row.set_parent(self.current)

    def set_current(self, node):
        self.current = node
        self.row.set_parent(self.current)

    def rows(self) -> TableRow:
        self.row.set_parent(self.current)
        return self.row

    def get_name(self) -> str:
        return get_attribute(self.current, "table:name")

    def add_row(self, stylename: str) -> TableRow:
        require_current(self, "add a row")
        new_row = append_child(self.current, ROW_TAG, {"table:style-name": stylename})
        return TableRow(self.current, new_row)

    def add_column(self, stylenames: Sequence[str]):
        """
        Declares one column per style name. The declarations are placed ahead
        of the rows, where the table schema expects them.
        """
        if isinstance(stylenames, str):
            raise InvalidArgumentError("add_column expects a sequence of style names, not a string")
        stylenames = list(stylenames)
        if not stylenames:
            raise InvalidArgumentError("add_column needs at least one column style")
        require_current(self, "add columns")

        first_row = next(iter_children(self.current, *_ROW_LEVEL_TAGS), None)
        position = len(self.current) if first_row is None else self.current.index(first_row)

        columns = insert_child_at(self.current, position, COLUMNS_TAG)
        for name in stylenames:
            append_child(columns, COLUMN_TAG, {"table:style-name": name})
        logger.debug(f"Declared {len(stylenames)} columns")

    def next(self) -> "Table":
        self.current = next_sibling(self.current, TABLE_TAG)
        self.row.set_parent(self.current)
        return self

    def has_next(self) -> bool:
        return self.current is not None

    def __iter__(self) -> Iterator["Table"]:
        node = self.current
        while node is not None:
            yield Table(self.parent, node)
            node = next_sibling(node, TABLE_TAG)
