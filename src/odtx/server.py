import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from mcp.server.fastmcp import FastMCP

# --- LOGGING CONFIGURATION ---
# Logs must go to stderr: stdout carries the MCP JSON-RPC stream.
logging.basicConfig(stream=sys.stderr, level=logging.INFO, force=True)

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)
# -----------------------------

from odtx.constants import DEFAULT_PARAGRAPH_STYLE  # noqa: E402
from odtx.document import Document  # noqa: E402
from odtx.ingest import extract_text  # noqa: E402
from odtx.models import StyleDefinition  # noqa: E402

mcp = FastMCP("ODT Editing Service")


def _open(path: str) -> Document:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {path}")
    doc = Document(p)
    doc.open()
    return doc


@mcp.tool()
def read_odt(file_path: str) -> str:
    """
    Reads a local .odt file and returns its text. Paragraphs are separated by
    blank lines and table rows are rendered as 'cell | cell'.
    """
    try:
        return extract_text(_open(file_path))
    except Exception as e:
        return f"Error reading file: {str(e)}"


@mcp.tool()
def append_paragraphs(
    file_path: str,
    paragraphs: List[str],
    output_path: str,
    style_name: str = DEFAULT_PARAGRAPH_STYLE,
) -> str:
    """
    Appends one paragraph per string to the end of the document body and
    saves to output_path, leaving the original unchanged.
    """
    try:
        doc = _open(file_path)
        for text in paragraphs:
            doc.add_paragraph(style_name).add_run(text)
        doc.save_copy(output_path)
        return f"Appended {len(paragraphs)} paragraphs. Saved to: {output_path}"
    except Exception as e:
        return f"Error appending paragraphs: {str(e)}"


@mcp.tool()
def append_table(
    file_path: str,
    rows: List[List[str]],
    output_path: str,
    table_style: str = "Table1",
    column_style: str = "Table1.A",
    row_style: str = "Table1.1",
    cell_style: str = "Table1.A1",
    paragraph_style: Optional[str] = None,
) -> str:
    """
    Appends a table built from a list of rows (each a list of cell texts) and
    saves to output_path. The column count is taken from the longest row;
    shorter rows are padded with empty cells.
    """
    try:
        if not rows:
            return "Error appending table: no rows given"
        width = max(len(r) for r in rows)
        if width == 0:
            return "Error appending table: rows have no cells"

        doc = _open(file_path)
        table = doc.add_table(table_style)
        table.add_column([column_style] * width)
        for values in rows:
            row = table.add_row(row_style)
            for i in range(width):
                text = values[i] if i < len(values) else ""
                row.add_cell(cell_style).add_paragraph(text, paragraph_style)
        doc.save_copy(output_path)
        return f"Appended a {len(rows)}x{width} table. Saved to: {output_path}"
    except Exception as e:
        return f"Error appending table: {str(e)}"


@mcp.tool()
def add_styles(file_path: str, styles: List[StyleDefinition], output_path: str) -> str:
    """
    Adds automatic styles (table, column, row, cell, paragraph or run) and
    saves to output_path. Example: a run style named 'Bold' with
    properties [["fo:font-weight", "bold"]].
    """
    try:
        doc = _open(file_path)
        for definition in styles:
            doc.styles().add_definition(definition)
        doc.save_copy(output_path)
        return f"Added {len(styles)} styles. Saved to: {output_path}"
    except Exception as e:
        return f"Error adding styles: {str(e)}"


if __name__ == "__main__":
    # Runs the server over stdio
    mcp.run()
