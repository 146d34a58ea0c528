from importlib.metadata import PackageNotFoundError, version

from odtx.document import Document
from odtx.errors import OdtError
from odtx.ingest import extract_text, extract_text_from_stream
from odtx.models import StyleCategory, StyleDefinition
from odtx.style import Style
from odtx.table import Table, TableCell, TableRow
from odtx.text import Paragraph, Run

try:
    __version__ = version("odtx")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source/dev)
    __version__ = "0.0.0-dev"

__all__ = [
    "Document",
    "Paragraph",
    "Run",
    "Table",
    "TableRow",
    "TableCell",
    "Style",
    "StyleCategory",
    "StyleDefinition",
    "OdtError",
    "extract_text",
    "extract_text_from_stream",
    "__version__",
]
