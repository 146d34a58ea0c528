import pytest
import structlog

from odt_factory import build_odt
from odtx.document import Document


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo CLI logging config so later tests don't write to a closed capture stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def odt_path(tmp_path):
    path = tmp_path / "sample.odt"
    path.write_bytes(build_odt())
    return path


@pytest.fixture
def doc(odt_path):
    document = Document(odt_path)
    document.open()
    return document


@pytest.fixture
def blank_doc():
    """An in-memory document with an empty body."""
    return Document.new()
