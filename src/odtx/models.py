from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, Field


class StyleCategory(str, Enum):
    TABLE = "table"
    COLUMN = "column"
    ROW = "row"
    CELL = "cell"
    PARAGRAPH = "paragraph"
    RUN = "run"


class StyleDefinition(BaseModel):
    """
    An automatic style to be written under office:automatic-styles.
    """
    name: str = Field(min_length=1)
    category: StyleCategory
    # Ordered (qualified attribute name, value) pairs for the properties element,
    # e.g. [("fo:font-weight", "bold")]
    properties: List[Tuple[str, str]] = Field(default_factory=list)
