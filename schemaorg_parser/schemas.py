"""
Pydantic schemas shared by the builder, the listeners and the CLI.

Format: which authoring convention produced an item or item type
ItemType: one item-type discovery (name + format)
ExtractionResult: what the default listener hands back after a parse

Items themselves are not modelled here: both formats are normalized to
plain JSON values (dict / list / str) so they can be dumped as-is.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Format(str, Enum):
    """Formats that can carry schema.org annotations."""
    JSONLD = "jsonld"          # JSON inside <script type="application/ld+json">
    MICRODATA = "microdata"    # itemscope / itemtype / itemprop attributes
    RDFA = "rdfa"              # Attribute based like microdata; reserved, never emitted
    NONE = "none"              # No annotation


class ItemType(BaseModel):
    """An item type discovered while parsing."""
    name: str
    format: Format


class ExtractionResult(BaseModel):
    """Aggregated output of one parse, as collected by DefaultListener."""
    items: list[Any] = Field(default_factory=list)           # Top-level items in closing order
    itemtypes: list[ItemType] = Field(default_factory=list)  # Every discovery, document order
    total_itemtypes: int = 0
    finished: bool = False
