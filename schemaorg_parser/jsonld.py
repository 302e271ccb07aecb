"""
JSON-LD helpers: recognizing structured-data script blocks, parsing their
text, and walking the parsed value for declared item types.
"""

import json
from typing import Any, Iterator, Optional

from .exceptions import MalformedBlockError

# <script type="application/ld+json"> holds one JSON-LD document
SCRIPT_TAG = "script"
JSONLD_SCRIPT_TYPE = "application/ld+json"

# Reserved key declaring an object's type, matched case-insensitively
TYPE_KEY = "@type"


def is_jsonld_script(tag: str, script_type: Optional[str]) -> bool:
    """Check whether a start tag opens a JSON-LD block."""
    if tag.lower() != SCRIPT_TAG or script_type is None:
        return False
    return script_type.strip().lower() == JSONLD_SCRIPT_TYPE


def parse_block(text: str) -> Any:
    """
    Parse the contents of a JSON-LD block.

    Args:
        text: Raw text found between <script> and </script>

    Returns:
        The parsed JSON value

    Raises:
        MalformedBlockError: if the text is not valid JSON (empty blocks included)
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedBlockError(
            f"Invalid JSON-LD block: {e.msg}",
            text=text,
            details={"line": e.lineno, "column": e.colno}
        ) from e


def iter_itemtypes(value: Any) -> Iterator[str]:
    """
    Yield every type declared in a JSON-LD value, depth-first, in document order.

    "@type" entries are reported and not descended into; every other entry,
    and every array element, is walked recursively. A "@type" holding an
    array declares one type per string element.
    """
    if isinstance(value, dict):
        for key, child in value.items():
            if key.lower() == TYPE_KEY:
                yield from _declared_types(child)
            else:
                yield from iter_itemtypes(child)
    elif isinstance(value, list):
        for child in value:
            yield from iter_itemtypes(child)


def _declared_types(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, list):
        for name in value:
            if isinstance(name, str):
                yield name
