"""
Item tree builder: the event-driven core of the parser.

Consumes tag-open / tag-close / text events in document order and turns
schema.org annotations into JSON values. Both formats are normalized to
the same JSON shape; microdata follows the W3C microdata-to-JSON mapping
(http://www.w3.org/TR/microdata/#json):

    <div itemscope itemtype="http://schema.org/Person">
      <span itemprop="name">John Smith</span>
    </div>

    → {"type": ["Person"], "name": ["John Smith"]}

JSON-LD blocks are handed to listeners as parsed, one item per block.

State kept per document:
  _items    : items under construction, innermost last
  _tag_kinds: one TagKind per open tag; always as deep as the tag nesting
  _pending  : property waiting for the text of its tag (at most one)
  _buffer   : text captured for the pending property or the JSON-LD block
"""

from enum import Enum
from typing import Any, NamedTuple, Optional

from .schemas import Format
from .listener import Listener, ListenerDispatcher
from .jsonld import is_jsonld_script, parse_block, iter_itemtypes
from .exceptions import DocumentError, MalformedBlockError
from .logger import get_module_logger

logger = get_module_logger("handler")

# Microdata attributes
ITEMSCOPE_ATTRIBUTE = "itemscope"
ITEMTYPE_ATTRIBUTE = "itemtype"
ITEMPROP_ATTRIBUTE = "itemprop"

# Generic attributes
TYPE_ATTRIBUTE = "type"
CONTENT_ATTRIBUTE = "content"

# Key holding an item's type inside a microdata item
ITEM_TYPE_KEY = "type"

# Tags whose property value lives in an attribute rather than in their text.
# Any other tag uses its "content" attribute if present, else its text.
VALUE_ATTRIBUTES = {
    "a": "href",
    "area": "href",
    "link": "href",
    "img": "src",
    "time": "datetime",
    "iframe": "data",
    "embed": "data",
    "object": "data",
}


class TagKind(Enum):
    """What an open tag means to the builder."""
    STRUCTURED_BLOCK = "structured_block"  # <script type="application/ld+json">
    ITEM_SCOPE = "item_scope"              # itemscope + itemtype: opens an item
    PLAIN = "plain"                        # Everything else


class PendingProperty(NamedTuple):
    """A property whose value is the text of the tag that declared it."""
    name: str
    item: dict
    depth: int  # Tag nesting depth of the declaring tag


def short_type_name(itemtype: str) -> str:
    """Last non-empty path segment of an itemtype URL: http://schema.org/Person/ → Person."""
    return itemtype.rstrip("/").split("/")[-1]


def property_value(tag: str, attrs: dict) -> Optional[str]:
    """
    Resolve a property value from the tag's attributes.

    Returns None when the value has to be read from the tag's text instead.
    A URL-like tag missing its attribute yields the empty string.
    """
    attribute = VALUE_ATTRIBUTES.get(tag)
    if attribute is not None:
        return attrs.get(attribute) or ""
    return attrs.get(CONTENT_ATTRIBUTE)


def add_property(item: dict, name: str, value: Any) -> None:
    """Append a value to an item's property, keeping repeated values in order."""
    values = item.get(name)
    if isinstance(values, list):
        values.append(value)
    else:
        item[name] = [value]


class ItemTreeBuilder:
    """
    Builds schema.org items from a stream of tag events.

    Not thread-safe; use one instance per concurrently parsed document.
    An instance can be reused for consecutive documents since all state is
    reset when a document starts.
    """

    def __init__(self, listeners: list[Listener]):
        self._dispatcher = ListenerDispatcher(listeners)
        self._reset()

    def _reset(self) -> None:
        self._items: list[dict] = []
        self._tag_kinds: list[TagKind] = []
        self._pending: Optional[PendingProperty] = None
        self._in_block = False
        self._buffer: list[str] = []
        self._total_itemtypes = 0

    @property
    def total_itemtypes(self) -> int:
        """Item types found so far in the current document (all formats)."""
        return self._total_itemtypes

    @property
    def depth(self) -> int:
        """Number of currently open tags."""
        return len(self._tag_kinds)

    # --- Document events ---

    def on_document_start(self) -> None:
        self._reset()
        self._dispatcher.start_parsing()

    def on_document_end(self) -> None:
        if self._tag_kinds:
            logger.warning(f"Document ended with {len(self._tag_kinds)} unclosed tags")
        self._dispatcher.end_parsing(self._total_itemtypes)

    # --- Tag events ---

    def on_tag_open(self, name: str, attributes: dict) -> None:
        """
        Handle a start tag.

        Args:
            name: Tag name (any case)
            attributes: Attribute name → value; valueless attributes map to ""
        """
        tag = name.lower()
        attrs = {key.lower(): value for key, value in attributes.items()}

        # JSON-LD: capture everything up to </script>
        if is_jsonld_script(tag, attrs.get(TYPE_ATTRIBUTE)):
            if self._pending is not None:
                # One buffer for both capture modes: settle the property first
                self._finish_property()
            self._in_block = True
            self._buffer = []
            self._tag_kinds.append(TagKind.STRUCTURED_BLOCK)
            return

        itemprop = attrs.get(ITEMPROP_ATTRIBUTE)
        parent = self._items[-1] if self._items else None

        # Microdata: a new item
        if attrs.get(ITEMSCOPE_ATTRIBUTE) is not None and attrs.get(ITEMTYPE_ATTRIBUTE) is not None:
            itemtype = short_type_name(attrs[ITEMTYPE_ATTRIBUTE])
            item = {ITEM_TYPE_KEY: [itemtype]}
            self._found_itemtype(itemtype, Format.MICRODATA)
            # Attach to the parent now, so the item is owned exactly once
            if itemprop is not None and parent is not None:
                add_property(parent, itemprop, item)
            self._items.append(item)
            self._tag_kinds.append(TagKind.ITEM_SCOPE)
            return

        self._tag_kinds.append(TagKind.PLAIN)

        # Microdata: a property of the enclosing item
        if itemprop is not None and parent is not None:
            value = property_value(tag, attrs)
            if value is not None:
                add_property(parent, itemprop, value)
            else:
                # Innermost declaration wins if another capture is in flight
                self._pending = PendingProperty(itemprop, parent, self.depth)
                self._buffer = []

    def on_tag_close(self, name: str) -> None:
        """
        Handle an end tag.

        Tags are matched LIFO against the open tags; the tokenizer guarantees
        balanced events, so the name itself is only used for diagnostics.
        """
        if not self._tag_kinds:
            raise DocumentError(
                f"Unbalanced end tag: </{name}>",
                details={"tag": name}
            )

        depth = self.depth
        kind = self._tag_kinds.pop()

        if kind is TagKind.STRUCTURED_BLOCK:
            self._finish_block()
            return

        if self._pending is not None and self._pending.depth == depth:
            self._finish_property()

        if kind is TagKind.ITEM_SCOPE:
            item = self._items.pop()
            if not self._items:
                self._dispatcher.found_item(item)

    def on_text(self, chars: str) -> None:
        """Buffer text, but only while a block or a property is being captured."""
        if self._in_block or self._pending is not None:
            self._buffer.append(chars)

    # --- Internals ---

    def _take_buffer(self) -> str:
        text = "".join(self._buffer)
        self._buffer = []
        return text

    def _finish_property(self) -> None:
        pending = self._pending
        self._pending = None
        add_property(pending.item, pending.name, self._take_buffer().strip())

    def _finish_block(self) -> None:
        text = self._take_buffer()
        self._in_block = False

        try:
            value = parse_block(text)
        except MalformedBlockError as e:
            # Only this block is lost; the rest of the document still counts
            logger.warning(f"Skipping malformed JSON-LD block: {e.message} {e.details}")
            return

        for itemtype in iter_itemtypes(value):
            self._found_itemtype(itemtype, Format.JSONLD)
        self._dispatcher.found_item(value)

    def _found_itemtype(self, itemtype: str, format: Format) -> None:
        self._total_itemtypes += 1
        self._dispatcher.found_itemtype(itemtype, format)
