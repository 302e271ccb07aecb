"""
Listeners receive the events produced while a document is parsed.

Event order for one document (always, even when nothing is found):
  start_parsing → (found_itemtype* → found_item)* → end_parsing(total)

Every found_itemtype of an item is delivered before the found_item that
carries it. The DefaultListener below is the aggregator most callers want;
anything else (indexers, enrichers) implements Listener directly.
"""

from abc import ABC, abstractmethod
from typing import Any

from .schemas import Format, ItemType, ExtractionResult
from .logger import get_module_logger

logger = get_module_logger("listener")


class Listener(ABC):
    """Abstract base class for parser listeners."""

    @abstractmethod
    def start_parsing(self) -> None:
        """Called once, before any tag of the document is seen."""
        pass

    @abstractmethod
    def end_parsing(self, num_itemtypes: int) -> None:
        """
        Called once, after the whole document was processed.

        Args:
            num_itemtypes: Total number of item types found (all formats)
        """
        pass

    @abstractmethod
    def found_itemtype(self, itemtype: str, format: Format) -> None:
        """
        Called for every item type discovered.

        Args:
            itemtype: Short type name, e.g. "Person"
            format: Format that declared the type
        """
        pass

    @abstractmethod
    def found_item(self, item: Any) -> None:
        """
        Called for every top-level item, in the order items close.

        Every listener receives the same object, not a copy. A listener
        that wants to change the item must copy it first, or the listeners
        after it see the change.

        Args:
            item: Full item as a JSON value (the parsed block for JSON-LD)
        """
        pass

    @abstractmethod
    def is_parsing_finished(self) -> bool:
        """Advisory flag set by the listener itself; the parser never reads it."""
        pass


class ListenerDispatcher:
    """
    Broadcasts events to listeners in registration order.

    Holds a reference to the caller's list, but snapshots it when parsing
    starts, so listeners registered mid-document are only picked up by the
    next document.
    """

    def __init__(self, listeners: list[Listener]):
        self._listeners = listeners
        self._active: tuple[Listener, ...] = tuple(listeners)

    def start_parsing(self) -> None:
        self._active = tuple(self._listeners)
        for listener in self._active:
            listener.start_parsing()

    def end_parsing(self, num_itemtypes: int) -> None:
        for listener in self._active:
            listener.end_parsing(num_itemtypes)

    def found_itemtype(self, itemtype: str, format: Format) -> None:
        for listener in self._active:
            listener.found_itemtype(itemtype, format)

    def found_item(self, item: Any) -> None:
        for listener in self._active:
            listener.found_item(item)


class DefaultListener(Listener):
    """
    Collects every top-level item and keeps count of the item types found.

    A document with one microdata item and one JSON-LD block yields two
    items, each with its full hierarchy, e.g.:

        [
            {"type": ["Person"], "name": ["John Smith"]},
            {"@context": "http://schema.org", "@type": "Person", "name": "John Smith"}
        ]

    Read the results once is_parsing_finished() is True; before that they
    only reflect what was seen so far.
    """

    def __init__(self):
        self.items: list[Any] = []
        self.itemtypes: list[ItemType] = []
        self.total_itemtypes = 0
        self.parsing_finished = False

    def start_parsing(self) -> None:
        logger.info("Parsing started")

    def end_parsing(self, num_itemtypes: int) -> None:
        self.total_itemtypes = num_itemtypes
        self.parsing_finished = True
        logger.info(f"Parsing finished. Item types found: {num_itemtypes}")

    def found_itemtype(self, itemtype: str, format: Format) -> None:
        self.itemtypes.append(ItemType(name=itemtype, format=format))
        logger.debug(f"Item type: {itemtype} ({format.value})")

    def found_item(self, item: Any) -> None:
        self.items.append(item)

    def is_parsing_finished(self) -> bool:
        return self.parsing_finished

    def result(self) -> ExtractionResult:
        """Snapshot of everything collected so far."""
        return ExtractionResult(
            items=list(self.items),
            itemtypes=list(self.itemtypes),
            total_itemtypes=self.total_itemtypes,
            finished=self.parsing_finished
        )
