"""
Parser entry point: tokenizes HTML with lxml and drives the item tree builder.

lxml's recovering HTML parser (libxml2) acts as the tokenizer. It resolves
unclosed tags and bad nesting on its own and reports balanced start / end /
text events to a parser target, which forwards them to the builder.

Typical use:

    parser = Parser()
    listener = DefaultListener()
    parser.register_listener(listener)
    parser.parse(html)
    listener.items  # → list of top-level schema.org items
"""

from pathlib import Path
from typing import Callable, Union

from lxml import etree

from .handler import ItemTreeBuilder
from .listener import Listener, DefaultListener
from .encoding import decode_html
from .schemas import ExtractionResult
from .exceptions import InputError, DocumentError
from .logger import get_module_logger

logger = get_module_logger("parser")

HandlerFactory = Callable[[list[Listener]], ItemTreeBuilder]


class _BuilderTarget:
    """lxml parser target forwarding tokenizer events to the builder."""

    def __init__(self, builder: ItemTreeBuilder):
        self.builder = builder

    def start(self, tag, attrib):
        self.builder.on_tag_open(tag, dict(attrib))

    def end(self, tag):
        self.builder.on_tag_close(tag)

    def data(self, data):
        self.builder.on_text(data)

    def close(self):
        # lxml calls this even after a failed feed; Parser.parse ends the
        # document only once the tokenizer has succeeded.
        pass


class Parser:
    """
    Parses HTML documents for schema.org annotations (JSON-LD and microdata).

    Listeners registered with the parser are called for every document
    parsed. A fresh builder is made per document, so one Parser can parse
    many documents in a row; parse concurrently with one Parser per thread.
    """

    def __init__(self, handler_factory: HandlerFactory = ItemTreeBuilder):
        """
        Args:
            handler_factory: Builds the tag handler for each document from the
                             listener list. Override to plug in a customized builder.
        """
        self.listeners: list[Listener] = []
        self.handler_factory = handler_factory

    def register_listener(self, listener: Listener) -> None:
        """Register a listener; listeners are called in registration order."""
        self.listeners.append(listener)

    def parse(self, html: str) -> None:
        """
        Parse an HTML string and notify the registered listeners.

        Malformed JSON-LD blocks are skipped silently; they are never
        reported as errors.

        Args:
            html: HTML document

        Raises:
            InputError: if html is None or not a string (nothing is notified)
            DocumentError: if the tokenizer fails; notifications already sent stand,
                           but end_parsing is not sent
        """
        if html is None:
            raise InputError("HTML document must not be None")
        if not isinstance(html, str):
            raise InputError(
                f"HTML document must be a string, got {type(html).__name__}",
                details={"type": type(html).__name__}
            )

        builder = self.handler_factory(self.listeners)
        builder.on_document_start()

        # libxml2 refuses to close a feed parser that never saw any data
        if not html.strip():
            builder.on_document_end()
            return

        # Feed UTF-8 bytes with the encoding pinned, so a <meta charset>
        # inside an already decoded document cannot switch it mid-parse.
        html_parser = etree.HTMLParser(target=_BuilderTarget(builder), encoding="utf-8")
        try:
            html_parser.feed(html.encode("utf-8", errors="replace"))
            html_parser.close()
        except etree.LxmlError as e:
            logger.error(f"Tokenizer failed: {e}")
            raise DocumentError(
                f"Could not tokenize document: {e}",
                details={"error": str(e)}
            ) from e

        builder.on_document_end()
        logger.debug(f"Parsed document: {builder.total_itemtypes} item types")

    def parse_file(self, file_path: Union[str, Path]) -> None:
        """
        Parse an HTML file, decoding it with the charset it declares.

        Raises:
            DocumentError: if the file cannot be read or decoded, or fails to tokenize
        """
        file_path = Path(file_path)
        try:
            raw_bytes = file_path.read_bytes()
        except OSError as e:
            raise DocumentError(
                f"Could not read {file_path}: {e}",
                details={"file": str(file_path)}
            ) from e

        html, encoding = decode_html(raw_bytes)
        logger.debug(f"Decoded {file_path.name} as {encoding}")
        self.parse(html)


def parse_html(html: str) -> ExtractionResult:
    """Convenience function to collect every schema.org item in an HTML string."""
    parser = Parser()
    listener = DefaultListener()
    parser.register_listener(listener)
    parser.parse(html)
    return listener.result()


def parse_html_file(file_path: Union[str, Path]) -> ExtractionResult:
    """Convenience function to collect every schema.org item in an HTML file."""
    parser = Parser()
    listener = DefaultListener()
    parser.register_listener(listener)
    parser.parse_file(file_path)
    return listener.result()
