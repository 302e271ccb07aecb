"""
schema.org parser

Extracts schema.org annotations from HTML and normalizes them to JSON,
whether they were written as JSON-LD script blocks or as microdata
attributes. Results are pushed to registered listeners while the document
streams through.

Public API surface:
  Entry points:  Parser, parse_html, parse_html_file
  Tag handling:  ItemTreeBuilder (the event-driven core)
  Listeners:     Listener, DefaultListener
  Data models:   Format, ItemType, ExtractionResult
  Error types:   InputError (fatal), DocumentError (surfaced),
                 MalformedBlockError (recovered internally)
"""

# --- Entry points ---
from .parser import Parser, parse_html, parse_html_file

# --- Core builder ---
from .handler import ItemTreeBuilder

# --- Listeners ---
from .listener import Listener, DefaultListener

# --- Data models ---
from .schemas import Format, ItemType, ExtractionResult

# --- Exceptions ---
from .exceptions import SchemaParserError, InputError, DocumentError, MalformedBlockError

__version__ = "0.1.0"
__all__ = [
    "Parser",
    "parse_html",
    "parse_html_file",
    "ItemTreeBuilder",
    "Listener",
    "DefaultListener",
    "Format",
    "ItemType",
    "ExtractionResult",
    "SchemaParserError",
    "InputError",
    "DocumentError",
    "MalformedBlockError",
]
