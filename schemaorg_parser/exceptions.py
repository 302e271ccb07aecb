"""
Custom exceptions for the schema.org parser.

Error philosophy:
  - InputError          → FAIL HARD: nothing is parsed, no listener is called.
  - DocumentError       → SURFACED ONCE: the tokenizer (or file I/O) gave up.
                          Notifications already delivered stay valid.
  - MalformedBlockError → RECOVERED: one JSON-LD block is dropped, the rest
                          of the document keeps going. Never leaves the builder.
"""

from typing import Optional


class SchemaParserError(Exception):
    """Base exception for all parser errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputError(SchemaParserError, ValueError):
    """Raised when the document handed to the parser is missing or not text."""
    pass


class DocumentError(SchemaParserError):
    """
    Raised when the document cannot be tokenized or read.

    Listeners may already have received start/item notifications for the
    part of the document processed before the failure.
    """
    pass


class MalformedBlockError(SchemaParserError):
    """
    Raised when a JSON-LD block does not contain valid JSON.

    The builder catches this, discards the block and continues.
    """

    def __init__(self, message: str, text: str = "", details: Optional[dict] = None):
        super().__init__(message, details)
        self.text = text  # Raw block contents, kept for debugging
