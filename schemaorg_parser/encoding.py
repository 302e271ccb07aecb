"""
Charset detection for HTML read from disk.

Pages are decoded with the charset they declare in a <meta> tag, mapped
the way browsers map it, so the text handed to listeners matches what a
browser shows. BeautifulSoup's dammit module does the sniffing and the
fallback guessing when nothing is declared.
"""

from typing import Optional

from bs4.dammit import EncodingDetector, UnicodeDammit

from .exceptions import DocumentError
from .logger import get_module_logger

logger = get_module_logger("encoding")

# WHATWG encoding spec: browsers silently remap these charsets.
# https://encoding.spec.whatwg.org/#names-and-labels
WHATWG_CHARSET_MAP = {
    'iso-8859-1': 'windows-1252',
    'iso8859-1': 'windows-1252',
    'iso88591': 'windows-1252',
    'latin-1': 'windows-1252',
    'latin1': 'windows-1252',
    'us-ascii': 'windows-1252',
    'ascii': 'windows-1252',
    'iso-8859-9': 'windows-1254',
    'iso-8859-11': 'windows-874',
}


def detect_charset_from_bytes(raw_bytes: bytes) -> Optional[str]:
    """
    Return the charset declared by the document, browser-mapped, or None.

    Looks at <meta charset=...> and <meta http-equiv="Content-Type"
    content="...; charset=..."> near the top of the document.
    """
    declared = EncodingDetector.find_declared_encoding(raw_bytes, is_html=True)
    if not declared:
        return None
    if isinstance(declared, bytes):
        declared = declared.decode('ascii', errors='ignore')
    charset = declared.strip().lower()
    return WHATWG_CHARSET_MAP.get(charset, charset)


def decode_html(raw_bytes: bytes) -> tuple[str, str]:
    """
    Decode raw HTML bytes.

    Args:
        raw_bytes: Document as read from disk

    Returns:
        Tuple of (decoded text, encoding used)

    Raises:
        DocumentError: if no encoding could decode the bytes
    """
    declared = detect_charset_from_bytes(raw_bytes)
    known = [declared] if declared else []

    dammit = UnicodeDammit(raw_bytes, known_definite_encodings=known, is_html=True)
    if dammit.unicode_markup is None:
        raise DocumentError(
            "Could not decode document",
            details={"declared_charset": declared}
        )

    if declared and dammit.original_encoding != declared:
        logger.warning(f"Declared charset {declared} failed, decoded as {dammit.original_encoding}")
    return dammit.unicode_markup, dammit.original_encoding
