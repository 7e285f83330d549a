#!/usr/bin/env python3
"""
ABOUTME: XML utility functions for embedding untrusted text in XML content
ABOUTME: Strips illegal characters and unknown entities, escapes metacharacters
ABOUTME: Normalizes to NFC and filters the result to an allow-listed character set
"""

import re
import unicodedata

MODE_LEGACY = "legacy"
MODE_WELL_FORMED = "well-formed"
SANITIZE_MODES = (MODE_LEGACY, MODE_WELL_FORMED)
DEFAULT_MODE = MODE_LEGACY

KNOWN_ENTITIES = frozenset(["amp", "lt", "gt", "quot", "apos", "nbsp", "#x9"])

# XML 1.0 forbids C0 controls except tab (0x09), LF (0x0A) and CR (0x0D); DEL is dropped too
_ILLEGAL_CONTROL_CHARS = ''.join(
    chr(c) for c in range(0x20)
    if c not in (0x09, 0x0A, 0x0D)
) + '\x7f'
_CONTROL_CHARS_TABLE = str.maketrans('', '', _ILLEGAL_CONTROL_CHARS)

_ENTITY_RE = re.compile(r'&([a-zA-Z0-9#]+);')
_METACHARS_RE = re.compile(r'[<>&"\'/]')
_ESCAPES = {
    '<': '&lt;',
    '>': '&gt;',
    '&': '&amp;',
    '"': '&quot;',
    "'": '&apos;',
    '/': '&#47;',
}
_EXTENDED_LATIN_RE = re.compile(r'[\x80-\x9f\xa0-\xff]')
# Whitespace includes U+FEFF (byte order mark), which str's \s does not match
_DISALLOWED_RE = re.compile(r'[^0-9a-zA-Z\s\ufeff\-_.,:?=/&<>\'"()|`]')
_DISALLOWED_KEEP_SEMICOLON_RE = re.compile(r'[^0-9a-zA-Z\s\ufeff\-_.,:;?=/&<>\'"()|`]')


def remove_control_characters(text: str) -> str:
    """
    Remove control characters that are illegal in XML 1.0.

    XML 1.0 allows: #x9 (tab), #xA (LF), #xD (CR), and #x20-#xD7FF, #xE000-#xFFFD, #x10000-#x10FFFF
    This function removes 0x00-0x08, 0x0B, 0x0C, 0x0E-0x1F and DEL (0x7F).
    """
    return text.translate(_CONTROL_CHARS_TABLE)


def _keep_known_entity(match) -> str:
    if match.group(1) in KNOWN_ENTITIES:
        return match.group(0)
    return ''


def strip_unknown_entities(text: str) -> str:
    """
    Remove entity references whose name is not in KNOWN_ENTITIES.

    A reference is any "&name;" run where name is letters, digits and '#'.
    Recognized references (e.g. "&amp;", "&#x9;") pass through untouched;
    everything else, numeric references included, is deleted whole.
    """
    return _ENTITY_RE.sub(_keep_known_entity, text)


def escape_metacharacters(text: str) -> str:
    """
    Escape < > & " ' / to their character references, one character at a time.

    Ampersands are escaped unconditionally, so an existing reference such as
    "&amp;" becomes "&amp;amp;".
    """
    return _METACHARS_RE.sub(lambda m: _ESCAPES[m.group(0)], text)


def normalize_unicode(text: str) -> str:
    return unicodedata.normalize('NFC', text)


def remove_extended_latin(text: str) -> str:
    """Delete C1 controls and the Latin-1 supplement (U+0080-U+00FF)."""
    return _EXTENDED_LATIN_RE.sub('', text)


def filter_allowed_characters(text: str, allow_semicolon: bool = False) -> str:
    """
    Keep only ASCII letters and digits, whitespace (BOM included) and - _ . , : ? = / & < > ' " ( ) | `

    Args:
        text: Text to filter
        allow_semicolon: Also keep ';' (needed when escaping has to survive filtering)

    Returns:
        Text containing allow-listed characters only
    """
    pattern = _DISALLOWED_KEEP_SEMICOLON_RE if allow_semicolon else _DISALLOWED_RE
    return pattern.sub('', text)


def sanitize(text: str, mode: str = DEFAULT_MODE) -> str:
    """
    Sanitize text for embedding inside XML element content.

    Legacy mode runs every stage in a fixed order:
    1. Remove illegal control characters
    2. Strip unknown entity references
    3. Escape < > & " ' /
    4. Normalize to NFC
    5. Remove U+0080-U+00FF
    6. Filter to the allow-list, which excludes ';' and '#'

    Step 6 therefore truncates every escape produced in step 3:
    "<script>" becomes "&ltscript&gt" and "&amp;" becomes "&ampamp".

    Well-formed mode filters first (keeping ';') and escapes last, so the
    output is valid XML text: "<script>" becomes "&lt;script&gt;".
    This ordering also keeps numeric references whole ("/" becomes "&#47;"),
    so it differs from an escape-then-filter pass that merely allows ';'
    ("/" would become "&47;").

    Neither mode is idempotent; re-sanitizing output escapes its ampersands again.

    Args:
        text: Raw input text
        mode: "legacy" (default) or "well-formed"

    Returns:
        Sanitized text

    Raises:
        TypeError: If text is not a string
        ValueError: If mode is not one of SANITIZE_MODES
    """
    if not isinstance(text, str):
        raise TypeError(f"sanitize() expects str, got {type(text).__name__}")
    if mode not in SANITIZE_MODES:
        raise ValueError(
            f"Unknown sanitize mode: {mode!r}. Expected one of: {', '.join(SANITIZE_MODES)}"
        )

    text = remove_control_characters(text)
    text = strip_unknown_entities(text)

    if mode == MODE_WELL_FORMED:
        text = normalize_unicode(text)
        text = remove_extended_latin(text)
        text = filter_allowed_characters(text, allow_semicolon=True)
        return escape_metacharacters(text)

    text = escape_metacharacters(text)
    text = normalize_unicode(text)
    text = remove_extended_latin(text)
    return filter_allowed_characters(text)
