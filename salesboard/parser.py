"""
CSV text handling.

Responsibilities:
- encoding detection + decoding of raw uploads
- a single-pass quote-aware scan that turns text into rows of cells
"""

from __future__ import annotations

import logging
from typing import List

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

BOM = "\ufeff"


def decode_csv_bytes(raw: bytes) -> tuple[str, str]:
    """
    Decode raw CSV bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - UTF-8 input that begins with a BOM is decoded with utf-8-sig.
    - If decode fails, fall back to UTF-8 with replacement characters.

    Returns the text and the codec actually used.
    """
    match = from_bytes(raw).best()
    decode_used = match.encoding if match is not None else "utf-8"

    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8", "ascii")):
        decode_used = "utf-8-sig"

    try:
        return raw.decode(decode_used), decode_used
    except (LookupError, UnicodeDecodeError):
        logger.warning("Could not decode CSV as %s, falling back to utf-8", decode_used)

    try:
        return raw.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        # Last resort: decode with replacement so the pipeline can continue deterministically
        return raw.decode("utf-8", errors="replace"), "utf-8"


def _is_blank(row: List[str]) -> bool:
    return not row or all(cell.strip() == "" for cell in row)


def parse_csv(text: str) -> List[List[str]]:
    """
    Split CSV text into rows of cells.

    Commas separate fields and double quotes wrap fields that may contain
    commas, quotes (doubled) or line breaks. CRLF, CR and LF all end a row.
    Malformed quoting never raises: an unterminated quote swallows the rest
    of the input into the current field. Rows whose cells are all blank are
    dropped.
    """
    if text.startswith(BOM):
        text = text[1:]

    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and text[i + 1] == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            elif ch == "\r":
                field.append("\n")
                if i + 1 < n and text[i + 1] == "\n":
                    i += 1
            else:
                field.append(ch)
        elif ch == ",":
            row.append("".join(field))
            field = []
        elif ch == "\n" or ch == "\r":
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
        elif ch == '"':
            in_quotes = True
        else:
            field.append(ch)
        i += 1

    # No trailing newline: flush what is pending.
    if field or row:
        row.append("".join(field))
        rows.append(row)

    return [r for r in rows if not _is_blank(r)]
