"""
CSV parsing for pick-list exports.

The export is read with a small single-pass scanner rather than a general
CSV dialect engine.  Its rules:

- Inside a quoted field a doubled quote (``""``) is a literal quote and any
  other quote ends quoting.  Commas and newlines are literal there.
- Outside quotes a quote starts quoting, a comma ends the field, a newline
  ends the row and a carriage return is dropped (so CRLF and LF both work).
- The last row is flushed at end of input.  A terminal newline leaves a
  single empty field behind, which is discarded.

No column-count validation is done: rows may be shorter or longer than the
header and are read by position with ``cell``.
"""

import logging
import re
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)

QUOTE = '"'
DELIMITER = ','

# Text without any of these cannot hold more than one field or row
_SEPARATOR_RE = re.compile(r'[,;\r\n]')


class NotTabularDataError(ValueError):
    """Raised when the supplied text is not a delimited table."""


def parse_csv(text: str) -> List[List[str]]:
    """Split delimited text into rows of string cells."""
    rows = []
    row = []
    cell_chars = []
    quoted = False
    i = 0
    n = len(text)

    while i < n:
        c = text[i]
        i += 1
        if quoted:
            if c == QUOTE:
                if i < n and text[i] == QUOTE:
                    cell_chars.append(QUOTE)
                    i += 1
                else:
                    quoted = False
            else:
                cell_chars.append(c)
        elif c == QUOTE:
            quoted = True
        elif c == DELIMITER:
            row.append(''.join(cell_chars))
            cell_chars = []
        elif c == '\n':
            row.append(''.join(cell_chars))
            rows.append(row)
            row = []
            cell_chars = []
        elif c != '\r':
            cell_chars.append(c)

    row.append(''.join(cell_chars))
    rows.append(row)

    if rows and len(rows[-1]) == 1 and rows[-1][0] == '':
        rows.pop()
    return rows


def looks_tabular(text) -> bool:
    """True when ``text`` is a non-empty string with row or field separators."""
    return isinstance(text, str) and bool(text) and bool(_SEPARATOR_RE.search(text))


def read_table(text) -> Tuple[List[str], List[List[str]]]:
    """
    Validate and parse an export into ``(header, data_rows)``.

    Raises:
        NotTabularDataError: if the text is empty, has no separators, or
            parses to no rows at all.
    """
    if not looks_tabular(text):
        raise NotTabularDataError("Captured text did not look like CSV text.")
    rows = parse_csv(text)
    if not rows:
        raise NotTabularDataError("Empty CSV.")
    logger.debug(f"Parsed {len(rows)} rows ({len(rows) - 1} data rows)")
    return rows[0], rows[1:]


def cell(row: Sequence[str], index: int) -> str:
    """Cell at ``index``, or "" when the index is unresolved or out of range."""
    if index < 0 or index >= len(row):
        return ''
    value = row[index]
    return '' if value is None else value
