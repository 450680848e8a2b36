"""
Delimiter detection and quote-aware row splitting for bank statement CSV files.

The csv module is not used here: bank exports mix single and double quotes,
leave quotes unterminated, and the splitter must degrade gracefully instead
of raising csv.Error.
"""
import re
import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)

LINE_BREAK = re.compile(r'\r?\n|\r')


def split_lines(text: str) -> List[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in LINE_BREAK.split(text) if line.strip()]


def detect_delimiter(header_line: str) -> str:
    """Semicolon if the header uses one, otherwise comma."""
    return ';' if ';' in header_line else ','


def split_row(line: str, delimiter: str) -> List[str]:
    """
    Split one line into trimmed fields.

    A field may be wrapped in single or double quotes; the same character
    closes it. Inside quotes the delimiter is literal and a doubled quote
    character is an escaped literal quote. An unterminated quote runs to the
    end of the line.
    """
    result: List[str] = []
    current: List[str] = []
    quote_char = None
    i = 0
    while i < len(line):
        ch = line[i]
        if ch in ('"', "'") and quote_char is None:
            quote_char = ch
        elif ch == quote_char:
            if i + 1 < len(line) and line[i + 1] == quote_char:
                current.append(ch)
                i += 1
            else:
                quote_char = None
        elif ch == delimiter and quote_char is None:
            result.append(''.join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    result.append(''.join(current).strip())
    return result


def tokenize(text: str) -> Tuple[List[str], List[List[str]]]:
    """
    Tokenize a whole CSV document.

    Returns:
        (header fields, data rows). Both are empty when the text has fewer
        than two non-empty lines.
    """
    lines = split_lines(text)
    if len(lines) < 2:
        logger.info(f"CSV has {len(lines)} non-empty line(s), nothing to tokenize")
        return [], []

    delimiter = detect_delimiter(lines[0])
    header = split_row(lines[0], delimiter)
    rows = [split_row(line, delimiter) for line in lines[1:]]
    logger.debug(f"Tokenized {len(rows)} data rows using delimiter {delimiter!r}")
    return header, rows
