"""
File analyzer utilities for statement uploads: format detection and decoding.
"""
import os
import logging

from statement_import.models.statement import StatementFormat
from statement_import.services.import_errors import UnreadableFileError

logger = logging.getLogger(__name__)

# Encodings tried in order; Brazilian bank exports are often Windows-1252
TEXT_ENCODINGS = ('utf-8-sig', 'cp1252')
# Maps every byte, so text that is neither of the above still decodes
FALLBACK_ENCODING = 'latin-1'


def detect_format_from_extension(filename: str) -> StatementFormat:
    """
    Detect statement format based on file extension.

    Anything that is not .ofx/.qfx is treated as CSV.
    """
    _, extension = os.path.splitext(filename or '')
    extension = extension.lower()[1:] if extension else ""

    format_map = {
        'ofx': StatementFormat.OFX,
        'qfx': StatementFormat.QFX,
    }
    return format_map.get(extension, StatementFormat.CSV)


def detect_format_from_content(text: str) -> StatementFormat:
    """
    Detect statement format based on content inspection.

    Only used to flag a mismatch with the extension; the extension decides
    which parser runs.
    """
    head = text.lstrip()[:1000]
    upper_head = head.upper()
    if upper_head.startswith('OFXHEADER:') or upper_head.startswith('<?OFX') or '<OFX>' in upper_head:
        return StatementFormat.OFX
    if '<STMTTRN>' in text.upper():
        return StatementFormat.OFX

    first_line = head.splitlines()[0] if head else ''
    if ';' in first_line or ',' in first_line:
        return StatementFormat.CSV
    return StatementFormat.OTHER


def decode_statement_content(content: bytes) -> str:
    """
    Decode uploaded bytes to text.

    Bytes that are neither UTF-8 nor Windows-1252 decode as Latin-1.

    Raises:
        UnreadableFileError: If the content is binary (PDF, spreadsheet, ...)
    """
    if content.startswith(b'%PDF-') or content.startswith(b'PK\x03\x04') or b'\x00' in content[:1024]:
        raise UnreadableFileError("File is not a text bank statement")

    for encoding in TEXT_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"Content is not valid {encoding}")

    logger.warning(f"Content is neither UTF-8 nor Windows-1252, decoding as {FALLBACK_ENCODING}")
    return content.decode(FALLBACK_ENCODING)
