"""
Transaction extraction from OFX/QFX text.

Two dialects are found in the wild with nothing up front to tell them apart:
XML-like files where every <STMTTRN> block is closed, and flat SGML files
with no closing tags. Each dialect has its own block splitter; the
dispatcher only falls back to the flat splitter when the closed-tag pass
produced no transactions.
"""
import re
import logging
from typing import Callable, Dict, List, Optional

from statement_import.models.statement import ParsedTransaction
from statement_import.utils.amount_parser import parse_ofx_amount_to_cents, entry_type_for
from statement_import.utils.date_parser import parse_ofx_date, format_hash_date
from statement_import.utils.header_classifier import normalize_text
from statement_import.utils.import_hash import compute_import_hash

logger = logging.getLogger(__name__)

CLOSED_BLOCK = re.compile(r'<STMTTRN>([\s\S]*?)</STMTTRN>', re.IGNORECASE)
FLAT_BLOCK = re.compile(r'<STMTTRN>([\s\S]*?)(?=<STMTTRN>|</BANKTRANLIST>|\Z)', re.IGNORECASE)
TAG_VALUE = re.compile(r'<([A-Z]+)>([^<\n\r]*)', re.IGNORECASE)

# NAME values some banks use for opening/closing balance pseudo-transactions
BALANCE_MARKER_NAMES = frozenset(['saldo anterior', 'saldo do dia', 's a l d o'])

BlockSplitter = Callable[[str], List[str]]


def extract_closed_blocks(text: str) -> List[str]:
    """Bodies of every <STMTTRN>...</STMTTRN> block."""
    return CLOSED_BLOCK.findall(text)


def extract_flat_blocks(text: str) -> List[str]:
    """Bodies between <STMTTRN> and the next block, </BANKTRANLIST> or end of text."""
    return FLAT_BLOCK.findall(text)


def extract_fields(body: str) -> Dict[str, str]:
    """Map of upper-cased tag name to trimmed value; later tags win."""
    return {tag.upper(): value.strip() for tag, value in TAG_VALUE.findall(body)}


def is_balance_marker(fields: Dict[str, str]) -> bool:
    name = fields.get('NAME')
    if name is None:
        return False
    return ' '.join(normalize_text(name).split()) in BALANCE_MARKER_NAMES


def transaction_from_fields(fields: Dict[str, str]) -> Optional[ParsedTransaction]:
    """
    Build a transaction from one block's fields.

    Returns None for balance marker blocks and for blocks without a usable
    DTPOSTED date.
    """
    if is_balance_marker(fields):
        logger.debug(f"Skipping balance marker block: {fields.get('NAME')}")
        return None

    date = parse_ofx_date(fields.get('DTPOSTED', ''))
    if date is None:
        logger.debug(f"Skipping block without a valid DTPOSTED: {fields.get('DTPOSTED')!r}")
        return None

    amount_cents = parse_ofx_amount_to_cents(fields.get('TRNAMT', '0'))

    # A present tag wins even when empty
    description = next(
        (fields[tag] for tag in ('MEMO', 'NAME', 'FITID') if tag in fields),
        ''
    )
    absolute_cents = abs(amount_cents)

    return ParsedTransaction(
        date=date,
        description=description,
        externalDocumentId=fields.get('FITID') or None,
        amountCents=absolute_cents,
        type=entry_type_for(amount_cents),
        importHash=compute_import_hash(format_hash_date(date), description, absolute_cents),
    )


def transactions_from_blocks(text: str, splitter: BlockSplitter) -> List[ParsedTransaction]:
    transactions = []
    for body in splitter(text):
        transaction = transaction_from_fields(extract_fields(body))
        if transaction is not None:
            transactions.append(transaction)
    return transactions


def extract_ofx_transactions(text: str) -> List[ParsedTransaction]:
    """Closed-tag pass first, flat SGML pass only if that found nothing."""
    transactions = transactions_from_blocks(text, extract_closed_blocks)
    if transactions:
        logger.info(f"Extracted {len(transactions)} transactions from closed <STMTTRN> blocks")
        return transactions

    transactions = transactions_from_blocks(text, extract_flat_blocks)
    logger.info(f"Extracted {len(transactions)} transactions from flat SGML <STMTTRN> blocks")
    return transactions
