"""
Bank statement parsing.

Turns the text of a CSV or OFX export into a ParsedBankStatement. Nothing in
here raises on malformed input: an unrecognized file yields an empty
statement, a row with a bad date is dropped, an unreadable amount is 0.
"""
import re
import logging
from datetime import datetime
from typing import List, Optional, Union

from statement_import.models.statement import (
    EntryType,
    ParsedBalance,
    ParsedBankStatement,
    ParsedTransaction,
    StatementFormat,
)
from statement_import.utils.amount_parser import parse_amount_to_cents, entry_type_for
from statement_import.utils.csv_tokenizer import tokenize
from statement_import.utils.date_parser import parse_statement_date, format_hash_date
from statement_import.utils.file_analyzer import (
    decode_statement_content,
    detect_format_from_content,
    detect_format_from_extension,
)
from statement_import.utils.header_classifier import (
    ABSENT,
    ColumnLayout,
    ColumnRole,
    classify_headers,
    normalize_text,
)
from statement_import.utils.import_hash import compute_import_hash, compute_balance_hash
from statement_import.utils.ofx_extractor import extract_ofx_transactions

logger = logging.getLogger(__name__)

__all__ = [
    'classify_row',
    'resolve_entry_type',
    'parse_csv',
    'parse_ofx',
    'parse_bank_statement',
    'parse_bank_statement_file',
]

# "Saldo Anterior" / "Saldo do dia" summary lines are dropped outright
SKIPPED_BALANCE_LABEL = re.compile(r'^saldo\s+(anterior|do\s+dia)\b')
# "S A L D O" rows carry the day's closing balance
SPACED_BALANCE_LABEL = re.compile(r'^s\s+a\s+l\s+d\s+o\b')

INCOME_LABEL = re.compile(r'^(entrada|credito|credit)')
EXPENSE_LABEL = re.compile(r'^(saida|debito|debit)')

ClassifiedRow = Union[ParsedTransaction, ParsedBalance]


def _cell(cols: List[str], index: int) -> str:
    if index == ABSENT or index >= len(cols):
        return ''
    return cols[index]


def resolve_entry_type(type_label: str, amount_cents: int) -> EntryType:
    """Prefer an explicit Entrada/Saída label, fall back to the amount sign."""
    if type_label:
        normalized = normalize_text(type_label)
        if INCOME_LABEL.match(normalized):
            return EntryType.INCOME
        if EXPENSE_LABEL.match(normalized):
            return EntryType.EXPENSE
    return entry_type_for(amount_cents)


def _balance_from_row(cols: List[str], layout: ColumnLayout, date_str: str, date: datetime) -> ParsedBalance:
    raw_balance = _cell(cols, layout.amount) or _cell(cols, layout.credit)
    balance_cents = parse_amount_to_cents(raw_balance) if raw_balance else 0
    return ParsedBalance(
        date=date,
        balanceCents=balance_cents,
        importHash=compute_balance_hash(date_str, balance_cents),
    )


def _signed_amount(cols: List[str], layout: ColumnLayout) -> int:
    amount_cell = _cell(cols, layout.amount)
    if amount_cell:
        return parse_amount_to_cents(amount_cell)
    if layout.has(ColumnRole.DEBIT) or layout.has(ColumnRole.CREDIT):
        debit_cell = _cell(cols, layout.debit)
        credit_cell = _cell(cols, layout.credit)
        debit = parse_amount_to_cents(debit_cell) if debit_cell else 0
        credit = parse_amount_to_cents(credit_cell) if credit_cell else 0
        return credit - debit
    return 0


def classify_row(cols: List[str], layout: ColumnLayout) -> Optional[ClassifiedRow]:
    """
    Classify one tokenized data row.

    Returns a ParsedTransaction, a ParsedBalance for "S A L D O" rows, or
    None for rows that are discarded (bad date, summary labels, empty noise).
    """
    date = parse_statement_date(_cell(cols, layout.date))
    if date is None:
        return None
    date_str = format_hash_date(date)

    description = _cell(cols, layout.description)
    normalized_description = normalize_text(description)
    if SKIPPED_BALANCE_LABEL.match(normalized_description):
        return None
    if SPACED_BALANCE_LABEL.match(normalized_description):
        return _balance_from_row(cols, layout, date_str, date)

    amount_cents = _signed_amount(cols, layout)
    if amount_cents == 0 and not description:
        return None

    absolute_cents = abs(amount_cents)
    return ParsedTransaction(
        date=date,
        description=description,
        details=_cell(cols, layout.details) or None,
        externalDocumentId=_cell(cols, layout.document_id) or None,
        amountCents=absolute_cents,
        type=resolve_entry_type(_cell(cols, layout.type_label), amount_cents),
        importHash=compute_import_hash(date_str, description, absolute_cents),
    )


def parse_csv(text: str) -> ParsedBankStatement:
    """Parse a bank statement CSV; the first non-empty line is the header."""
    header, rows = tokenize(text)
    if not header:
        return ParsedBankStatement()

    layout = classify_headers(header)
    if not layout.is_statement:
        logger.info(f"No date/description columns in header {header}, not a statement")
        return ParsedBankStatement()

    statement = ParsedBankStatement()
    discarded = 0
    for cols in rows:
        classified = classify_row(cols, layout)
        if isinstance(classified, ParsedTransaction):
            statement.transactions.append(classified)
        elif isinstance(classified, ParsedBalance):
            statement.balances.append(classified)
        else:
            discarded += 1

    logger.info(
        f"Parsed CSV: {len(statement.transactions)} transactions, "
        f"{len(statement.balances)} balances, {discarded} rows discarded"
    )
    return statement


def parse_ofx(text: str) -> ParsedBankStatement:
    """Parse an OFX/QFX statement in either the XML or the flat SGML dialect."""
    return ParsedBankStatement(transactions=extract_ofx_transactions(text))


def parse_bank_statement(text: str, filename: str) -> ParsedBankStatement:
    """Dispatch on the file extension: .ofx/.qfx go to OFX, anything else to CSV."""
    file_format = detect_format_from_extension(filename)
    content_format = detect_format_from_content(text)
    if content_format not in (file_format, StatementFormat.OTHER) and not (
        file_format == StatementFormat.QFX and content_format == StatementFormat.OFX
    ):
        logger.warning(f"File {filename} looks like {content_format.value} but is parsed as {file_format.value}")

    if file_format in (StatementFormat.OFX, StatementFormat.QFX):
        return parse_ofx(text)
    return parse_csv(text)


def parse_bank_statement_file(content: bytes, filename: str) -> ParsedBankStatement:
    """
    Decode raw upload bytes and parse them.

    Raises:
        UnreadableFileError: If the bytes cannot be decoded as text
    """
    return parse_bank_statement(decode_statement_content(content), filename)
