"""
Currency amount parsing for bank statements.

Amounts are converted to integer minor units (cents). Parsing is best
effort: a value that cannot be read yields 0 instead of raising, because
malformed amounts are common in low quality exports.

Floating point parsing and half-up rounding are used on purpose: the cents
value feeds the import fingerprint, so it must match the fingerprints that
were persisted by earlier imports bit for bit.
"""
import re
import math
import logging

from statement_import.models.statement import EntryType

logger = logging.getLogger(__name__)

CURRENCY_NOISE = re.compile(r'[R$\s]')
BR_GROUPED = re.compile(r'^\d{1,3}(\.\d{3})*(,\d{1,2})?$')
# Longest numeric prefix, the way a lenient float reader consumes "12.5abc"
FLOAT_PREFIX = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


def _parse_float_prefix(text: str) -> float:
    """Read the leading number of `text`; NaN when there is none."""
    match = FLOAT_PREFIX.match(text.strip())
    if not match:
        return math.nan
    return float(match.group(0))


def _round_half_up(value: float) -> int:
    floor_value = math.floor(value)
    if value - floor_value >= 0.5:
        floor_value += 1
    return int(floor_value)


def _to_cents(value: float) -> int:
    if math.isnan(value) or math.isinf(value):
        return 0
    return _round_half_up(value * 100)


def parse_amount_to_cents(raw: str) -> int:
    """
    Parse a BRL-formatted or plain decimal amount to signed cents.

    "R$ 1.234,56" -> 123456, "-150,00" -> -15000, "12.5" -> 1250.
    """
    cleaned = CURRENCY_NOISE.sub('', raw or '')
    negative = cleaned.startswith('-')
    if negative:
        cleaned = cleaned[1:]

    if BR_GROUPED.match(cleaned):
        cleaned = cleaned.replace('.', '').replace(',', '.', 1)
    else:
        cleaned = cleaned.replace(',', '.', 1)

    value = _parse_float_prefix(cleaned)
    if math.isnan(value):
        logger.debug(f"Unreadable amount {raw!r}, using 0")
    cents = _to_cents(value)
    return -cents if negative else cents


def parse_ofx_amount_to_cents(raw: str) -> int:
    """Parse an OFX TRNAMT value (decimal point or comma) to signed cents."""
    return _to_cents(_parse_float_prefix((raw or '0').replace(',', '.', 1)))


def entry_type_for(amount_cents: int) -> EntryType:
    """Zero and positive amounts are income, negative amounts are expense."""
    return EntryType.INCOME if amount_cents >= 0 else EntryType.EXPENSE
