"""
Import fingerprints for statement de-duplication.

The fingerprint is a persisted format: stored ledger entries and balances
are matched against it on every import, so the algorithm below must not
change. It is not a cryptographic hash.
"""
import logging
from typing import List

logger = logging.getLogger(__name__)

MASK_32 = 0xFFFFFFFF

SEED_1 = 0xdeadbeef
SEED_2 = 0x41c6ce57
MULTIPLIER_1 = 2654435761
MULTIPLIER_2 = 1597334677
MIX_1 = 2246822507
MIX_2 = 3266489909

BALANCE_MARKER = "SALDO"


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiplication."""
    return (a * b) & MASK_32


def _utf16_code_units(text: str) -> List[int]:
    data = text.encode('utf-16-le', errors='surrogatepass')
    return [int.from_bytes(data[i:i + 2], 'little') for i in range(0, len(data), 2)]


def fingerprint(raw: str) -> str:
    """16 lowercase hex characters for `raw`, high lane first."""
    h1 = SEED_1
    h2 = SEED_2
    for unit in _utf16_code_units(raw):
        h1 = _imul(h1 ^ unit, MULTIPLIER_1)
        h2 = _imul(h2 ^ unit, MULTIPLIER_2)

    h1 = _imul(h1 ^ (h1 >> 16), MIX_1) ^ _imul(h2 ^ (h2 >> 13), MIX_2)
    h2 = _imul(h2 ^ (h2 >> 16), MIX_1) ^ _imul(h1 ^ (h1 >> 13), MIX_2)

    return f"{h2:08x}{h1:08x}"


def compute_import_hash(date: str, description: str, amount_cents: int) -> str:
    """
    Fingerprint of a transaction.

    Args:
        date: Transaction date as YYYY-MM-DD
        description: Primary description
        amount_cents: Absolute amount in minor units
    """
    return fingerprint(f"{date}|{description}|{amount_cents}")


def compute_balance_hash(date: str, balance_cents: int) -> str:
    """Fingerprint of a daily balance snapshot."""
    return compute_import_hash(date, BALANCE_MARKER, balance_cents)
