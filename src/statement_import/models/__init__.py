"""
Models package for the statement import backend.
"""

from .statement import (
    EntryType,
    StatementFormat,
    ParsedTransaction,
    ParsedBalance,
    ParsedBankStatement,
    ImportResult,
    StatementImportSummary,
)

from .ledger_entry import (
    LedgerEntryRecord,
    AccountBalanceRecord,
    date_to_ms,
)
