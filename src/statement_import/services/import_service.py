"""
Statement import service.

Parses an uploaded statement and reconciles the parsed records against the
store: fingerprints are checked in chunks, already-stored and repeated
records are dropped, and the rest are written in batches.
"""
import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Sequence, Set

from typing_extensions import Protocol

from statement_import.models.statement import (
    ImportResult,
    ParsedBankStatement,
    StatementImportSummary,
)
from statement_import.services.import_errors import StoreOperationError, UnreadableFileError
from statement_import.services.statement_parser import parse_bank_statement_file
from statement_import.utils.db import account_balance_store, chunked, ledger_entry_store
from statement_import.utils.file_analyzer import detect_format_from_extension
from statement_import.utils.import_config import ImportConfig, get_import_config

logger = logging.getLogger(__name__)


class ImportStore(Protocol):
    """
    What the reconciler needs from a store.

    A store may also set `max_in_values` and `max_write_batch` to advertise
    its own limits; configured chunk sizes never exceed them.
    """

    def existing_fingerprints(self, account_id: str, candidates: Set[str]) -> Set[str]:
        ...

    def persist_batch(self, account_id: str, records: Sequence[Any]) -> None:
        ...


StoreFactory = Callable[[str], ImportStore]


def _clamp(configured: int, limit: Optional[int]) -> int:
    if limit is None:
        return configured
    return min(configured, limit)


# ============================================================================
# Per-account import lock
# ============================================================================

# An entry lives only while some import holds a reference to its lock
_account_locks: "weakref.WeakValueDictionary[str, Any]" = weakref.WeakValueDictionary()
_account_locks_guard = threading.Lock()


@contextmanager
def account_import_lock(account_id: str) -> Iterator[None]:
    """Serialize imports into the same account within this process."""
    with _account_locks_guard:
        lock = _account_locks.get(str(account_id))
        if lock is None:
            lock = threading.Lock()
            _account_locks[str(account_id)] = lock
    with lock:
        yield


# ============================================================================
# Reconciliation
# ============================================================================

class BatchReconciler:
    """Imports the records whose fingerprints the store has not seen yet."""

    def __init__(self, store: ImportStore, config: Optional[ImportConfig] = None):
        self.store = store
        self.config = config or get_import_config()

    @property
    def existence_chunk_size(self) -> int:
        return _clamp(self.config.existence_check_chunk_size, getattr(self.store, 'max_in_values', None))

    @property
    def write_batch_size(self) -> int:
        return _clamp(self.config.write_batch_size, getattr(self.store, 'max_write_batch', None))

    def find_existing(self, account_id: str, fingerprints: Sequence[str]) -> Set[str]:
        """Union of the store's answers over fixed-size fingerprint chunks."""
        seen: Set[str] = set()
        for chunk in chunked(fingerprints, self.existence_chunk_size):
            try:
                seen |= set(self.store.existing_fingerprints(account_id, set(chunk)))
            except Exception as e:
                raise StoreOperationError(f"Existence check failed for account {account_id}: {str(e)}") from e
        return seen

    def reconcile(self, account_id: str, records: Sequence[Any]) -> ImportResult:
        """
        Persist the records not already stored for the account.

        Deduplication runs against the whole input before the first write, so
        a fingerprint repeated inside the input is imported once. Each write
        batch is atomic; batches are not atomic with each other.

        Raises:
            StoreOperationError: If the store fails; carries the number of
                records committed before the failure
        """
        if not records:
            return ImportResult()

        fingerprints = list(dict.fromkeys(record.import_hash for record in records))
        seen = self.find_existing(account_id, fingerprints)

        to_import: List[Any] = []
        for record in records:
            if record.import_hash in seen:
                continue
            seen.add(record.import_hash)
            to_import.append(record)

        imported = 0
        for batch in chunked(to_import, self.write_batch_size):
            try:
                self.store.persist_batch(account_id, batch)
            except Exception as e:
                logger.error(f"Write batch failed for account {account_id} after {imported} records: {str(e)}")
                raise StoreOperationError(
                    f"Write batch failed for account {account_id}: {str(e)}",
                    imported_before_failure=imported
                ) from e
            imported += len(batch)

        result = ImportResult(imported=imported, skipped=len(records) - imported)
        logger.info(f"Reconciled {len(records)} records for account {account_id}: "
                    f"{result.imported} imported, {result.skipped} skipped")
        return result


class StatementImportService:
    """Parse statement files and import them into an account."""

    def __init__(
        self,
        config: Optional[ImportConfig] = None,
        transaction_store_factory: StoreFactory = ledger_entry_store,
        balance_store_factory: StoreFactory = account_balance_store,
    ):
        self.config = config or get_import_config()
        self.transaction_store_factory = transaction_store_factory
        self.balance_store_factory = balance_store_factory

    def parse_statement(self, content: bytes, filename: str) -> ParsedBankStatement:
        """
        Parse raw upload bytes without touching the store.

        Raises:
            UnreadableFileError: If the file is too large or is not text
        """
        if len(content) > self.config.max_file_bytes:
            raise UnreadableFileError(
                f"File {filename} is {len(content)} bytes, the limit is {self.config.max_file_bytes}"
            )
        return parse_bank_statement_file(content, filename)

    def import_statement(self, user_id: str, account_id: str, content: bytes, filename: str) -> StatementImportSummary:
        """
        Parse a statement and import its transactions and balances.

        Transactions and balances are reconciled separately, each against its
        own store. A file with nothing recognizable imports nothing.

        Raises:
            StoreOperationError: If a store fails; counts every record
                committed before the failure, transactions and balances
        """
        statement = self.parse_statement(content, filename)
        file_format = detect_format_from_extension(filename)

        if statement.is_empty:
            logger.info(f"No transactions found in {filename}")
            return StatementImportSummary(fileName=filename, fileFormat=file_format)

        with account_import_lock(account_id):
            transactions = BatchReconciler(self.transaction_store_factory(user_id), self.config).reconcile(
                account_id, statement.transactions
            )
            try:
                balances = BatchReconciler(self.balance_store_factory(user_id), self.config).reconcile(
                    account_id, statement.balances
                )
            except StoreOperationError as e:
                raise StoreOperationError(
                    str(e),
                    imported_before_failure=transactions.imported + e.imported_before_failure
                ) from e

        return StatementImportSummary(
            fileName=filename,
            fileFormat=file_format,
            transactions=transactions,
            balances=balances,
        )
