"""
DynamoDB store for imported ledger entries and balance snapshots.

Implements the two calls the batch reconciler needs: a fingerprint
existence check and an atomic batch write. A record's primary key is
derived from its account and fingerprint, so both calls work on keys.
"""

import logging
from typing import Any, Callable, Dict, List, Sequence, Set

from statement_import.models.ledger_entry import AccountBalanceRecord, LedgerEntryRecord, import_record_id
from statement_import.services.import_errors import StoreOperationError
from .base import (
    tables,
    dynamodb_operation,
    retry_on_throttle,
    monitor_performance,
)
from .helpers import batch_get_items, serialize_item

logger = logging.getLogger(__name__)

# DynamoDB limits: keys in BatchGetItem, items in TransactWriteItems
DYNAMODB_MAX_BATCH_GET_KEYS = 100
DYNAMODB_MAX_TRANSACT_ITEMS = 100

RecordFactory = Callable[[str, str, Any], Any]


class DynamoDBImportStore:
    """
    Import store backed by one DynamoDB table.

    Each instance writes records for a single user; the account is passed on
    every call.
    """
    max_in_values = DYNAMODB_MAX_BATCH_GET_KEYS
    max_write_batch = DYNAMODB_MAX_TRANSACT_ITEMS

    def __init__(self, table_key: str, key_attribute: str, user_id: str, record_factory: RecordFactory):
        self.table_key = table_key
        self.key_attribute = key_attribute
        self.user_id = user_id
        self.record_factory = record_factory

    def _table(self) -> Any:
        table = getattr(tables, self.table_key)
        if table is None:
            raise StoreOperationError(f"Table '{self.table_key}' is not configured")
        return table

    @monitor_performance(operation_type="query", warn_threshold_ms=500)
    @retry_on_throttle()
    @dynamodb_operation("existing_fingerprints")
    def existing_fingerprints(self, account_id: str, candidates: Set[str]) -> Set[str]:
        """
        Return the subset of `candidates` already stored for the account.

        Reads exactly one key per candidate with a strongly consistent read,
        however many records the account holds.
        """
        if not candidates:
            return set()
        if len(candidates) > self.max_in_values:
            raise ValueError(
                f"At most {self.max_in_values} fingerprints per existence check, got {len(candidates)}"
            )

        table_name = self._table().table_name
        keys = [
            {self.key_attribute: str(import_record_id(str(account_id), fingerprint))}
            for fingerprint in sorted(candidates)
        ]
        items = batch_get_items(
            tables.resource,
            table_name,
            keys,
            ConsistentRead=True,
            ProjectionExpression='importHash',
        )
        found = {item['importHash'] for item in items if item.get('importHash') in candidates}
        logger.debug(f"{len(found)} of {len(candidates)} fingerprints already stored in {self.table_key}")
        return found

    @monitor_performance(operation_type="write")
    @retry_on_throttle()
    @dynamodb_operation("persist_batch")
    def persist_batch(self, account_id: str, records: Sequence[Any]) -> None:
        """
        Write all records in one TransactWriteItems call: all or nothing.

        Each put is conditional on its key being absent, so a record that a
        concurrent import already stored cancels the whole batch.
        """
        if not records:
            return
        if len(records) > self.max_write_batch:
            raise ValueError(
                f"At most {self.max_write_batch} records per write batch, got {len(records)}"
            )

        table_name = self._table().table_name
        transact_items: List[Dict[str, Any]] = []
        for parsed in records:
            item = self.record_factory(self.user_id, str(account_id), parsed).to_dynamodb_item()
            transact_items.append({
                'Put': {
                    'TableName': table_name,
                    'Item': serialize_item(item),
                    'ConditionExpression': f'attribute_not_exists({self.key_attribute})',
                }
            })

        tables.client.transact_write_items(TransactItems=transact_items)
        logger.info(f"Persisted {len(transact_items)} records to {table_name}")


def ledger_entry_store(user_id: str) -> DynamoDBImportStore:
    """Store for ParsedTransaction records."""
    return DynamoDBImportStore('ledger_entries', 'entryId', user_id, LedgerEntryRecord.from_parsed)


def account_balance_store(user_id: str) -> DynamoDBImportStore:
    """Store for ParsedBalance records."""
    return DynamoDBImportStore('account_balances', 'balanceId', user_id, AccountBalanceRecord.from_parsed)
