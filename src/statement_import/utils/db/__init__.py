"""
Database utilities for DynamoDB operations.

This module provides a clean interface for all database operations used by
statement import.
"""

# ============================================================================
# Core Infrastructure
# ============================================================================

from .base import (
    # Table management
    tables,
    DynamoDBTables,

    # Exceptions
    ConflictError,

    # Decorators
    dynamodb_operation,
    retry_on_throttle,
    monitor_performance,
)

from .helpers import (
    chunked,
    batch_get_items,
    serialize_item,
)

# ============================================================================
# Statement Import Store
# ============================================================================

from .statement_imports import (
    DynamoDBImportStore,
    ledger_entry_store,
    account_balance_store,
)
