"""
Core database infrastructure for the import store.

This module provides:
- Lazy DynamoDB table and client access
- Decorators for error mapping, throttling retries and latency logging
- The conflict exception raised for cancelled transactional writes
"""

import os
import logging
import time
from typing import Dict, Any, Optional, Tuple, Callable, TypeVar
from functools import wraps

import boto3
from botocore.exceptions import ClientError
from pydantic import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar('T')

THROTTLING_ERROR_CODES = (
    'ProvisionedThroughputExceededException',
    'ThrottlingException',
    'RequestLimitExceeded',
)


class ConflictError(Exception):
    """A TransactWriteItems call was cancelled, e.g. by a failed condition."""
    pass


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', 'Unknown')


# ============================================================================
# Decorators
# ============================================================================

def dynamodb_operation(operation_name: Optional[str] = None):
    """
    Log DynamoDB failures with context and normalize their types.

    A cancelled transaction becomes ConflictError and a pydantic
    ValidationError becomes ValueError; other ClientErrors are re-raised.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            op_name = operation_name or func.__name__
            try:
                return func(*args, **kwargs)
            except ClientError as e:
                error_code = _error_code(e)
                logger.error(
                    f"{op_name} failed with {error_code}",
                    exc_info=True,
                    extra={'operation': op_name, 'error_code': error_code}
                )
                if error_code == 'TransactionCanceledException':
                    raise ConflictError(f"{op_name} was cancelled: {e}") from e
                raise
            except ValidationError as e:
                logger.error(f"Invalid record in {op_name}: {e}", extra={'operation': op_name})
                raise ValueError(f"Invalid data in {op_name}: {e}") from e
        return wrapper
    return decorator


def retry_on_throttle(
    max_attempts: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 5.0,
    retry_on: Tuple[str, ...] = THROTTLING_ERROR_CODES
):
    """
    Retry throttled calls, doubling the wait each time up to `max_delay`.

    Any other error, or the last failed attempt, propagates unchanged.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except ClientError as e:
                    error_code = _error_code(e)
                    if error_code not in retry_on or attempt >= max_attempts:
                        raise
                    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
                    logger.warning(
                        f"{func.__name__} throttled ({error_code}), "
                        f"attempt {attempt}/{max_attempts}, sleeping {delay:.2f}s"
                    )
                    time.sleep(delay)
                    attempt += 1
        return wrapper
    return decorator


def monitor_performance(
    operation_type: str = "db_operation",
    warn_threshold_ms: float = 1000,
    error_threshold_ms: float = 5000
):
    """Log each call's latency: debug when fast, warning or error when slow."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            started = time.monotonic()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed_ms = (time.monotonic() - started) * 1000
                context = {'operation': func.__name__, 'operation_type': operation_type,
                           'elapsed_ms': elapsed_ms}
                message = f"{func.__name__} took {elapsed_ms:.2f}ms"
                if elapsed_ms > error_threshold_ms:
                    logger.error(f"Very slow {operation_type}: {message}", extra=context)
                elif elapsed_ms > warn_threshold_ms:
                    logger.warning(f"Slow {operation_type}: {message}", extra=context)
                else:
                    logger.debug(message, extra=context)
        return wrapper
    return decorator


# ============================================================================
# Table Management
# ============================================================================

class DynamoDBTables:
    """
    Process-wide registry of the import tables.

    Table names come from the environment. Nothing touches AWS until a table
    or the client is first used.
    """
    _instance: Optional['DynamoDBTables'] = None

    # table key -> environment variable holding the table name
    TABLE_CONFIGS = {
        'ledger_entries': 'LEDGER_ENTRIES_TABLE',
        'account_balances': 'ACCOUNT_BALANCES_TABLE',
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._dynamodb: Optional[Any] = None
            self._client: Optional[Any] = None
            self._tables: Dict[str, Any] = {}
            self._initialized = True

    @property
    def resource(self) -> Any:
        if self._dynamodb is None:
            self._dynamodb = boto3.resource('dynamodb')
        return self._dynamodb

    @property
    def client(self) -> Any:
        """Low-level client, needed for TransactWriteItems."""
        if self._client is None:
            self._client = boto3.client('dynamodb')
        return self._client

    def table_name(self, table_key: str) -> Optional[str]:
        env_var_name = self.TABLE_CONFIGS.get(table_key)
        if not env_var_name:
            logger.error(f"Unknown table key: {table_key}")
            return None
        return os.environ.get(env_var_name)

    def _get_table(self, table_key: str) -> Optional[Any]:
        if table_key not in self._tables:
            table_name = self.table_name(table_key)
            if not table_name:
                logger.warning(f"{self.TABLE_CONFIGS.get(table_key)} is not set, table '{table_key}' unavailable")
                return None
            self._tables[table_key] = self.resource.Table(table_name)
            logger.info(f"Using table {table_name} for {table_key}")
        return self._tables[table_key]

    @property
    def ledger_entries(self) -> Any:
        return self._get_table('ledger_entries')

    @property
    def account_balances(self) -> Any:
        return self._get_table('account_balances')

    def reinitialize(self):
        """Forget cached boto3 objects so the next access rebuilds them."""
        self._dynamodb = None
        self._client = None
        self._tables.clear()


tables = DynamoDBTables()
