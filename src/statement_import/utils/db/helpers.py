"""
Helper functions for database operations.

This module provides:
- Chunking for size-limited store calls
- Batched key lookups
- Low-level item serialization
"""

import logging
from typing import List, Dict, Any, Iterator, Sequence, TypeVar

from boto3.dynamodb.types import TypeSerializer

logger = logging.getLogger(__name__)

# Type variable for generic functions
T = TypeVar('T')

_serializer = TypeSerializer()


# ============================================================================
# Chunking
# ============================================================================

def chunked(items: Sequence[T], chunk_size: int) -> Iterator[List[T]]:
    """
    Yield consecutive slices of at most `chunk_size` items, preserving order.

    Example:
        for chunk in chunked(hashes, 30):
            query(chunk)
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for i in range(0, len(items), chunk_size):
        yield list(items[i:i + chunk_size])


# ============================================================================
# Batch Reads
# ============================================================================

def batch_get_items(resource: Any, table_name: str, keys: List[Dict[str, Any]],
                    **request: Any) -> List[Dict[str, Any]]:
    """
    Fetch items by primary key, re-requesting UnprocessedKeys until done.

    Args:
        resource: DynamoDB service resource
        table_name: Table to read
        keys: Primary keys, at most 100 per call
        **request: Extra per-table arguments, e.g. ConsistentRead

    Returns:
        The items that exist, in no particular order
    """
    items: List[Dict[str, Any]] = []
    pending: Dict[str, Any] = {table_name: dict(request, Keys=keys)}
    while pending:
        response = resource.batch_get_item(RequestItems=pending)
        items.extend(response.get('Responses', {}).get(table_name, []))
        pending = response.get('UnprocessedKeys') or {}
    return items


# ============================================================================
# Serialization
# ============================================================================

def serialize_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a plain item to the low-level AttributeValue format."""
    return {key: _serializer.serialize(value) for key, value in item.items()}

