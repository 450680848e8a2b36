"""
Bank statement ingestion backend.

Turns CSV and OFX exports from arbitrary banks into normalized, de-duplicated
ledger entries and daily balance snapshots.
"""

__version__ = "0.1.0"
