"""
Date parsing for bank statements.

Dates are anchored at 12:00 so that formatting them back to a date-only
string never shifts the day across a timezone boundary.
"""
import re
import logging
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

BR_DATE = re.compile(r'^(\d{2})/(\d{2})/(\d{4})$')
ISO_DATE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')
OFX_DATE = re.compile(r'^(\d{4})(\d{2})(\d{2})')

ANCHOR_HOUR = 12


def _anchored_date(year: str, month: str, day: str) -> Optional[datetime]:
    try:
        return datetime(int(year), int(month), int(day), ANCHOR_HOUR, 0, 0)
    except ValueError:
        return None


def parse_statement_date(raw: str) -> Optional[datetime]:
    """
    Parse DD/MM/YYYY or YYYY-MM-DD (trailing text ignored).

    Returns None for any other format, for the 00 day/month placeholders
    some banks emit, and for impossible calendar dates.
    """
    raw = (raw or '').strip()

    br_match = BR_DATE.match(raw)
    if br_match:
        day, month, year = br_match.groups()
        if day == '00' or month == '00':
            return None
        return _anchored_date(year, month, day)

    iso_match = ISO_DATE.match(raw)
    if iso_match:
        year, month, day = iso_match.groups()
        return _anchored_date(year, month, day)

    return None


def parse_ofx_date(raw: str) -> Optional[datetime]:
    """Parse the YYYYMMDD prefix of an OFX DTPOSTED value."""
    ofx_match = OFX_DATE.match((raw or '').strip())
    if not ofx_match:
        return None
    year, month, day = ofx_match.groups()
    return _anchored_date(year, month, day)


def format_hash_date(value: datetime) -> str:
    """YYYY-MM-DD as used inside import fingerprints."""
    return value.strftime('%Y-%m-%d')
