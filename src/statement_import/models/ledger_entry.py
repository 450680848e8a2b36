import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict

from statement_import.models.statement import EntryType, ParsedBalance, ParsedTransaction

logger = logging.getLogger(__name__)

# Stored text limits; longer parsed values are cut to fit
MAX_DESCRIPTION_LENGTH = 1000
MAX_DOCUMENT_ID_LENGTH = 100

IMPORT_RECORD_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, 'statement-import/records')


def import_record_id(account_id: str, import_hash: str) -> uuid.UUID:
    """
    Primary key of the record a fingerprint produces in an account.

    The same fingerprint always maps to the same key, so a conditional put
    rejects a record another import already stored.
    """
    return uuid.uuid5(IMPORT_RECORD_NAMESPACE, f"{account_id}|{import_hash}")


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def date_to_ms(value: datetime) -> int:
    """Milliseconds since epoch for the calendar day of `value`, at 12:00 UTC."""
    anchored = datetime(value.year, value.month, value.day, 12, 0, 0, tzinfo=timezone.utc)
    return int(anchored.timestamp() * 1000)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def _fit(value: Optional[str], limit: int) -> Optional[str]:
    if value is None or len(value) <= limit:
        return value
    logger.warning(f"Truncating a {len(value)} character value to {limit}")
    return value[:limit]


class LedgerEntryRecord(BaseModel):
    """
    A ledger entry as written by a statement import.

    Created from a ParsedTransaction; gains an entry id and timestamps here.
    """
    entry_id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="entryId")
    user_id: str = Field(alias="userId")
    account_id: str = Field(alias="accountId")
    type: EntryType
    amount_cents: int = Field(ge=0, alias="amountCents")
    description: str = Field(max_length=MAX_DESCRIPTION_LENGTH)
    details: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    document_id: Optional[str] = Field(default=None, alias="documentId", max_length=MAX_DOCUMENT_ID_LENGTH)
    date: int  # milliseconds since epoch
    import_hash: str = Field(alias="importHash")
    created_at: int = Field(default_factory=_now_ms, alias="createdAt")
    updated_at: int = Field(default_factory=_now_ms, alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False
    )

    @field_validator('details', 'document_id')
    @classmethod
    def drop_blank(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @classmethod
    def from_parsed(cls, user_id: str, account_id: str, parsed: ParsedTransaction) -> "LedgerEntryRecord":
        """Build the stored entry; over-long text is truncated, the fingerprint is kept."""
        return cls(
            entryId=import_record_id(account_id, parsed.import_hash),
            userId=user_id,
            accountId=account_id,
            type=parsed.type,
            amountCents=parsed.amount_cents,
            description=_fit(parsed.description, MAX_DESCRIPTION_LENGTH),
            details=_fit(parsed.details, MAX_DESCRIPTION_LENGTH),
            documentId=_fit(parsed.external_document_id, MAX_DOCUMENT_ID_LENGTH),
            date=date_to_ms(parsed.date),
            importHash=parsed.import_hash,
        )

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """Convert to DynamoDB item format."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data['entryId'] = str(self.entry_id)
        data['type'] = self.type.value
        return data


class AccountBalanceRecord(BaseModel):
    """A daily balance snapshot as written by a statement import."""
    balance_id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="balanceId")
    user_id: str = Field(alias="userId")
    account_id: str = Field(alias="accountId")
    date: int
    balance_cents: int = Field(alias="balanceCents")
    import_hash: str = Field(alias="importHash")
    created_at: int = Field(default_factory=_now_ms, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_parsed(cls, user_id: str, account_id: str, parsed: ParsedBalance) -> "AccountBalanceRecord":
        return cls(
            balanceId=import_record_id(account_id, parsed.import_hash),
            userId=user_id,
            accountId=account_id,
            date=date_to_ms(parsed.date),
            balanceCents=parsed.balance_cents,
            importHash=parsed.import_hash,
        )

    def to_dynamodb_item(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True)
        data['balanceId'] = str(self.balance_id)
        return data
