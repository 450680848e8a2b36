"""
Parsed bank statement models.

These are the ephemeral values produced by a parse call and consumed by the
import step. They carry no storage identity of their own.
"""
import re
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict


IMPORT_HASH_PATTERN = re.compile(r'^[0-9a-f]{16}$')


class EntryType(str, enum.Enum):
    """Enum for ledger entry types"""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"  # never inferred from a statement


class StatementFormat(str, enum.Enum):
    """Enum for supported statement file formats"""
    CSV = "csv"
    OFX = "ofx"
    QFX = "qfx"
    OTHER = "other"


def _check_import_hash(v: str) -> str:
    if not IMPORT_HASH_PATTERN.match(v):
        raise ValueError(f"Import hash must be 16 lowercase hex characters, got {v!r}")
    return v


class ParsedTransaction(BaseModel):
    """
    A single movement read from a statement.

    The amount is always the absolute value in minor units; the direction of
    the movement lives only in `type`.
    """
    date: datetime
    description: str
    details: Optional[str] = None
    external_document_id: Optional[str] = Field(default=None, alias="externalDocumentId")
    amount_cents: int = Field(ge=0, alias="amountCents")
    type: EntryType
    import_hash: str = Field(alias="importHash")

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False,
        frozen=True
    )

    @field_validator('import_hash')
    @classmethod
    def validate_import_hash(cls, v: str) -> str:
        return _check_import_hash(v)

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: EntryType) -> EntryType:
        if v == EntryType.TRANSFER:
            raise ValueError("Statement transactions are either income or expense")
        return v


class ParsedBalance(BaseModel):
    """A bank-reported running balance on a given day."""
    date: datetime
    balance_cents: int = Field(alias="balanceCents")
    import_hash: str = Field(alias="importHash")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True
    )

    @field_validator('import_hash')
    @classmethod
    def validate_import_hash(cls, v: str) -> str:
        return _check_import_hash(v)


class ParsedBankStatement(BaseModel):
    """Transactions and balances read from one source file, in row order."""
    transactions: List[ParsedTransaction] = Field(default_factory=list)
    balances: List[ParsedBalance] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.transactions and not self.balances


class ImportResult(BaseModel):
    """Outcome of reconciling one set of parsed records against the store."""
    imported: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.imported + self.skipped


class StatementImportSummary(BaseModel):
    """Combined outcome of importing a whole statement file."""
    file_name: str = Field(alias="fileName")
    file_format: StatementFormat = Field(alias="fileFormat")
    transactions: ImportResult = Field(default_factory=ImportResult)
    balances: ImportResult = Field(default_factory=ImportResult)

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True
    )
